"""
Dashboard service.
Read-only figures derived from the sales ledger: revenue, counts, the trailing
revenue series and the latest sales with resolved names.
"""

from datetime import datetime, date, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from flask import current_app, has_app_context
from sqlalchemy import func

from retail_pos.models import Customer, Employee, Product, Sale
from retail_pos.utils.formatters import day_label, format_datetime, format_money, format_number

DELETED_CUSTOMER = 'Deleted customer'
DELETED_EMPLOYEE = 'Deleted employee'


def get_day_range(day: date) -> Tuple[datetime, datetime]:
    """
    Get datetime range for one day (local server time).

    Returns:
        tuple: (start_dt, end_dt) with start at 00:00 and end exclusive
    """
    start_dt = datetime.combine(day, time.min)
    end_dt = start_dt + timedelta(days=1)
    return start_dt, end_dt


def get_revenue(session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Decimal:
    """Sum of sale totals in [start, end); unbounded ends are not filtered."""
    query = session.query(func.coalesce(func.sum(Sale.total_amount), 0))
    if start is not None:
        query = query.filter(Sale.created_at >= start)
    if end is not None:
        query = query.filter(Sale.created_at < end)
    return Decimal(str(query.scalar() or 0)).quantize(Decimal('0.01'))


def get_stats(session) -> dict:
    """Total revenue plus customer and product counts."""
    return {
        'revenue': get_revenue(session),
        'customers': session.query(func.count(Customer.id)).scalar() or 0,
        'products': session.query(func.count(Product.id)).scalar() or 0,
    }


def get_revenue_series(session, days: int = 7, today: Optional[date] = None) -> List[dict]:
    """
    Revenue per day for the trailing `days` days, today included.

    Returns:
        list of dicts ordered oldest first, keys: date, label, revenue
    """
    today = today or date.today()
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        start_dt, end_dt = get_day_range(day)
        series.append({
            'date': day.isoformat(),
            'label': day_label(day),
            'revenue': get_revenue(session, start_dt, end_dt),
        })
    return series


def get_recent_sales(session, limit: int = 5) -> List[dict]:
    """
    Latest sales with customer and employee names resolved.

    A sale pointing at a deleted customer or employee gets a placeholder name
    for that row only.
    """
    sales = session.query(Sale).order_by(
        Sale.created_at.desc(), Sale.id.desc()
    ).limit(limit).all()

    customer_names = _names_by_id(session, Customer, {s.customer_id for s in sales if s.customer_id is not None})
    employee_names = _names_by_id(session, Employee, {s.employee_id for s in sales if s.employee_id is not None})

    recent = []
    for sale in sales:
        if sale.customer_id is None:
            customer_name = None
        else:
            customer_name = customer_names.get(sale.customer_id, DELETED_CUSTOMER)

        recent.append({
            'id': sale.id,
            'created_at': sale.created_at,
            'total_amount': Decimal(str(sale.total_amount)),
            'payment_method': sale.payment_method,
            'customer_id': sale.customer_id,
            'customer_name': customer_name,
            'employee_id': sale.employee_id,
            'employee_name': employee_names.get(sale.employee_id, DELETED_EMPLOYEE),
        })
    return recent


def get_dashboard_data(session, today: Optional[date] = None) -> dict:
    """
    Get all dashboard data in one call.

    Returns:
        dict with keys:
            - stats: revenue, customers, products (plus revenue_display)
            - today_revenue / today_revenue_display
            - revenue_series: list of {date, label, revenue, revenue_display}
            - recent_sales: list of dicts with display strings
    """
    recent_limit, chart_days, currency = _dashboard_settings()
    today = today or date.today()

    stats = get_stats(session)
    stats['revenue_display'] = format_money(stats['revenue'], currency)
    stats['customers_display'] = format_number(stats['customers'])
    stats['products_display'] = format_number(stats['products'])

    today_start, today_end = get_day_range(today)
    today_revenue = get_revenue(session, today_start, today_end)

    series = get_revenue_series(session, days=chart_days, today=today)
    for point in series:
        point['revenue_display'] = format_money(point['revenue'], currency)

    recent_sales = get_recent_sales(session, limit=recent_limit)
    for row in recent_sales:
        row['total_display'] = format_money(row['total_amount'], currency)
        row['created_at_display'] = format_datetime(row['created_at'])

    return {
        'stats': stats,
        'today_revenue': today_revenue,
        'today_revenue_display': format_money(today_revenue, currency),
        'revenue_series': series,
        'recent_sales': recent_sales,
    }


def _names_by_id(session, model, ids) -> Dict[int, str]:
    """One batched lookup per entity type."""
    if not ids:
        return {}
    rows = session.query(model.id, model.name).filter(model.id.in_(ids)).all()
    return {row.id: row.name for row in rows}


def _dashboard_settings():
    if has_app_context():
        config = current_app.config
        return (
            int(config.get('RECENT_SALES_LIMIT', 5)),
            int(config.get('REVENUE_CHART_DAYS', 7)),
            config.get('CURRENCY_SYMBOL'),
        )
    return 5, 7, None
