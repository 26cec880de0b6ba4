from datetime import date, datetime
from decimal import Decimal

from retail_pos.utils.formatters import day_label, format_date, format_datetime, format_money, format_number


class TestNumbers:

    def test_thousands_separator(self):
        assert format_number(1500) == '1,500'
        assert format_number(1234567) == '1,234,567'

    def test_trailing_zero_decimals_dropped(self):
        assert format_number(Decimal('185.00')) == '185'
        assert format_number(Decimal('1500.50')) == '1,500.5'

    def test_fixed_decimals(self):
        assert format_number(Decimal('2'), decimals=2) == '2.00'

    def test_invalid_values(self):
        assert format_number(None) == '-'
        assert format_number('') == '-'
        assert format_number('abc') == '-'

    def test_zero(self):
        assert format_number(0) == '0'


class TestMoney:

    def test_two_decimals(self):
        assert format_money(Decimal('1500')) == '1,500.00'

    def test_negative_with_symbol(self):
        assert format_money(Decimal('-20.5'), 'IQD') == '-20.50 IQD'

    def test_none(self):
        assert format_money(None, 'IQD') == '-'


class TestDates:

    def test_format_date(self):
        assert format_date(date(2026, 1, 12)) == '2026-01-12'
        assert format_date(datetime(2026, 1, 12, 15, 30)) == '2026-01-12'
        assert format_date(None) == '-'

    def test_format_datetime(self):
        assert format_datetime(datetime(2026, 1, 12, 15, 30)) == '2026-01-12 15:30'
        assert format_datetime(datetime(2026, 1, 12, 15, 30), with_time=False) == '2026-01-12'
        assert format_datetime(None) == '-'

    def test_day_label(self):
        # 2026-01-12 is a Monday
        assert day_label(date(2026, 1, 12)) == 'Mon 12'
