"""Sale model."""
import enum
from sqlalchemy import Column, String, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from retail_pos.database import Base, IdType


class PaymentMethod(str, enum.Enum):
    """How a sale was settled."""
    CASH = 'cash'
    LOAN = 'loan'


class Sale(Base):
    """Committed sale header. Immutable once written."""

    __tablename__ = 'sale'
    __table_args__ = (
        CheckConstraint("payment_method IN ('cash', 'loan')", name='ck_sale_payment_method'),
        CheckConstraint(
            "payment_method <> 'loan' OR customer_id IS NOT NULL",
            name='ck_sale_loan_requires_customer'
        ),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, index=True)  # local wall-clock
    # No FK: history keeps the reference after the employee/customer is deleted
    employee_id = Column(IdType, nullable=False, index=True)
    customer_id = Column(IdType, nullable=True, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(10), nullable=False, default=PaymentMethod.CASH.value)

    # Idempotency key to prevent duplicate sales on client retry
    idempotency_key = Column(String(64), unique=True, nullable=True, index=True)

    # Relationships
    items = relationship('SaleItem', back_populates='sale', cascade='all, delete-orphan',
                         order_by='SaleItem.id')

    def __repr__(self):
        return f"<Sale(id={self.id}, total_amount={self.total_amount}, payment_method='{self.payment_method}')>"

    def to_dict(self, include_items=False):
        data = {
            'id': self.id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'employee_id': self.employee_id,
            'customer_id': self.customer_id,
            'total_amount': str(self.total_amount),
            'payment_method': self.payment_method,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data
