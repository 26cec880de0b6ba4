"""Customer model."""
from sqlalchemy import Column, String, Text, Numeric, DateTime
from sqlalchemy.sql import func
from retail_pos.database import Base, IdType


class Customer(Base):
    """Customer with a running credit (loan) balance."""

    __tablename__ = 'customer'

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    # Positive means the customer owes the business
    loan_balance = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}', loan_balance={self.loan_balance})>"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'loan_balance': str(self.loan_balance),
        }
