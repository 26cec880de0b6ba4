"""Sale Item model."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from retail_pos.database import Base, IdType


class SaleItem(Base):
    """Sale line with the unit price captured at time of sale."""

    __tablename__ = 'sale_item'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_sale_item_quantity_positive'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    sale_id = Column(IdType, ForeignKey('sale.id'), nullable=False, index=True)
    product_id = Column(IdType, ForeignKey('product.id'), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price_at_sale = Column(Numeric(12, 2), nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='items')
    product = relationship('Product')

    def __repr__(self):
        return f"<SaleItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"

    @property
    def line_total(self):
        return self.quantity * self.price_at_sale

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'product_name': self.product.name if self.product else None,
            'quantity': self.quantity,
            'price_at_sale': str(self.price_at_sale),
            'line_total': str(self.line_total),
        }
