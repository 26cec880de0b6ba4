"""Product model."""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint
from sqlalchemy.sql import func
from retail_pos.database import Base, IdType


class Product(Base):
    """Catalog product with its on-hand stock."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('stock >= 0', name='ck_product_stock_non_negative'),
        CheckConstraint('purchase_price >= 0', name='ck_product_purchase_price_non_negative'),
        CheckConstraint('sale_price >= 0', name='ck_product_sale_price_non_negative'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)
    barcode = Column(String(64), nullable=True, index=True)
    stock = Column(Integer, nullable=False, default=0, server_default='0')
    purchase_price = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    sale_price = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"

    @property
    def in_stock(self):
        return (self.stock or 0) > 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'barcode': self.barcode,
            'stock': self.stock,
            'purchase_price': str(self.purchase_price),
            'sale_price': str(self.sale_price),
        }
