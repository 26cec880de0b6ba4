"""Employee model - staff profile linked to exactly one login principal."""
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from retail_pos.database import Base, IdType


class EmployeeRole(str, enum.Enum):
    """Roles gating administrative capability."""
    ADMIN = 'admin'
    CASHIER = 'cashier'


class Employee(Base):
    """Employee profile."""

    __tablename__ = 'employee'

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default=EmployeeRole.CASHIER.value)
    user_id = Column(IdType, ForeignKey('app_user.id'), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    user = relationship('AppUser', back_populates='employee')

    def __repr__(self):
        return f"<Employee(id={self.id}, name='{self.name}', role='{self.role}')>"

    def is_admin(self):
        """Check if employee may use administrative features."""
        return self.role == EmployeeRole.ADMIN.value

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'role': self.role,
            'user_id': self.user_id,
            'email': self.user.email if self.user else None,
        }
