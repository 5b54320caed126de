"""
Service catalog database model.
"""

from sqlalchemy import Column, String, Boolean, DateTime, JSON, Text
from shippro.app.db.session import Base, new_object_id, utcnow


class Service(Base):
    """
    A named shipping offering (Express, Standard, ...).

    ``price`` is a display string such as "$25.00", not a structured amount.
    """
    __tablename__ = "services"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    features = Column(JSON, nullable=False, default=list)
    price = Column(String(50), nullable=True)
    icon = Column(String(16), nullable=True)
    active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Service(id={self.id}, name='{self.name}', active={self.active})>"
