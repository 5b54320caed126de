"""
Contact Form database model.
"""

from sqlalchemy import Column, String, DateTime, Text
from shippro.app.db.session import Base, new_object_id, utcnow


class ContactForm(Base):
    """Inbound lead submitted from the public contact page."""
    __tablename__ = "contact_forms"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    service_type = Column(String(100), nullable=True)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="NEW")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<ContactForm(id={self.id}, email='{self.email}')>"
