"""
Email Preferences database model.
"""

from sqlalchemy import Column, String, Boolean, DateTime
from shippro.app.db.session import Base, new_object_id, utcnow


class EmailPreferences(Base):
    """
    Per-user opt-in flags for lifecycle emails (one row per user).

    Shipment event flags default to True, ``admin_notifications`` to False.
    """
    __tablename__ = "email_preferences"

    id = Column(String(24), primary_key=True, default=new_object_id)
    user_id = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)

    shipment_created = Column(Boolean, default=True, nullable=False)
    shipment_picked_up = Column(Boolean, default=True, nullable=False)
    shipment_in_transit = Column(Boolean, default=True, nullable=False)
    shipment_out_for_delivery = Column(Boolean, default=True, nullable=False)
    shipment_delivered = Column(Boolean, default=True, nullable=False)
    shipment_cancelled = Column(Boolean, default=True, nullable=False)
    admin_notifications = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<EmailPreferences(user={self.user_id}, email='{self.email}')>"
