"""
Shipment database model.

A shipment is one package tracked from intake to delivery. Addresses,
dimensions, current location and route are stored as JSON documents.
"""

from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum, JSON, Text
from sqlalchemy.orm import relationship
from shippro.app.db.session import Base, new_object_id, utcnow
from shippro.app.models.shipment_enums import ShipmentStatus, PaymentStatus


class Shipment(Base):
    """
    Shipment model for the tracking platform.

    ``tracking_number`` is the human-facing identifier (``SP`` + 9 digits),
    stored upper-case and never changed after creation.
    """
    __tablename__ = "shipments"

    id = Column(String(24), primary_key=True, default=new_object_id)
    tracking_number = Column(String(32), unique=True, nullable=False, index=True)

    # Sender
    sender_name = Column(String(255), nullable=False)
    sender_email = Column(String(255), nullable=False, index=True)
    sender_phone = Column(String(50), nullable=True)
    sender_address = Column(JSON, nullable=True)

    # Receiver
    receiver_name = Column(String(255), nullable=False)
    receiver_email = Column(String(255), nullable=False, index=True)
    receiver_phone = Column(String(50), nullable=True)
    receiver_address = Column(JSON, nullable=True)

    # Service and classification
    service_id = Column(String(24), ForeignKey("services.id"), nullable=False, index=True)
    shipment_type = Column(String(50), nullable=False, default="INTERNATIONAL_SHIPPING")
    shipment_mode = Column(String(50), nullable=False, default="LAND_SHIPPING")

    # Package
    weight = Column(Float, nullable=False)
    dimensions = Column(JSON, nullable=True)
    value = Column(Float, nullable=True)
    description = Column(Text, nullable=False)
    special_instructions = Column(Text, nullable=True)

    # Status
    status = Column(Enum(ShipmentStatus), default=ShipmentStatus.PENDING, nullable=False, index=True)

    # Pricing and payment
    estimated_cost = Column(Float, nullable=False, default=0.0)
    final_cost = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False, default="USD")
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    payment_mode = Column(String(50), nullable=False, default="CARD")

    # Delivery
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    actual_delivery = Column(DateTime(timezone=True), nullable=True)
    current_location = Column(JSON, nullable=True)
    route = Column(JSON, nullable=False, default=list)

    created_by = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    service = relationship("Service", lazy="selectin")

    def __repr__(self):
        return f"<Shipment(id={self.id}, tracking='{self.tracking_number}', status='{self.status.value}')>"
