"""
Tracking Event database model.

Append-only log of status and location changes for a shipment.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Text
from shippro.app.db.session import Base, new_object_id, utcnow


class TrackingEvent(Base):
    """
    One immutable entry in a shipment's history.

    ``status`` is a free-text label ("Shipment created", "IN_TRANSIT", ...),
    not constrained to ShipmentStatus.
    """
    __tablename__ = "tracking_events"

    id = Column(String(24), primary_key=True, default=new_object_id)
    shipment_id = Column(String(24), ForeignKey("shipments.id"), nullable=False, index=True)

    status = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(JSON, nullable=True)

    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<TrackingEvent(id={self.id}, shipment={self.shipment_id}, status='{self.status}')>"
