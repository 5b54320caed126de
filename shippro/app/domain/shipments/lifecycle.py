"""
Shipment Status Lifecycle.

Pure rules for the shipment state machine:

    PENDING → PICKED_UP → IN_TRANSIT → OUT_FOR_DELIVERY → DELIVERED
    CANCELLED is reachable from every non-terminal status.
"""

import re
from typing import Optional, Union

from shippro.app.models.shipment_enums import ShipmentStatus

TRACKING_NUMBER_PATTERN = re.compile(r"^SP\d{9}$")
OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

INITIAL_STATUS = ShipmentStatus.PENDING
TERMINAL_STATUSES = frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.CANCELLED})

# Shipments still moving through the network
ACTIVE_STATUSES = (
    ShipmentStatus.PICKED_UP,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY,
)

_PROGRESS = {
    ShipmentStatus.PENDING.value: 0,
    ShipmentStatus.PICKED_UP.value: 25,
    ShipmentStatus.IN_TRANSIT.value: 50,
    ShipmentStatus.OUT_FOR_DELIVERY.value: 75,
    ShipmentStatus.DELIVERED.value: 100,
}


def _status_value(status: Union[ShipmentStatus, str, None]) -> Optional[str]:
    if isinstance(status, ShipmentStatus):
        return status.value
    return status


def progress(status: Union[ShipmentStatus, str, None]) -> int:
    """Progress percentage for a status; CANCELLED and unknown values map to 0."""
    return _PROGRESS.get(_status_value(status), 0)


def is_terminal(status: Union[ShipmentStatus, str, None]) -> bool:
    return _status_value(status) in {s.value for s in TERMINAL_STATUSES}


def can_transition(current: ShipmentStatus, new: ShipmentStatus) -> bool:
    """
    Whether a status change is allowed.

    Terminal shipments are locked; any other move is accepted so operators can
    correct a mis-scanned status.
    """
    if current == new:
        return True
    return not is_terminal(current)


def looks_like_object_id(identifier: str) -> bool:
    """24 hex characters, the shape of an internal shipment id."""
    return bool(OBJECT_ID_PATTERN.match(identifier or ""))


def normalize_tracking_number(value: str) -> str:
    return value.strip().upper()


def tracking_number_from_millis(millis: int) -> str:
    """``SP`` followed by the last nine digits of a millisecond timestamp."""
    return f"SP{str(millis)[-9:].zfill(9)}"


def default_event_description(status: Union[ShipmentStatus, str]) -> str:
    return f"Shipment status updated to {_status_value(status)}"
