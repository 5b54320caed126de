"""
CSV export of shipments.
"""

import csv
import io
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from shippro.app.models.shipment import Shipment

EXPORT_FILENAME = "shipments-export.csv"

EXPORT_HEADER = [
    "Tracking Number",
    "Status",
    "Sender Name",
    "Sender Email",
    "Sender Phone",
    "Sender Address",
    "Receiver Name",
    "Receiver Email",
    "Receiver Phone",
    "Receiver Address",
    "Service Type",
    "Weight (kg)",
    "Dimensions",
    "Estimated Cost",
    "Final Cost",
    "Currency",
    "Payment Status",
    "Created Date",
    "Updated Date",
]


def format_address(address: Optional[Dict[str, Any]]) -> str:
    """``street, city, state postal, country``"""
    if not address:
        return ""
    state_postal = f"{address.get('state', '')} {address.get('postalCode', '')}".strip()
    return ", ".join([
        str(address.get("street", "")),
        str(address.get("city", "")),
        state_postal,
        str(address.get("country", "")),
    ])


def format_dimensions(dimensions: Optional[Dict[str, Any]]) -> str:
    if not dimensions:
        return ""
    return (
        f"{dimensions.get('length')}x{dimensions.get('width')}x{dimensions.get('height')} "
        f"{dimensions.get('unit', 'cm')}"
    )


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def single_line(value: str) -> str:
    """Collapse embedded line breaks so each shipment stays on one CSV line."""
    return " ".join(value.splitlines()) if value else value


def shipment_row(shipment: Shipment) -> List[str]:
    service_name = shipment.service.name if shipment.service else shipment.service_id
    row = [
        shipment.tracking_number,
        shipment.status.value,
        shipment.sender_name,
        shipment.sender_email,
        _text(shipment.sender_phone),
        format_address(shipment.sender_address),
        shipment.receiver_name,
        shipment.receiver_email,
        _text(shipment.receiver_phone),
        format_address(shipment.receiver_address),
        _text(service_name),
        _text(shipment.weight),
        format_dimensions(shipment.dimensions),
        _text(shipment.estimated_cost),
        _text(shipment.final_cost),
        shipment.currency,
        shipment.payment_status.value,
        format_date(shipment.created_at),
        format_date(shipment.updated_at),
    ]
    return [single_line(cell) for cell in row]


def shipments_to_csv(shipments: Iterable[Shipment]) -> str:
    """Header plus one line per shipment, every field double-quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for shipment in shipments:
        writer.writerow(shipment_row(shipment))
    return buffer.getvalue().rstrip("\n")
