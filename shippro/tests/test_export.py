"""
CSV export tests.
"""

import csv
import io
from datetime import datetime
from types import SimpleNamespace

import pytest

from shippro.app.models.shipment_enums import ShipmentStatus, PaymentStatus
from shippro.app.services.export import (
    EXPORT_HEADER,
    format_address,
    format_dimensions,
    shipments_to_csv,
)


def _fake_shipment(**overrides):
    values = dict(
        tracking_number="SP123456789",
        status=ShipmentStatus.IN_TRANSIT,
        sender_name='Alice "Ace" Sender',
        sender_email="alice@example.com",
        sender_phone=None,
        sender_address={"street": "1 Market St", "city": "San Francisco", "state": "CA",
                        "postalCode": "94105", "country": "United States"},
        receiver_name="Bob Receiver",
        receiver_email="bob@example.com",
        receiver_phone="+44 20 7946 0000",
        receiver_address={"street": "10 Downing St", "city": "London", "postalCode": "SW1A 2AA",
                          "country": "United Kingdom"},
        service=SimpleNamespace(name="Express Delivery"),
        service_id="507f1f77bcf86cd799439011",
        weight=2.5,
        dimensions={"length": 30, "width": 20, "height": 10, "unit": "cm"},
        estimated_cost=42.5,
        final_cost=None,
        currency="USD",
        payment_status=PaymentStatus.PENDING,
        created_at=datetime(2024, 3, 1, 12, 30),
        updated_at=datetime(2024, 3, 2, 8, 0),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_format_helpers():
    assert format_address({"street": "1 Main", "city": "Austin", "state": "TX", "postalCode": "78701",
                           "country": "US"}) == "1 Main, Austin, TX 78701, US"
    assert format_address({"street": "1 Main", "city": "Paris", "country": "France"}) == "1 Main, Paris, , France"
    assert format_address(None) == ""
    assert format_dimensions({"length": 1, "width": 2, "height": 3, "unit": "in"}) == "1x2x3 in"
    assert format_dimensions(None) == ""


def test_csv_quotes_every_field():
    content = shipments_to_csv([_fake_shipment()])
    lines = content.split("\n")
    assert len(lines) == 2
    assert lines[0] == ",".join(f'"{h}"' for h in EXPORT_HEADER)
    assert '"Alice ""Ace"" Sender"' in lines[1]

    row = next(csv.reader(io.StringIO(lines[1])))
    assert len(row) == len(EXPORT_HEADER)
    assert row[0] == "SP123456789"
    assert row[4] == ""
    assert row[5] == "1 Market St, San Francisco, CA 94105, United States"
    assert row[10] == "Express Delivery"
    assert row[12] == "30x20x10 cm"
    assert row[17] == "2024-03-01"


def test_csv_falls_back_to_service_id():
    content = shipments_to_csv([_fake_shipment(service=None)])
    row = next(csv.reader(io.StringIO(content.split("\n")[1])))
    assert row[10] == "507f1f77bcf86cd799439011"


def test_line_breaks_inside_fields_stay_on_one_row():
    shipment = _fake_shipment(
        sender_name="Alice\nSender",
        receiver_address={"street": "10 Downing St\r\nFlat 2", "city": "London", "country": "United Kingdom"},
    )
    content = shipments_to_csv([shipment, _fake_shipment()])
    lines = content.split("\n")
    assert len(lines) == 3

    row = next(csv.reader(io.StringIO(lines[1])))
    assert row[2] == "Alice Sender"
    assert row[9] == "10 Downing St Flat 2, London, , United Kingdom"


def test_empty_export_is_header_only():
    assert shipments_to_csv([]).count("\n") == 0


@pytest.mark.asyncio
async def test_export_endpoint_applies_filters(client, user_headers, created_shipment):
    response = await client.post("/api/shipments/export", json={"status": "PENDING"}, headers=user_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="shipments-export.csv"'
    assert created_shipment["trackingNumber"] in response.text

    empty = await client.post("/api/shipments/export", json={"status": "DELIVERED"}, headers=user_headers)
    assert empty.text.count("\n") == 0

    searched = await client.post("/api/shipments/export", json={"search": "BOB@EXAMPLE"}, headers=user_headers)
    assert created_shipment["trackingNumber"] in searched.text


@pytest.mark.asyncio
async def test_export_without_body_exports_everything(client, user_headers, created_shipment):
    response = await client.post("/api/shipments/export", headers=user_headers)
    assert response.status_code == 200
    assert created_shipment["trackingNumber"] in response.text


@pytest.mark.asyncio
async def test_export_requires_session(client):
    response = await client.post("/api/shipments/export", json={})
    assert response.status_code == 401
