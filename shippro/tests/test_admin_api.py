"""
Admin dashboard and contact form tests.
"""

import pytest

from shippro.app.core.config import settings


# TEST 1: Dashboard counters

@pytest.mark.asyncio
async def test_stats_on_empty_database(client, admin_headers):
    response = await client.get("/api/admin/stats", headers=admin_headers)
    assert response.status_code == 200
    stats = response.json()
    assert stats["totalShipments"] == 0
    assert stats["revenue"] == 0
    assert stats["topServices"] == []
    assert stats["recentActivity"] == []


@pytest.mark.asyncio
async def test_stats_count_by_status_and_revenue(client, admin_headers, user_headers, express_service, shipment_payload):
    ids = []
    for _ in range(3):
        created = await client.post("/api/shipments", json=shipment_payload, headers=user_headers)
        ids.append(created.json()["shipment"]["id"])

    await client.patch(f"/api/shipments/{ids[0]}", json={"status": "DELIVERED", "finalCost": 60.0}, headers=user_headers)
    await client.patch(f"/api/shipments/{ids[1]}", json={"status": "IN_TRANSIT"}, headers=user_headers)

    stats = (await client.get("/api/admin/stats", headers=admin_headers)).json()
    assert stats["totalShipments"] == 3
    assert stats["pendingShipments"] == 1
    assert stats["inTransitShipments"] == 1
    assert stats["deliveredShipments"] == 1
    assert stats["cancelledShipments"] == 0
    # Final cost wins over the estimate for delivered shipments
    assert stats["revenue"] == 60.0

    assert stats["topServices"] == [
        {"name": "Express Delivery", "count": 3, "description": "Fast delivery service"}
    ]
    assert sum(stats["trends"]["shipmentsByDate"].values()) == 3
    assert len(stats["recentActivity"]) == 5
    assert stats["recentActivity"][0]["status"].startswith("Status updated to")


# TEST 2: Most recent active shipment

@pytest.mark.asyncio
async def test_most_recent_shipment_needs_an_active_one(client, admin_headers, created_shipment):
    response = await client.get("/api/admin/most-recent-shipment", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Active shipment not found"


@pytest.mark.asyncio
async def test_most_recent_shipment(client, admin_headers, created_shipment):
    tracking_number = created_shipment["trackingNumber"]
    await client.patch(f"/api/tracking/{tracking_number}", json={"status": "OUT_FOR_DELIVERY"}, headers=admin_headers)

    response = await client.get("/api/admin/most-recent-shipment", headers=admin_headers)
    assert response.status_code == 200
    summary = response.json()
    assert summary["trackingNumber"] == tracking_number
    assert summary["progress"] == 75
    assert summary["events"][0]["status"] == "OUT_FOR_DELIVERY"


# TEST 3: Charts

@pytest.mark.asyncio
@pytest.mark.parametrize("timeframe,length", [("daily", 10), ("weekly", 8), ("monthly", 6), ("hourly", 10)])
async def test_chart_bucket_counts(client, admin_headers, timeframe, length):
    response = await client.get("/api/admin/analytics/chart", params={"timeframe": timeframe}, headers=admin_headers)
    assert response.status_code == 200
    points = response.json()
    assert len(points) == length
    assert all(p["shipments"] == 0 and p["deliveries"] == 0 for p in points)


@pytest.mark.asyncio
async def test_chart_counts_recent_shipments(client, admin_headers, created_shipment):
    await client.patch(
        f"/api/tracking/{created_shipment['trackingNumber']}", json={"status": "DELIVERED"}, headers=admin_headers
    )
    points = (await client.get("/api/admin/analytics/chart", params={"timeframe": "weekly"}, headers=admin_headers)).json()
    assert points[-1]["date"] == "Week 8"
    assert sum(p["shipments"] for p in points) == 1
    assert sum(p["deliveries"] for p in points) == 1


# TEST 4: Vehicles

@pytest.mark.asyncio
async def test_vehicle_stats_are_zero_without_demo_data(client, admin_headers, mocker):
    mocker.patch.object(settings, "seed_demo_data", False)
    response = await client.get("/api/admin/vehicles/stats", headers=admin_headers)
    assert response.json() == {
        "totalVehicles": 0,
        "activeVehicles": 0,
        "onRouteVehicles": 0,
        "maintenanceVehicles": 0,
        "trend": 0.0,
    }


@pytest.mark.asyncio
async def test_vehicle_stats_in_demo_mode(client, admin_headers, mocker):
    mocker.patch.object(settings, "seed_demo_data", True)
    response = await client.get("/api/admin/vehicles/stats", headers=admin_headers)
    assert response.json()["totalVehicles"] == 89
    assert response.json()["trend"] == 2.29


# TEST 5: Contact forms

@pytest.mark.asyncio
async def test_contact_form_round_trip(client, admin_headers):
    response = await client.post("/api/contact", json={
        "name": "Dana Prospect",
        "email": "dana@example.com",
        "company": "Acme",
        "serviceType": "International Shipping",
        "message": "Need a quote for 20 pallets",
    })
    assert response.status_code == 201
    assert response.json()["message"] == "Contact form submitted successfully"
    form_id = response.json()["id"]

    listed = (await client.get("/api/contact", headers=admin_headers)).json()
    assert listed["pagination"]["total"] == 1
    assert listed["data"][0]["id"] == form_id
    assert listed["data"][0]["status"] == "NEW"

    stats = (await client.get("/api/admin/stats", headers=admin_headers)).json()
    assert stats["newContacts"] == 1


@pytest.mark.asyncio
async def test_contact_form_validation(client):
    response = await client.post("/api/contact", json={"name": "Dana", "email": "dana@example.com"})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required field: message"
