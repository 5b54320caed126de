"""
Public tracking view and admin tracking updates.
"""

import pytest


@pytest.mark.asyncio
async def test_public_tracking_needs_no_session(client, created_shipment):
    response = await client.get(f"/api/tracking/{created_shipment['trackingNumber']}")
    assert response.status_code == 200
    data = response.json()
    assert data["trackingNumber"] == created_shipment["trackingNumber"]
    assert data["status"] == "PENDING"
    assert data["progress"] == 0
    assert data["sender"]["name"] == "Alice Sender"
    assert data["receiver"]["address"]["city"] == "London"
    assert data["service"] == {"name": "Express Delivery", "description": "Fast delivery service"}
    assert [e["status"] for e in data["events"]] == ["Shipment created"]
    # Contact details stay private
    assert "senderEmail" not in data


@pytest.mark.asyncio
async def test_tracking_lookup_is_case_insensitive(client, created_shipment):
    response = await client.get(f"/api/tracking/{created_shipment['trackingNumber'].lower()}")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unknown_tracking_number_is_404(client, express_service):
    response = await client.get("/api/tracking/SP999999999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_tracking_update(client, admin_headers, created_shipment, sent_emails):
    sent_emails.reset_mock()
    tracking_number = created_shipment["trackingNumber"]

    response = await client.patch(
        f"/api/tracking/{tracking_number}",
        json={
            "status": "PICKED_UP",
            "location": {"name": "SF depot", "coordinates": {"latitude": 37.77, "longitude": -122.42}},
            "description": "Collected from sender",
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Tracking information updated successfully"
    assert body["shipment"]["status"] == "PICKED_UP"
    assert body["shipment"]["currentLocation"]["name"] == "SF depot"

    view = (await client.get(f"/api/tracking/{tracking_number}")).json()
    assert view["progress"] == 25
    last = view["events"][-1]
    assert last["status"] == "PICKED_UP"
    assert last["description"] == "Collected from sender"
    assert last["location"]["coordinates"]["latitude"] == 37.77

    assert sent_emails.await_count == 2


@pytest.mark.asyncio
async def test_description_only_update_records_event_without_emails(client, admin_headers, created_shipment, sent_emails):
    sent_emails.reset_mock()
    tracking_number = created_shipment["trackingNumber"]

    response = await client.patch(
        f"/api/tracking/{tracking_number}",
        json={"description": "Awaiting customs paperwork"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["shipment"]["status"] == "PENDING"

    events = (await client.get(f"/api/tracking/{tracking_number}")).json()["events"]
    assert len(events) == 2
    assert events[-1]["status"] == "Status updated"
    sent_emails.assert_not_awaited()


@pytest.mark.asyncio
async def test_location_only_update_records_one_event(client, admin_headers, created_shipment, sent_emails):
    sent_emails.reset_mock()
    tracking_number = created_shipment["trackingNumber"]

    response = await client.patch(
        f"/api/tracking/{tracking_number}", json={"location": "Chicago hub"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["shipment"]["currentLocation"] == "Chicago hub"
    assert response.json()["shipment"]["status"] == "PENDING"

    events = (await client.get(f"/api/tracking/{tracking_number}")).json()["events"]
    assert len(events) == 2
    assert events[-1]["status"] == "Location updated"
    assert events[-1]["description"] == "Shipment location updated to Chicago hub"
    sent_emails.assert_not_awaited()


@pytest.mark.asyncio
async def test_status_only_update_gets_default_description(client, admin_headers, created_shipment):
    tracking_number = created_shipment["trackingNumber"]
    await client.patch(f"/api/tracking/{tracking_number}", json={"status": "IN_TRANSIT"}, headers=admin_headers)

    events = (await client.get(f"/api/tracking/{tracking_number}")).json()["events"]
    assert events[-1]["description"] == "Shipment status updated to IN_TRANSIT"


@pytest.mark.asyncio
async def test_delivered_shipment_rejects_tracking_update(client, admin_headers, created_shipment):
    tracking_number = created_shipment["trackingNumber"]
    delivered = await client.patch(
        f"/api/tracking/{tracking_number}", json={"status": "DELIVERED"}, headers=admin_headers
    )
    assert delivered.status_code == 200
    assert delivered.json()["shipment"]["actualDelivery"] is not None

    response = await client.patch(
        f"/api/tracking/{tracking_number}", json={"status": "IN_TRANSIT"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot change status of a DELIVERED shipment"


@pytest.mark.asyncio
async def test_tracking_update_is_admin_only(client, user_headers, created_shipment):
    url = f"/api/tracking/{created_shipment['trackingNumber']}"
    assert (await client.patch(url, json={"status": "IN_TRANSIT"})).status_code == 401
    assert (await client.patch(url, json={"status": "IN_TRANSIT"}, headers=user_headers)).status_code == 403
