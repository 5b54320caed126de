"""
Notification planning, template rendering and best-effort delivery.
"""

import smtplib

import pytest

from shippro.app.core.config import settings
from shippro.app.domain.shipments.shipment_service import ShipmentService
from shippro.app.models.email_preferences import EmailPreferences
from shippro.app.models.shipment_enums import ShipmentStatus
from shippro.app.services import email as email_service
from shippro.app.services.email import EMAIL_TEMPLATES, EmailTemplate, render
from shippro.app.services.notification_service import (
    NotificationPlan,
    NotificationService,
    Recipient,
    build_variables,
    template_for_status,
)


async def _add_preferences(db, user_id, email, **flags):
    prefs = EmailPreferences(user_id=user_id, email=email, **flags)
    db.add(prefs)
    await db.commit()
    return prefs


# TEST 1: Planning

def test_every_status_has_a_template():
    for status in ShipmentStatus:
        assert template_for_status(status) in EMAIL_TEMPLATES


@pytest.mark.asyncio
async def test_plan_includes_sender_and_receiver(db_session, created_shipment):
    shipment = await ShipmentService.get_or_404(db_session, created_shipment["id"])
    plan = await NotificationService.plan(db_session, shipment, ShipmentStatus.IN_TRANSIT)

    assert plan.template_type == "SHIPMENT_IN_TRANSIT"
    assert [(r.email, r.kind) for r in plan.recipients] == [
        ("alice@example.com", "sender"),
        ("bob@example.com", "receiver"),
    ]
    assert plan.variables["trackingNumber"] == created_shipment["trackingNumber"]
    assert plan.variables["serviceName"] == "Express Delivery"


@pytest.mark.asyncio
async def test_opted_out_recipient_is_skipped(db_session, created_shipment):
    await _add_preferences(db_session, "user_bob", "BOB@example.com", shipment_delivered=False)
    shipment = await ShipmentService.get_or_404(db_session, created_shipment["id"])

    delivered = await NotificationService.plan(db_session, shipment, ShipmentStatus.DELIVERED)
    assert [r.email for r in delivered.recipients] == ["alice@example.com"]

    # Other events still reach them
    in_transit = await NotificationService.plan(db_session, shipment, ShipmentStatus.IN_TRANSIT)
    assert len(in_transit.recipients) == 2


@pytest.mark.asyncio
async def test_opted_in_admins_are_added_once(db_session, created_shipment):
    await _add_preferences(db_session, "user_ops", "ops@ship-pro.com", admin_notifications=True)
    # Admin who is also the sender is only mailed once
    await _add_preferences(db_session, "user_alice", "Alice@Example.com", admin_notifications=True)
    await _add_preferences(db_session, "user_quiet", "quiet@ship-pro.com", admin_notifications=False)

    shipment = await ShipmentService.get_or_404(db_session, created_shipment["id"])
    plan = await NotificationService.plan(db_session, shipment, ShipmentStatus.PICKED_UP)

    emails = [r.email.lower() for r in plan.recipients]
    assert sorted(emails) == ["alice@example.com", "bob@example.com", "ops@ship-pro.com"]
    assert [r.kind for r in plan.recipients if r.email == "ops@ship-pro.com"] == ["admin"]


@pytest.mark.asyncio
async def test_admin_opted_out_of_event_is_skipped(db_session, created_shipment):
    await _add_preferences(
        db_session, "user_ops", "ops@ship-pro.com", admin_notifications=True, shipment_cancelled=False
    )
    shipment = await ShipmentService.get_or_404(db_session, created_shipment["id"])
    plan = await NotificationService.plan(db_session, shipment, ShipmentStatus.CANCELLED)
    assert "ops@ship-pro.com" not in [r.email for r in plan.recipients]


@pytest.mark.asyncio
async def test_everyone_opted_out_gives_no_plan(db_session, created_shipment):
    await _add_preferences(db_session, "user_alice", "alice@example.com", shipment_picked_up=False)
    await _add_preferences(db_session, "user_bob", "bob@example.com", shipment_picked_up=False)
    shipment = await ShipmentService.get_or_404(db_session, created_shipment["id"])
    assert await NotificationService.plan(db_session, shipment, ShipmentStatus.PICKED_UP) is None


@pytest.mark.asyncio
async def test_build_variables_location_fallbacks(db_session, created_shipment):
    shipment = await ShipmentService.get_or_404(db_session, created_shipment["id"])
    variables = build_variables(shipment)
    assert variables["currentLocation"] == "In Transit"
    assert variables["estimatedDelivery"] == "TBD"
    assert variables["pickupLocation"] == "San Francisco, United States"
    assert variables["trackingUrl"] == (
        f"{settings.app_url}/tracking?trackingNumber={created_shipment['trackingNumber']}"
    )

    shipment.current_location = {"name": "Chicago hub"}
    assert build_variables(shipment)["currentLocation"] == "Chicago hub"


# TEST 2: Delivery

@pytest.mark.asyncio
async def test_deliver_personalises_each_email(sent_emails):
    plan = NotificationPlan(
        tracking_number="SP123456789",
        template_type="SHIPMENT_DELIVERED",
        recipients=[
            Recipient(email="alice@example.com", name="Alice", kind="sender"),
            Recipient(email="bob@example.com", name="Bob", kind="receiver"),
        ],
        variables={"trackingNumber": "SP123456789"},
    )
    assert await NotificationService.deliver(plan) == 2

    calls = {call.args[0]: call.args[2] for call in sent_emails.await_args_list}
    assert calls["alice@example.com"]["recipientName"] == "Alice"
    assert calls["bob@example.com"]["recipientName"] == "Bob"
    assert sent_emails.await_args_list[0].args[1] is EMAIL_TEMPLATES["SHIPMENT_DELIVERED"]


@pytest.mark.asyncio
async def test_deliver_counts_failures_and_never_raises(sent_emails):
    sent_emails.side_effect = [True, False]
    plan = NotificationPlan(
        tracking_number="SP123456789",
        template_type="SHIPMENT_CREATED",
        recipients=[
            Recipient(email="a@example.com", name="A", kind="sender"),
            Recipient(email="b@example.com", name="B", kind="receiver"),
        ],
    )
    assert await NotificationService.deliver(plan) == 1

    sent_emails.side_effect = RuntimeError("boom")
    assert await NotificationService.deliver(plan) == 0


@pytest.mark.asyncio
async def test_email_failure_does_not_fail_the_request(client, user_headers, express_service, shipment_payload, sent_emails):
    sent_emails.return_value = False
    response = await client.post("/api/shipments", json=shipment_payload, headers=user_headers)
    assert response.status_code == 201


# TEST 3: Templates and SMTP

def test_render_leaves_unknown_placeholders():
    assert render("Hi {name}, see {missing}", {"name": "Ada"}) == "Hi Ada, see {missing}"


def test_templates_carry_html_and_text():
    for template_type, template in EMAIL_TEMPLATES.items():
        assert "{trackingNumber}" in template.subject, template_type
        assert "{recipientName}" in template.html
        assert "{recipientName}" in template.text


@pytest.mark.asyncio
async def test_send_email_without_credentials_returns_false(mocker):
    mocker.patch.object(settings, "smtp_user", "")
    mocker.patch.object(settings, "smtp_pass", "")
    smtp = mocker.patch("shippro.app.services.email.smtplib.SMTP")

    ok = await email_service.send_email("a@example.com", EmailTemplate("s", "<p>h</p>", "t"))
    assert ok is False
    smtp.assert_not_called()


@pytest.mark.asyncio
async def test_send_email_uses_starttls(mocker):
    mocker.patch.object(settings, "smtp_user", "mailer@ship-pro.com")
    mocker.patch.object(settings, "smtp_pass", "secret")
    mocker.patch.object(settings, "smtp_port", 587)
    smtp = mocker.patch("shippro.app.services.email.smtplib.SMTP")

    template = EmailTemplate("Shipment {trackingNumber}", "<p>{trackingNumber}</p>", "{trackingNumber}")
    ok = await email_service.send_email("a@example.com", template, {"trackingNumber": "SP123456789"})
    assert ok is True

    server = smtp.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer@ship-pro.com", "secret")
    message = server.send_message.call_args.args[0]
    assert message["Subject"] == "Shipment SP123456789"
    assert message["To"] == "a@example.com"


@pytest.mark.asyncio
async def test_send_email_reports_smtp_errors(mocker):
    mocker.patch.object(settings, "smtp_user", "mailer@ship-pro.com")
    mocker.patch.object(settings, "smtp_pass", "secret")
    mocker.patch.object(settings, "smtp_port", 465)
    smtp_ssl = mocker.patch("shippro.app.services.email.smtplib.SMTP_SSL")
    smtp_ssl.return_value.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

    ok = await email_service.send_email("a@example.com", EmailTemplate("s", "h", "t"))
    assert ok is False
    smtp_ssl.return_value.close.assert_called_once()
