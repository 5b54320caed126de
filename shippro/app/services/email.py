"""
Email templates and SMTP delivery.

Templates use ``{placeholder}`` variables. Placeholders without a value are
left untouched. Delivery is best-effort: ``send_email`` reports failure as
``False`` and never raises.
"""

import asyncio
import logging
import re
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, List, Sequence, Tuple, Union

from shippro.app.core.config import settings

logger = logging.getLogger("shippro.email")

PLACEHOLDER = re.compile(r"\{(\w+)\}")

BRAND_COLOR = "#D40511"


class EmailConfigurationError(Exception):
    """SMTP credentials are missing."""


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    user: str
    password: str
    from_name: str
    from_email: str
    timeout: float

    @property
    def sender(self) -> str:
        return f'"{self.from_name}" <{self.from_email}>'


def get_email_config() -> SmtpConfig:
    if not settings.smtp_user or not settings.smtp_pass:
        raise EmailConfigurationError(
            "SMTP credentials not configured. Please set SMTP_USER and SMTP_PASS."
        )
    return SmtpConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_pass,
        from_name=settings.smtp_from_name,
        from_email=settings.smtp_from_email,
        timeout=settings.smtp_timeout_seconds,
    )


def _build_template(
    subject: str,
    heading: str,
    intro: str,
    details_title: str,
    details: List[Tuple[str, str]],
    closing: str,
    button: Tuple[str, str] = ("Track Your Shipment", "{trackingUrl}"),
) -> EmailTemplate:
    """Lay out one lifecycle email in both HTML and plain text."""
    label, url = button
    rows = "\n".join(f"<p><strong>{name}:</strong> {value}</p>" for name, value in details)
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: {BRAND_COLOR}; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
    <h1 style="color: white; margin: 0; text-align: center;">ShipPro</h1>
  </div>
  <h2 style="color: {BRAND_COLOR};">{heading}</h2>
  <p>Dear {{recipientName}},</p>
  <p>{intro}</p>
  <div style="background: #f8f9fa; padding: 15px; border-radius: 5px; margin: 20px 0;">
    <h3 style="margin-top: 0; color: {BRAND_COLOR};">{details_title}</h3>
{rows}
  </div>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{url}" style="background: {BRAND_COLOR}; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">{label}</a>
  </div>
  <p>{closing}</p>
  <p>Thank you for choosing ShipPro!</p>
  <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
  <p style="color: #666; font-size: 12px;">This is an automated message. Please do not reply to this email.</p>
</div>
""".strip()

    text_rows = "\n".join(f"- {name}: {value}" for name, value in details)
    text = (
        f"ShipPro - {heading}\n\n"
        f"Dear {{recipientName}},\n\n"
        f"{intro}\n\n"
        f"{details_title}:\n{text_rows}\n\n"
        f"{label}: {url}\n\n"
        f"{closing}\n\n"
        f"Thank you for choosing ShipPro!\n"
    )
    return EmailTemplate(subject=subject, html=html, text=text)


EMAIL_TEMPLATES: Dict[str, EmailTemplate] = {
    "SHIPMENT_CREATED": _build_template(
        subject="Shipment Created - Tracking Number: {trackingNumber}",
        heading="Shipment Created Successfully!",
        intro="Your shipment has been created and is now being processed.",
        details_title="Shipment Details",
        details=[
            ("Tracking Number", "{trackingNumber}"),
            ("Service", "{serviceName}"),
            ("From", "{senderName} ({senderCity}, {senderCountry})"),
            ("To", "{receiverName} ({receiverCity}, {receiverCountry})"),
            ("Weight", "{weight} kg"),
            ("Estimated Cost", "{estimatedCost} {currency}"),
            ("Estimated Delivery", "{estimatedDelivery}"),
        ],
        closing="You can track your shipment at any time using the tracking number above.",
    ),
    "SHIPMENT_PICKED_UP": _build_template(
        subject="Shipment Picked Up - {trackingNumber}",
        heading="Shipment Picked Up!",
        intro="Great news! Your shipment has been picked up and is now on its way.",
        details_title="Update Details",
        details=[
            ("Tracking Number", "{trackingNumber}"),
            ("Status", "Picked Up"),
            ("Pickup Time", "{pickupTime}"),
            ("Location", "{pickupLocation}"),
        ],
        closing="We'll keep you updated on its progress.",
    ),
    "SHIPMENT_IN_TRANSIT": _build_template(
        subject="Shipment In Transit - {trackingNumber}",
        heading="Shipment In Transit",
        intro="Your shipment is making good progress and is currently in transit.",
        details_title="Current Status",
        details=[
            ("Tracking Number", "{trackingNumber}"),
            ("Status", "In Transit"),
            ("Current Location", "{currentLocation}"),
            ("Last Update", "{lastUpdate}"),
        ],
        closing="We'll continue to monitor your shipment and provide updates as it progresses.",
    ),
    "SHIPMENT_OUT_FOR_DELIVERY": _build_template(
        subject="Shipment Out for Delivery - {trackingNumber}",
        heading="Out for Delivery!",
        intro="Your shipment is out for delivery and should arrive soon.",
        details_title="Delivery Details",
        details=[
            ("Tracking Number", "{trackingNumber}"),
            ("Status", "Out for Delivery"),
            ("Delivery Address", "{deliveryAddress}"),
            ("Expected Delivery", "{expectedDelivery}"),
        ],
        closing="Please make sure someone is available to receive the package.",
    ),
    "SHIPMENT_DELIVERED": _build_template(
        subject="Shipment Delivered - {trackingNumber}",
        heading="Shipment Delivered!",
        intro="Your shipment has been successfully delivered.",
        details_title="Delivery Confirmation",
        details=[
            ("Tracking Number", "{trackingNumber}"),
            ("Status", "Delivered"),
            ("Delivery Time", "{deliveryTime}"),
            ("Delivered To", "{deliveredTo}"),
            ("Delivery Address", "{deliveryAddress}"),
        ],
        closing="We hope you're satisfied with our service. Tell us how we did.",
        button=("Leave Feedback", "{feedbackUrl}"),
    ),
    "SHIPMENT_CANCELLED": _build_template(
        subject="Shipment Cancelled - {trackingNumber}",
        heading="Shipment Cancelled",
        intro="We regret to inform you that your shipment has been cancelled.",
        details_title="Cancellation Details",
        details=[
            ("Tracking Number", "{trackingNumber}"),
            ("Status", "Cancelled"),
            ("Cancellation Date", "{cancellationDate}"),
            ("Reason", "{cancellationReason}"),
        ],
        closing="If you have any questions about this cancellation, please contact our support team.",
        button=("Contact Support", "{feedbackUrl}"),
    ),
}


def render(template: str, variables: Dict[str, str]) -> str:
    """Substitute ``{name}`` placeholders that have a value in ``variables``."""
    return PLACEHOLDER.sub(
        lambda m: str(variables[m.group(1)]) if m.group(1) in variables else m.group(0),
        template,
    )


def _open_connection(config: SmtpConfig) -> smtplib.SMTP:
    """Connected and logged-in SMTP client; implicit TLS on 465, STARTTLS otherwise."""
    if config.port == 465:
        server = smtplib.SMTP_SSL(config.host, config.port, timeout=config.timeout)
    else:
        server = smtplib.SMTP(config.host, config.port, timeout=config.timeout)
    try:
        if config.port != 465:
            server.starttls()
        server.login(config.user, config.password)
    except smtplib.SMTPException:
        server.close()
        raise
    return server


def _deliver(config: SmtpConfig, recipients: Sequence[str], subject: str, html: str, text: str) -> None:
    msg = MIMEMultipart("alternative")
    msg["From"] = config.sender
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject
    msg.attach(MIMEText(text, "plain"))
    msg.attach(MIMEText(html, "html"))

    server = _open_connection(config)
    try:
        server.send_message(msg)
    finally:
        server.quit()


async def send_email(
    to: Union[str, Sequence[str]],
    template: EmailTemplate,
    variables: Dict[str, str] = None,
) -> bool:
    """
    Render a template and send it over SMTP.

    The SMTP exchange runs in a worker thread. Any failure, including missing
    credentials, is logged and reported as False.
    """
    variables = variables or {}
    recipients = [to] if isinstance(to, str) else list(to)

    try:
        config = get_email_config()
        await asyncio.to_thread(
            _deliver,
            config,
            recipients,
            render(template.subject, variables),
            render(template.html, variables),
            render(template.text, variables),
        )
    except Exception as e:
        logger.error(f"Error sending email to {', '.join(recipients)}: {e}")
        return False

    logger.info(f"Email sent to {', '.join(recipients)}")
    return True


async def verify_email_configuration() -> bool:
    """Connect and log in with the configured SMTP settings."""
    try:
        config = get_email_config()
        server = await asyncio.to_thread(_open_connection, config)
        await asyncio.to_thread(server.quit)
    except Exception as e:
        logger.error(f"Email configuration test failed: {e}")
        return False

    logger.info("Email configuration is valid")
    return True
