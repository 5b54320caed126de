"""
Email diagnostics API Endpoints (admin-only).
"""

from datetime import timedelta
from typing import Dict

from fastapi import APIRouter, Depends

from shippro.app.core.config import settings
from shippro.app.core.dependencies import Principal
from shippro.app.core.exceptions import ValidationError
from shippro.app.core.guards import require_admin
from shippro.app.db.session import utcnow
from shippro.app.schemas.email_preferences import EmailTestRequest, EmailTestResponse
from shippro.app.services.email import EMAIL_TEMPLATES, send_email, verify_email_configuration

router = APIRouter(prefix="/email", tags=["Email"])


def sample_variables() -> Dict[str, str]:
    """Fixed placeholder values for test sends."""
    now = utcnow()
    in_a_week = (now + timedelta(days=7)).strftime("%Y-%m-%d")
    return {
        "recipientName": "Test User",
        "trackingNumber": "SP123456789",
        "serviceName": "Express Shipping",
        "senderName": "John Doe",
        "senderCity": "New York",
        "senderCountry": "USA",
        "receiverName": "Jane Smith",
        "receiverCity": "Los Angeles",
        "receiverCountry": "USA",
        "weight": "2.5",
        "estimatedCost": "25.99",
        "currency": "USD",
        "estimatedDelivery": in_a_week,
        "trackingUrl": f"{settings.app_url}/tracking?trackingNumber=SP123456789",
        "feedbackUrl": f"{settings.app_url}/contact",
        "pickupTime": now.strftime("%Y-%m-%d %H:%M UTC"),
        "pickupLocation": "New York, USA",
        "currentLocation": "Chicago, USA",
        "lastUpdate": now.strftime("%Y-%m-%d %H:%M UTC"),
        "deliveryAddress": "123 Main St, Los Angeles, USA",
        "expectedDelivery": in_a_week,
        "deliveryTime": now.strftime("%Y-%m-%d %H:%M UTC"),
        "deliveredTo": "Jane Smith",
        "cancellationDate": now.strftime("%Y-%m-%d"),
        "cancellationReason": "Customer request",
    }


@router.get("/test", response_model=EmailTestResponse)
async def check_email_configuration(admin: Principal = Depends(require_admin)):
    """Log in to the SMTP server with the configured credentials."""
    is_valid = await verify_email_configuration()
    return EmailTestResponse(
        success=is_valid,
        message="Email configuration is valid" if is_valid else "Email configuration is invalid",
    )


@router.post("/test", response_model=EmailTestResponse)
async def send_test_email(
    request: EmailTestRequest,
    admin: Principal = Depends(require_admin),
):
    """Send one lifecycle template filled with sample values."""
    template = EMAIL_TEMPLATES.get(request.template_type)
    if template is None:
        raise ValidationError("Invalid template type", field="templateType")

    success = await send_email(request.to, template, sample_variables())
    return EmailTestResponse(
        success=success,
        message="Test email sent successfully" if success else "Failed to send test email",
        template_type=request.template_type,
    )
