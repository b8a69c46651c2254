"""Mail diagnostics."""

from fastapi import APIRouter, Depends

from app.config import settings
from app.schemas.auth import TestEmailResponse
from app.services.mail import Mailer, get_mailer

router = APIRouter(tags=["mail"])


@router.get("/test-email", response_model=TestEmailResponse)
async def send_test_email(mailer: Mailer = Depends(get_mailer)) -> TestEmailResponse:
    """Send a fixed message to the configured test recipient.

    Transport failures propagate to the error handlers (500).
    """
    message_id = await mailer.send(
        settings.mail_test_recipient,
        "Test Email from EcoDescarte",
        "This is a test email from your EcoDescarte API",
        "<h1>Test Email</h1><p>This is a test email from your EcoDescarte API</p>",
    )
    return TestEmailResponse(message="Test email sent successfully", messageId=message_id)
