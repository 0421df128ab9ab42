# payout_service/core/email.py
"""
Email service using Resend for transactional notification emails.
"""
import logging
from typing import Optional

import resend

from payout_service.core.config import settings

logger = logging.getLogger(__name__)


def init_resend():
    """Initialize Resend with API key."""
    resend.api_key = settings.RESEND_API_KEY


def send_notification_email(
    to_email: str,
    recipient_name: str,
    title: str,
    message: str,
    action_url: Optional[str] = None,
) -> dict:
    """
    Send a notification as an email.

    Args:
        to_email: Recipient email address
        recipient_name: Name of the recipient
        title: Notification title, used as the subject
        message: Notification body
        action_url: Optional path inside the frontend to link to

    Returns:
        {"success": True, "id": ...} or {"success": False, "error": ...}
    """
    init_resend()

    button_html = ""
    if action_url:
        link = f"{settings.FRONTEND_URL.rstrip('/')}{action_url}"
        button_html = (
            f'<p style="text-align: center;"><a href="{link}" class="button">View details</a></p>'
        )

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: #1f2937; color: white; padding: 24px; text-align: center; border-radius: 10px 10px 0 0; }}
            .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }}
            .button {{ display: inline-block; background: #16a34a; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; }}
            .footer {{ text-align: center; color: #888; font-size: 12px; margin-top: 20px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>{title}</h1>
            </div>
            <div class="content">
                <p>Hi {recipient_name},</p>
                <p>{message}</p>
                {button_html}
            </div>
            <div class="footer">
                <p>This email was sent by {settings.PLATFORM_NAME}</p>
            </div>
        </div>
    </body>
    </html>
    """

    params = {
        "from": f"{settings.PLATFORM_NAME} <noreply@{settings.RESEND_FROM_DOMAIN}>",
        "to": [to_email],
        "subject": title,
        "html": html_content,
    }

    try:
        response = resend.Emails.send(params)
        logger.info(f"Notification email '{title}' sent to {to_email}")
        return {"success": True, "id": response.get("id")}
    except Exception as e:
        logger.error(f"Failed to send notification email to {to_email}: {e}")
        return {"success": False, "error": str(e)}
