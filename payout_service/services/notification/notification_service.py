# payout_service/services/notification/notification_service.py
"""
Best-effort notification sink.

Writes in-app notifications for a single user or for every admin and,
when asked, mirrors them by email. Nothing raised here ever reaches the
caller: the operation that triggered the alert has already succeeded.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from payout_service.core.config import settings
from payout_service.core.email import send_notification_email
from payout_service.crud.crud_notification import create_notifications
from payout_service.crud.crud_user import user as crud_user
from payout_service.models.user import User
from payout_service.schemas.notification import NotificationCreate

logger = logging.getLogger(__name__)


class NotificationService:
    def _resolve_recipients(self, db: Session, notification: NotificationCreate) -> List[User]:
        if notification.is_admin_notification:
            return crud_user.get_admins(db)
        recipient = crud_user.get(db, notification.user_id)
        if not recipient:
            logger.warning(
                f"Notification '{notification.title}' addressed to unknown user {notification.user_id}"
            )
            return []
        return [recipient]

    def notify(self, db: Session, notification: NotificationCreate) -> int:
        """
        Deliver a notification. Returns the number of in-app rows created;
        0 when there was nobody to notify or delivery failed.
        """
        if not notification.has_recipient:
            logger.warning(
                f"Notification '{notification.title}' has no recipient; "
                "specify either user_id or is_admin_notification"
            )
            return 0

        try:
            recipients = self._resolve_recipients(db, notification)
            if not recipients:
                return 0
            create_notifications(
                db,
                user_ids=[r.id for r in recipients],
                type=notification.type,
                title=notification.title,
                message=notification.message,
                action_url=notification.action_url,
                metadata=notification.metadata,
            )
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating notification '{notification.title}': {e}")
            return 0

        if notification.send_email and settings.email_enabled:
            for recipient in recipients:
                if recipient.email:
                    send_notification_email(
                        to_email=recipient.email,
                        recipient_name=recipient.name,
                        title=notification.title,
                        message=notification.message,
                        action_url=notification.action_url,
                    )

        return len(recipients)


notification_service = NotificationService()
