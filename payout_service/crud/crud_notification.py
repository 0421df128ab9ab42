# payout_service/crud/crud_notification.py
"""
CRUD operations for in-app notifications.
"""
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from payout_service.models.notification import Notification


def create_notifications(
    db: Session,
    *,
    user_ids: List[str],
    type: str,
    title: str,
    message: str,
    action_url: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> List[Notification]:
    """Create one notification per recipient in a single commit."""
    notifications = [
        Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            action_url=action_url,
            notification_metadata=metadata or {},
        )
        for user_id in user_ids
    ]
    db.add_all(notifications)
    db.commit()
    return notifications


def get_notifications_for_user(
    db: Session, user_id: str, unread_only: bool = False
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).all()
