# payout_service/schemas/notification.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional, Dict, Any


class NotificationCreate(BaseModel):
    """
    A fire-and-forget alert. Exactly one audience is expected:
    a specific user (`user_id`) or every admin (`is_admin_notification`).
    """

    type: str
    title: str
    message: str
    action_url: Optional[str] = None
    user_id: Optional[str] = None
    is_admin_notification: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)
    send_email: bool = False

    @model_validator(mode="after")
    def check_single_audience(self):
        if self.user_id and self.is_admin_notification:
            raise ValueError("Specify either user_id or is_admin_notification, not both")
        return self

    @property
    def has_recipient(self) -> bool:
        return bool(self.user_id) or self.is_admin_notification
