# payout_service/models/notification.py
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, JSON, false, func
from payout_service.db.base_class import Base
import uuid


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, default=lambda: f"ntf_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    type = Column(String(50), nullable=False)
    # Values: 'PAYMENT_RECEIVED', ...
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    action_url = Column(String(500), nullable=True)
    # 'metadata' is reserved on declarative classes
    notification_metadata = Column("metadata", JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False, server_default=false())

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
