# payout_service/models/order.py
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from payout_service.db.base_class import Base
import uuid


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=lambda: f"ord_{uuid.uuid4().hex[:12]}")
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    buyer_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)

    # Financial
    total_amount = Column(Numeric(14, 2), nullable=False)
    # Explicit negotiated fee; NULL means the platform default rate applies
    platform_fee = Column(Numeric(14, 2), nullable=True)

    payment_status = Column(String(20), nullable=False, server_default="PENDING")
    # Values: 'PENDING', 'COMPLETED', 'FAILED', 'REFUNDED'

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    event = relationship("Event", foreign_keys=[event_id])
    buyer = relationship("User", foreign_keys=[buyer_id])

    __table_args__ = (
        Index("ix_orders_event_status_created", "event_id", "payment_status", "created_at"),
    )
