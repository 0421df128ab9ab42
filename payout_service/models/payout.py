# payout_service/models/payout.py
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship
from payout_service.db.base_class import Base
import uuid
from datetime import datetime, timezone

OPEN_PAYOUT_STATUSES = ("PENDING", "PROCESSING")


class Payout(Base):
    __tablename__ = "payouts"

    id = Column(String, primary_key=True, default=lambda: f"po_{uuid.uuid4().hex[:12]}")
    organizer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    # Amounts
    amount = Column(Numeric(14, 2), nullable=False)  # gross
    platform_fee = Column(Numeric(14, 2), nullable=False)
    net_amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(3), nullable=False, server_default="NGN")

    status = Column(String(20), nullable=False, server_default="PENDING")
    # Values: 'PENDING', 'PROCESSING', 'COMPLETED', 'FAILED'

    # Bank snapshot taken at request time
    bank_account = Column(String(20), nullable=False)
    bank_code = Column(String(20), nullable=False)
    account_name = Column(String(255), nullable=True)

    # Orders covered: created_at in (period_start, period_end]
    period_start = Column(DateTime(timezone=True), nullable=False)
    period_end = Column(DateTime(timezone=True), nullable=False)

    failure_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    processed_by = Column(String, nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    organizer = relationship("User", foreign_keys=[organizer_id])
    audit_entries = relationship(
        "PayoutAuditLog",
        order_by="PayoutAuditLog.sequence",
        viewonly=True,
    )

    __table_args__ = (
        # At most one open payout per organizer
        Index(
            "uq_payouts_open_per_organizer",
            "organizer_id",
            unique=True,
            postgresql_where=text("status IN ('PENDING', 'PROCESSING')"),
            sqlite_where=text("status IN ('PENDING', 'PROCESSING')"),
        ),
        CheckConstraint("net_amount = amount - platform_fee", name="ck_payouts_net_amount"),
        CheckConstraint(
            "status IN ('PENDING', 'PROCESSING', 'COMPLETED', 'FAILED')",
            name="ck_payouts_status",
        ),
    )


class PayoutAuditLog(Base):
    """Append-only record of payout status transitions."""

    __tablename__ = "payout_audit_log"

    id = Column(String, primary_key=True, default=lambda: f"pal_{uuid.uuid4().hex[:12]}")
    payout_id = Column(String, ForeignKey("payouts.id"), nullable=False, index=True)
    # Position within the payout's history, 1-based
    sequence = Column(Integer, nullable=False)

    action = Column(String(100), nullable=False)
    # Values: 'payout.requested', 'payout.processing', 'payout.completed', 'payout.rejected'

    actor_type = Column(String(50), nullable=False)  # 'organizer', 'admin', 'system'
    actor_id = Column(String, nullable=True)

    previous_status = Column(String(20), nullable=True)
    new_status = Column(String(20), nullable=False)
    details = Column(JSON, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("payout_id", "sequence", name="uq_payout_audit_log_sequence"),
    )
