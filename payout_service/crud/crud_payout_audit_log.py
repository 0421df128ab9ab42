# payout_service/crud/crud_payout_audit_log.py
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from payout_service.models.payout import PayoutAuditLog


class CRUDPayoutAuditLog:
    """
    Create and read operations for PayoutAuditLog.

    Audit entries are immutable. They are staged on the caller's session so
    that each one commits or rolls back together with the status change it
    records. Callers hold the payout (or organizer) row lock, which keeps
    sequence numbers gap-free per payout.
    """

    def __init__(self, model):
        self.model = model

    def get_for_payout(self, db: Session, *, payout_id: str) -> List[PayoutAuditLog]:
        return (
            db.query(self.model)
            .filter(self.model.payout_id == payout_id)
            .order_by(self.model.sequence.asc())
            .all()
        )

    def _next_sequence(self, db: Session, *, payout_id: str) -> int:
        current = (
            db.query(func.max(self.model.sequence))
            .filter(self.model.payout_id == payout_id)
            .scalar()
        )
        return (current or 0) + 1

    def log_transition(
        self,
        db: Session,
        *,
        payout_id: str,
        action: str,
        actor_type: str,
        new_status: str,
        previous_status: Optional[str] = None,
        actor_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> PayoutAuditLog:
        db_obj = self.model(
            payout_id=payout_id,
            sequence=self._next_sequence(db, payout_id=payout_id),
            action=action,
            actor_type=actor_type,
            actor_id=actor_id,
            previous_status=previous_status,
            new_status=new_status,
            details=details,
        )
        db.add(db_obj)
        db.flush()
        return db_obj


payout_audit_log = CRUDPayoutAuditLog(PayoutAuditLog)
