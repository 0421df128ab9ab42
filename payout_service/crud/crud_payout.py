# payout_service/crud/crud_payout.py
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from payout_service.crud.base import CRUDBase
from payout_service.models.payout import Payout, OPEN_PAYOUT_STATUSES
from payout_service.models.user import User
from payout_service.schemas.payout import PayoutStatus


class CRUDPayout(CRUDBase[Payout]):
    """
    CRUD operations for Payout.

    Payouts are never deleted. Writes here only stage changes on the
    session; the caller owns the transaction.
    """

    def get_for_update(self, db: Session, *, payout_id: str) -> Optional[Payout]:
        """Load a payout and lock its row until the transaction ends."""
        return (
            db.query(self.model)
            .filter(self.model.id == payout_id)
            .with_for_update()
            .first()
        )

    def get_with_organizer(self, db: Session, *, payout_id: str) -> Optional[Payout]:
        return (
            db.query(self.model)
            .options(
                joinedload(self.model.organizer).joinedload(User.organizer_profile),
                joinedload(self.model.audit_entries),
            )
            .filter(self.model.id == payout_id)
            .first()
        )

    def get_latest_honored(self, db: Session, *, organizer_id: str) -> Optional[Payout]:
        """Most recent payout that has begun being paid (PROCESSING or COMPLETED)."""
        return (
            db.query(self.model)
            .filter(
                self.model.organizer_id == organizer_id,
                self.model.status.in_(
                    [PayoutStatus.COMPLETED.value, PayoutStatus.PROCESSING.value]
                ),
            )
            .order_by(self.model.created_at.desc())
            .first()
        )

    def get_created_after(
        self, db: Session, *, organizer_id: str, since: datetime
    ) -> Optional[Payout]:
        return (
            db.query(self.model)
            .filter(
                self.model.organizer_id == organizer_id,
                self.model.created_at > since,
            )
            .order_by(self.model.created_at.desc())
            .first()
        )

    def get_open(self, db: Session, *, organizer_id: str) -> Optional[Payout]:
        return (
            db.query(self.model)
            .filter(
                self.model.organizer_id == organizer_id,
                self.model.status.in_(OPEN_PAYOUT_STATUSES),
            )
            .first()
        )

    def get_by_organizer(
        self, db: Session, *, organizer_id: str, limit: Optional[int] = None
    ) -> List[Payout]:
        """Organizer's payouts, newest first."""
        query = (
            db.query(self.model)
            .filter(self.model.organizer_id == organizer_id)
            .order_by(self.model.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_all_with_organizer(
        self, db: Session, *, status: Optional[PayoutStatus] = None
    ) -> List[Payout]:
        """Every payout with organizer identity loaded, newest first."""
        query = db.query(self.model).options(
            joinedload(self.model.organizer).joinedload(User.organizer_profile)
        )
        if status:
            query = query.filter(self.model.status == status.value)
        return query.order_by(self.model.created_at.desc()).all()

    def get_total_completed_net(self, db: Session, *, organizer_id: str) -> Decimal:
        total = (
            db.query(func.coalesce(func.sum(self.model.net_amount), 0))
            .filter(
                self.model.organizer_id == organizer_id,
                self.model.status == PayoutStatus.COMPLETED.value,
            )
            .scalar()
        )
        return Decimal(str(total or 0))

    def stage_create(self, db: Session, **fields) -> Payout:
        """Add a new payout to the session and flush it to obtain the row."""
        db_obj = self.model(**fields)
        db.add(db_obj)
        db.flush()
        return db_obj


payout = CRUDPayout(Payout)
