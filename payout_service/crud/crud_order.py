# payout_service/crud/crud_order.py
from typing import List
from datetime import datetime
from sqlalchemy.orm import Session, joinedload

from payout_service.crud.base import CRUDBase
from payout_service.models.event import Event
from payout_service.models.order import Order
from payout_service.schemas.payout import OrderPaymentStatus


class CRUDOrder(CRUDBase[Order]):
    """Read-only ledger queries. Orders are never written by the payout service."""

    def _completed_for_organizer(self, db: Session, *, organizer_id: str):
        return (
            db.query(self.model)
            .join(Event, Event.id == self.model.event_id)
            .filter(
                Event.user_id == organizer_id,
                self.model.payment_status == OrderPaymentStatus.COMPLETED.value,
            )
        )

    def get_completed_in_window(
        self,
        db: Session,
        *,
        organizer_id: str,
        period_start: datetime,
        period_end: datetime,
    ) -> List[Order]:
        """Completed orders for the organizer's events created in (period_start, period_end]."""
        return (
            self._completed_for_organizer(db, organizer_id=organizer_id)
            .filter(
                self.model.created_at > period_start,
                self.model.created_at <= period_end,
            )
            .all()
        )

    def get_recent_completed(
        self, db: Session, *, organizer_id: str, limit: int = 10
    ) -> List[Order]:
        """Most recent completed orders with event and buyer loaded."""
        return (
            self._completed_for_organizer(db, organizer_id=organizer_id)
            .options(joinedload(self.model.event), joinedload(self.model.buyer))
            .order_by(self.model.created_at.desc())
            .limit(limit)
            .all()
        )


order = CRUDOrder(Order)
