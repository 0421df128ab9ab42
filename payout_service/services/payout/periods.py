# payout_service/services/payout/periods.py
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from payout_service.crud.crud_payout import payout as crud_payout
from payout_service.schemas.payout import PayoutPeriod

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class PayoutPeriodTracker:
    """
    Works out the next unbilled window for an organizer.

    The window opens where the latest PROCESSING/COMPLETED payout was
    created (or at the epoch) and closes now. Callers must compute it inside
    the same transaction, under the organizer lock, that inserts the payout.
    """

    def next_period(
        self, db: Session, *, organizer_id: str, now: Optional[datetime] = None
    ) -> PayoutPeriod:
        last_payout = crud_payout.get_latest_honored(db, organizer_id=organizer_id)
        period_start = last_payout.created_at if last_payout else EPOCH
        return PayoutPeriod(
            period_start=period_start,
            period_end=now or datetime.now(timezone.utc),
        )
