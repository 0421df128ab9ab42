# payout_service/services/payout/payout_service.py
"""
Organizer payout workflow.

Handles the full lifecycle of an organizer payout:
- Request: eligibility checks, period/ledger computation, PENDING record
- Processing: PENDING -> PROCESSING -> COMPLETED, or PENDING -> FAILED
- Bulk processing with per-item failure isolation
- Payout listings and organizer revenue analytics

Every public operation returns an ActionResult. Expected failures are
PayoutError codes; database errors roll the session back and surface as
PERSISTENCE_FAILURE. Notifications are sent after commit and never affect
the outcome.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from payout_service.core.auth import AuthContext
from payout_service.core.config import settings
from payout_service.crud.crud_order import order as crud_order
from payout_service.crud.crud_payout import payout as crud_payout
from payout_service.crud.crud_payout_audit_log import payout_audit_log as crud_audit
from payout_service.crud.crud_user import organizer_profile as crud_organizer_profile
from payout_service.models.payout import Payout
from payout_service.schemas.notification import NotificationCreate
from payout_service.schemas.payout import (
    BulkProcessResult,
    OrganizerRevenueAnalytics,
    PayoutAuditEntry,
    PayoutDetail,
    PayoutOrganizer,
    PayoutStatus,
    Payout as PayoutSchema,
    PayoutWithOrganizer,
    PendingPayoutSummary,
    RecentOrder,
)
from payout_service.services.notification.notification_service import (
    NotificationService,
    notification_service,
)
from .errors import ActionResult, PayoutError, PayoutErrorCode
from .ledger import LedgerAggregator
from .periods import PayoutPeriodTracker

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE = "PAYMENT_RECEIVED"
CURRENCY_SYMBOLS = {"NGN": "₦", "USD": "$", "GBP": "£", "EUR": "€"}

ADMIN_REQUIRED_MESSAGE = "Admin access required"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_amount(amount, currency: str = "NGN") -> str:
    """₦19,000 or ₦19,000.50: grouped, trailing .00 dropped."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency + " ")
    formatted = f"{Decimal(str(amount)):,.2f}"
    if formatted.endswith(".00"):
        formatted = formatted[:-3]
    return f"{symbol}{formatted}"


class PayoutService:
    """
    Drives payout requests and admin decisions.

    Args:
        ledger: Aggregates completed orders into gross/fee/net
        period_tracker: Works out the next unbilled window
        notifier: Best-effort notification sink
        cooldown_days: Minimum days between payout requests
        minimum_amount: Smallest net amount that can be requested
        currency: Platform currency stamped on new payouts
    """

    def __init__(
        self,
        ledger: Optional[LedgerAggregator] = None,
        period_tracker: Optional[PayoutPeriodTracker] = None,
        notifier: Optional[NotificationService] = None,
        cooldown_days: Optional[int] = None,
        minimum_amount: Optional[float] = None,
        currency: Optional[str] = None,
    ):
        self.ledger = ledger or LedgerAggregator(settings.PLATFORM_FEE_PERCENT)
        self.period_tracker = period_tracker or PayoutPeriodTracker()
        self.notifier = notifier or notification_service
        self.cooldown_days = (
            cooldown_days if cooldown_days is not None else settings.PAYOUT_COOLDOWN_DAYS
        )
        self.minimum_amount = Decimal(
            str(minimum_amount if minimum_amount is not None else settings.PAYOUT_MINIMUM_AMOUNT)
        )
        self.currency = currency or settings.PLATFORM_CURRENCY

    # ------------------------------------------------------------------ #
    # Request
    # ------------------------------------------------------------------ #

    async def request_payout(self, db: Session, *, auth: AuthContext) -> ActionResult[Payout]:
        """Create a PENDING payout for everything earned since the last honored payout."""
        try:
            payout = self._create_payout_request(db, auth)
        except PayoutError as e:
            db.rollback()
            logger.info(f"Payout request refused for {auth.user_id}: {e.code.value}")
            return ActionResult.from_error(e)
        except IntegrityError:
            # Lost a race with a concurrent request for the same organizer
            db.rollback()
            logger.warning(f"Concurrent payout request rejected for {auth.user_id}")
            return ActionResult.fail(
                PayoutErrorCode.COOLDOWN_ACTIVE,
                "You already have a payout request awaiting processing",
            )
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Error requesting payout for {auth.user_id}")
            return ActionResult.fail(
                PayoutErrorCode.PERSISTENCE_FAILURE, "Failed to request payout"
            )

        logger.info(
            f"Payout {payout.id} requested by {auth.user_id} for "
            f"{format_amount(payout.net_amount, payout.currency)}"
        )
        self._notify_admins_of_request(db, auth, payout)

        return ActionResult.ok(
            payout,
            "Payout request submitted successfully. It will be processed within 24 hours.",
        )

    def _create_payout_request(self, db: Session, auth: AuthContext) -> Payout:
        if not auth.is_organizer:
            raise PayoutError(
                PayoutErrorCode.UNAUTHORIZED, "Only organizers can request payouts"
            )

        # Holding this row lock until commit makes the checks, the period
        # computation and the insert one critical section per organizer.
        profile = crud_organizer_profile.get_by_user_for_update(db, user_id=auth.user_id)
        if not profile or not profile.has_bank_details:
            raise PayoutError(
                PayoutErrorCode.BANK_DETAILS_MISSING,
                "Please add your bank details before requesting a payout",
            )

        now = utcnow()
        recent = crud_payout.get_created_after(
            db,
            organizer_id=auth.user_id,
            since=now - timedelta(days=self.cooldown_days),
        )
        if recent:
            raise PayoutError(
                PayoutErrorCode.COOLDOWN_ACTIVE,
                f"You can only request a payout every {self.cooldown_days} days",
            )

        if crud_payout.get_open(db, organizer_id=auth.user_id):
            raise PayoutError(
                PayoutErrorCode.COOLDOWN_ACTIVE,
                "You already have a payout request awaiting processing",
            )

        period = self.period_tracker.next_period(db, organizer_id=auth.user_id, now=now)
        computation = self.ledger.compute_payout(
            db,
            organizer_id=auth.user_id,
            period_start=period.period_start,
            period_end=period.period_end,
        )

        if computation.net_amount <= 0 or computation.net_amount < self.minimum_amount:
            raise PayoutError(
                PayoutErrorCode.NO_FUNDS_AVAILABLE, "No funds available for payout"
            )

        payout = crud_payout.stage_create(
            db,
            organizer_id=auth.user_id,
            amount=computation.gross_amount,
            platform_fee=computation.platform_fee,
            net_amount=computation.net_amount,
            currency=self.currency,
            status=PayoutStatus.PENDING.value,
            bank_account=profile.bank_account,
            bank_code=profile.bank_code,
            account_name=profile.account_name,
            period_start=period.period_start,
            period_end=period.period_end,
            created_at=period.period_end,
        )
        crud_audit.log_transition(
            db,
            payout_id=payout.id,
            action="payout.requested",
            actor_type="organizer",
            actor_id=auth.user_id,
            new_status=PayoutStatus.PENDING.value,
            details={"order_count": computation.order_count},
        )
        db.commit()
        db.refresh(payout)
        return payout

    def _notify(self, db: Session, notification: NotificationCreate) -> None:
        try:
            self.notifier.notify(db, notification)
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to send notification '{notification.title}': {e}")

    def _notify_admins_of_request(self, db: Session, auth: AuthContext, payout: Payout) -> None:
        self._notify(
            db,
            NotificationCreate(
                type=NOTIFICATION_TYPE,
                title="New Payout Request",
                message=(
                    f"{auth.display_name} has requested a payout of "
                    f"{format_amount(payout.net_amount, payout.currency)}"
                ),
                action_url=f"/admin/dashboard/payouts/{payout.id}",
                is_admin_notification=True,
                metadata={
                    "payoutId": payout.id,
                    "organizerName": auth.name,
                    "organizerEmail": auth.email,
                    "payoutAmount": str(payout.net_amount),
                    "requestedAt": utcnow().isoformat(),
                },
                send_email=True,
            ),
        )

    # ------------------------------------------------------------------ #
    # Processing state machine
    # ------------------------------------------------------------------ #

    async def process_payout(
        self,
        db: Session,
        *,
        auth: AuthContext,
        payout_id: str,
        approve: bool,
        notes: Optional[str] = None,
    ) -> ActionResult[Payout]:
        """
        Apply an admin decision to a PENDING payout.

        Approve: PENDING -> PROCESSING -> COMPLETED. Reject: PENDING -> FAILED.
        The transition and its audit rows commit together or not at all.
        """
        if not auth.is_admin:
            return ActionResult.fail(PayoutErrorCode.UNAUTHORIZED, ADMIN_REQUIRED_MESSAGE)

        try:
            payout = crud_payout.get_for_update(db, payout_id=payout_id)
            if not payout:
                raise PayoutError(PayoutErrorCode.NOT_FOUND, "Payout request not found")
            if payout.status != PayoutStatus.PENDING.value:
                raise PayoutError(
                    PayoutErrorCode.ALREADY_PROCESSED, "Payout has already been processed"
                )

            if approve:
                self._start_processing(db, payout, auth, notes)
                self._complete(db, payout, auth)
            else:
                self._reject(db, payout, auth, notes)

            db.commit()
            db.refresh(payout)
        except PayoutError as e:
            db.rollback()
            return ActionResult.from_error(e)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Error processing payout {payout_id}")
            return ActionResult.fail(
                PayoutErrorCode.PERSISTENCE_FAILURE, "Failed to process payout"
            )
        except Exception:
            db.rollback()
            raise

        if approve:
            logger.info(f"Payout {payout.id} processed by admin {auth.user_id}")
            self._notify_organizer_processed(db, payout)
            return ActionResult.ok(payout, "Payout processed successfully")

        logger.info(f"Payout {payout.id} rejected by admin {auth.user_id}: {payout.failure_reason}")
        self._notify_organizer_rejected(db, payout, notes)
        return ActionResult.ok(payout, "Payout request rejected")

    def _transition(
        self,
        db: Session,
        payout: Payout,
        auth: AuthContext,
        *,
        new_status: PayoutStatus,
        action: str,
        details: Optional[dict] = None,
    ) -> None:
        previous_status = payout.status
        payout.status = new_status.value
        db.add(payout)
        db.flush()
        crud_audit.log_transition(
            db,
            payout_id=payout.id,
            action=action,
            actor_type="admin",
            actor_id=auth.user_id,
            previous_status=previous_status,
            new_status=new_status.value,
            details=details,
        )

    def _start_processing(
        self, db: Session, payout: Payout, auth: AuthContext, notes: Optional[str]
    ) -> None:
        # A real transfer rail would be initiated here and completion would
        # arrive later; PROCESSING is the state it waits in.
        payout.processed_at = utcnow()
        payout.processed_by = auth.user_id
        payout.notes = notes
        self._transition(
            db, payout, auth, new_status=PayoutStatus.PROCESSING, action="payout.processing"
        )

    def _complete(self, db: Session, payout: Payout, auth: AuthContext) -> None:
        self._transition(
            db, payout, auth, new_status=PayoutStatus.COMPLETED, action="payout.completed"
        )

    def _reject(
        self, db: Session, payout: Payout, auth: AuthContext, notes: Optional[str]
    ) -> None:
        payout.failure_reason = notes or "Rejected by admin"
        payout.processed_by = auth.user_id
        payout.notes = notes
        self._transition(
            db,
            payout,
            auth,
            new_status=PayoutStatus.FAILED,
            action="payout.rejected",
            details={"reason": payout.failure_reason},
        )

    def _notify_organizer_processed(self, db: Session, payout: Payout) -> None:
        self._notify(
            db,
            NotificationCreate(
                type=NOTIFICATION_TYPE,
                title="Payout Processed Successfully",
                message=(
                    f"Your payout of {format_amount(payout.net_amount, payout.currency)} "
                    "has been processed and will reflect in your account within 24 hours."
                ),
                action_url="/dashboard/analytics",
                user_id=payout.organizer_id,
                metadata={
                    "payoutId": payout.id,
                    "payoutAmount": str(payout.net_amount),
                    "processedAt": utcnow().isoformat(),
                },
                send_email=True,
            ),
        )

    def _notify_organizer_rejected(
        self, db: Session, payout: Payout, notes: Optional[str]
    ) -> None:
        self._notify(
            db,
            NotificationCreate(
                type=NOTIFICATION_TYPE,
                title="Payout Request Rejected",
                message=(
                    f"Your payout request of {format_amount(payout.net_amount, payout.currency)} "
                    f"has been rejected. {notes or ''}"
                ).strip(),
                action_url="/dashboard/analytics",
                user_id=payout.organizer_id,
                metadata={
                    "payoutId": payout.id,
                    "rejectionReason": notes,
                    "rejectedAt": utcnow().isoformat(),
                },
                send_email=True,
            ),
        )

    # ------------------------------------------------------------------ #
    # Bulk processing
    # ------------------------------------------------------------------ #

    async def bulk_process_payouts(
        self,
        db: Session,
        *,
        auth: AuthContext,
        payout_ids: List[str],
        approve: bool,
    ) -> ActionResult[BulkProcessResult]:
        """Apply one decision to many payouts; one bad id never blocks the rest."""
        if not auth.is_admin:
            return ActionResult.fail(PayoutErrorCode.UNAUTHORIZED, ADMIN_REQUIRED_MESSAGE)

        # Items never await, so they settle one after another on the shared session
        results = await asyncio.gather(
            *(
                self.process_payout(db, auth=auth, payout_id=payout_id, approve=approve)
                for payout_id in payout_ids
            ),
            return_exceptions=True,
        )

        successful = 0
        for payout_id, result in zip(payout_ids, results):
            if isinstance(result, BaseException):
                logger.error(f"Unexpected error processing payout {payout_id}: {result}")
            elif result.success:
                successful += 1
        failed = len(results) - successful

        message = f"Processed {successful} payouts successfully"
        if failed > 0:
            message += f", {failed} failed"
        logger.info(f"Bulk payout run by admin {auth.user_id}: {message}")

        return ActionResult.ok(
            BulkProcessResult(successful=successful, failed=failed, message=message),
            message,
        )

    # ------------------------------------------------------------------ #
    # Listings
    # ------------------------------------------------------------------ #

    async def get_organizer_payouts(
        self, db: Session, *, auth: AuthContext
    ) -> ActionResult[List[Payout]]:
        """The caller's own payouts, newest first."""
        try:
            payouts = crud_payout.get_by_organizer(db, organizer_id=auth.user_id)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Error fetching payouts for {auth.user_id}")
            return ActionResult.fail(
                PayoutErrorCode.PERSISTENCE_FAILURE, "Failed to fetch payouts"
            )
        return ActionResult.ok(payouts)

    async def get_all_payout_requests(
        self,
        db: Session,
        *,
        auth: AuthContext,
        status: Optional[PayoutStatus] = None,
    ) -> ActionResult[List[PayoutWithOrganizer]]:
        """Every payout with its organizer, newest first (admin only)."""
        if not auth.is_admin:
            return ActionResult.fail(PayoutErrorCode.UNAUTHORIZED, ADMIN_REQUIRED_MESSAGE)

        try:
            payouts = crud_payout.get_all_with_organizer(db, status=status)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Error fetching payout requests")
            return ActionResult.fail(
                PayoutErrorCode.PERSISTENCE_FAILURE, "Failed to fetch payout requests"
            )
        return ActionResult.ok([self._with_organizer(p) for p in payouts])

    async def get_payout(
        self, db: Session, *, auth: AuthContext, payout_id: str
    ) -> ActionResult[PayoutDetail]:
        """One payout with organizer identity and audit trail (admin only)."""
        if not auth.is_admin:
            return ActionResult.fail(PayoutErrorCode.UNAUTHORIZED, ADMIN_REQUIRED_MESSAGE)

        try:
            payout = crud_payout.get_with_organizer(db, payout_id=payout_id)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Error fetching payout {payout_id}")
            return ActionResult.fail(
                PayoutErrorCode.PERSISTENCE_FAILURE, "Failed to fetch payout"
            )
        if not payout:
            return ActionResult.fail(PayoutErrorCode.NOT_FOUND, "Payout request not found")

        summary = self._with_organizer(payout)
        return ActionResult.ok(
            PayoutDetail(
                **summary.model_dump(),
                audit_trail=[
                    PayoutAuditEntry.model_validate(entry) for entry in payout.audit_entries
                ],
            )
        )

    @staticmethod
    def _with_organizer(payout: Payout) -> PayoutWithOrganizer:
        organizer = payout.organizer
        profile = organizer.organizer_profile if organizer else None
        return PayoutWithOrganizer.model_validate(
            {
                **{
                    column.name: getattr(payout, column.name)
                    for column in Payout.__table__.columns
                },
                "organizer": PayoutOrganizer(
                    id=payout.organizer_id,
                    name=organizer.name if organizer else "",
                    email=organizer.email if organizer else "",
                    organization_name=profile.organization_name if profile else None,
                ),
            }
        )

    # ------------------------------------------------------------------ #
    # Analytics
    # ------------------------------------------------------------------ #

    async def get_organizer_revenue_analytics(
        self, db: Session, *, auth: AuthContext
    ) -> ActionResult[OrganizerRevenueAnalytics]:
        """
        Read-only dashboard projection: what a request would pay out now,
        lifetime completed earnings, last 5 payouts and last 10 sales.
        """
        try:
            period = self.period_tracker.next_period(db, organizer_id=auth.user_id, now=utcnow())
            pending = self.ledger.compute_payout(
                db,
                organizer_id=auth.user_id,
                period_start=period.period_start,
                period_end=period.period_end,
            )
            history = crud_payout.get_by_organizer(db, organizer_id=auth.user_id, limit=5)
            total_earnings = crud_payout.get_total_completed_net(db, organizer_id=auth.user_id)
            recent_orders = crud_order.get_recent_completed(
                db, organizer_id=auth.user_id, limit=10
            )
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Error fetching revenue analytics for {auth.user_id}")
            return ActionResult.fail(
                PayoutErrorCode.PERSISTENCE_FAILURE, "Failed to fetch revenue analytics"
            )

        return ActionResult.ok(
            OrganizerRevenueAnalytics(
                pending_payout=PendingPayoutSummary(
                    amount=pending.net_amount,
                    order_count=pending.order_count,
                    can_request=pending.net_amount > 0,
                ),
                total_earnings=total_earnings,
                payout_history=[PayoutSchema.model_validate(p) for p in history],
                recent_orders=[
                    RecentOrder(
                        id=o.id,
                        event_id=o.event_id,
                        event_title=o.event.title,
                        buyer_name=o.buyer.name if o.buyer else None,
                        buyer_email=o.buyer.email if o.buyer else None,
                        total_amount=o.total_amount,
                        platform_fee=o.platform_fee,
                        created_at=o.created_at,
                    )
                    for o in recent_orders
                ],
            )
        )


def get_payout_service() -> PayoutService:
    return PayoutService()
