"""
Tests for admin payout processing.

Verifies that PayoutService.process_payout and bulk_process_payouts:
- Move approved payouts through PROCESSING to COMPLETED
- Move rejected payouts to FAILED with a reason
- Record every transition in the audit trail
- Never touch a payout that already left PENDING
- Leave the payout untouched when the database write fails
- Notify the organizer of the decision
- Isolate per-item failures in bulk runs
"""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from payout_service.crud.crud_notification import get_notifications_for_user
from payout_service.crud.crud_payout_audit_log import payout_audit_log as crud_audit
from payout_service.models.payout import Payout
from payout_service.services.payout import PayoutErrorCode, PayoutService
from payout_service.services.payout.ledger import LedgerAggregator
from tests.utils.auth import admin_context, organizer_context
from tests.utils.factories import (
    make_admin,
    make_organizer,
    make_payout,
    naive,
    run_async,
    utc,
)

NOW = utc(2026, 2, 2, 9, 30)
UTCNOW = "payout_service.services.payout.payout_service.utcnow"


class TestProcessPayout:
    """Tests for the single-payout state machine."""

    def setup_method(self):
        self.service = PayoutService(ledger=LedgerAggregator(default_fee_percent=5.0))

    def _process(self, db, admin, payout_id, approve, notes=None, service=None):
        service = service or self.service
        with patch(UTCNOW, return_value=NOW):
            return run_async(
                service.process_payout(
                    db,
                    auth=admin_context(admin),
                    payout_id=payout_id,
                    approve=approve,
                    notes=notes,
                )
            )

    def test_approve_completes_payout(self, db):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")

        result = self._process(db, admin, payout.id, approve=True, notes="Paid via GTB")

        assert result.success is True
        assert result.message == "Payout processed successfully"
        assert result.data.status == "COMPLETED"
        assert result.data.processed_by == admin.id
        assert naive(result.data.processed_at) == naive(NOW)
        assert result.data.notes == "Paid via GTB"
        assert result.data.failure_reason is None

    def test_approve_passes_through_processing(self, db):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")

        self._process(db, admin, payout.id, approve=True)
        entries = crud_audit.get_for_payout(db, payout_id=payout.id)

        assert [(e.sequence, e.action, e.previous_status, e.new_status) for e in entries] == [
            (1, "payout.processing", "PENDING", "PROCESSING"),
            (2, "payout.completed", "PROCESSING", "COMPLETED"),
        ]
        assert all(e.actor_type == "admin" and e.actor_id == admin.id for e in entries)

    def test_reject_fails_payout_with_notes_as_reason(self, db):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")

        result = self._process(db, admin, payout.id, approve=False, notes="Account mismatch")

        assert result.success is True
        assert result.message == "Payout request rejected"
        assert result.data.status == "FAILED"
        assert result.data.failure_reason == "Account mismatch"
        assert result.data.processed_at is None

        entries = crud_audit.get_for_payout(db, payout_id=payout.id)
        assert [(e.action, e.new_status) for e in entries] == [("payout.rejected", "FAILED")]
        assert entries[0].details == {"reason": "Account mismatch"}

    def test_reject_without_notes_uses_default_reason(self, db):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")

        result = self._process(db, admin, payout.id, approve=False)

        assert result.data.failure_reason == "Rejected by admin"

    @pytest.mark.parametrize("status", ["PROCESSING", "COMPLETED", "FAILED"])
    def test_non_pending_payout_is_already_processed(self, db, status):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status=status)

        result = self._process(db, admin, payout.id, approve=True)

        assert result.error == PayoutErrorCode.ALREADY_PROCESSED
        assert result.message == "Payout has already been processed"
        db.refresh(payout)
        assert payout.status == status
        assert crud_audit.get_for_payout(db, payout_id=payout.id) == []

    def test_second_decision_is_refused(self, db):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")

        self._process(db, admin, payout.id, approve=False)
        result = self._process(db, admin, payout.id, approve=True)

        assert result.error == PayoutErrorCode.ALREADY_PROCESSED
        db.refresh(payout)
        assert payout.status == "FAILED"

    def test_unknown_payout_is_not_found(self, db):
        admin = make_admin(db)

        result = self._process(db, admin, "po_missing", approve=True)

        assert result.error == PayoutErrorCode.NOT_FOUND
        assert result.message == "Payout request not found"

    def test_non_admin_is_unauthorized(self, db):
        organizer = make_organizer(db)
        payout = make_payout(db, organizer=organizer, status="PENDING")

        result = run_async(
            self.service.process_payout(
                db, auth=organizer_context(organizer), payout_id=payout.id, approve=True
            )
        )

        assert result.error == PayoutErrorCode.UNAUTHORIZED
        assert result.message == "Admin access required"
        db.refresh(payout)
        assert payout.status == "PENDING"

    def test_database_error_leaves_payout_pending(self, db):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")
        payout_id = payout.id

        with patch.object(crud_audit, "log_transition", side_effect=SQLAlchemyError("boom")):
            result = self._process(db, admin, payout_id, approve=True)

        assert result.error == PayoutErrorCode.PERSISTENCE_FAILURE
        assert result.message == "Failed to process payout"
        stored = db.get(Payout, payout_id)
        assert stored.status == "PENDING"
        assert stored.processed_at is None
        assert stored.processed_by is None

    def test_unexpected_error_rolls_back_and_propagates(self, db):
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")
        payout_id = payout.id

        with patch.object(crud_audit, "log_transition", side_effect=RuntimeError("bug")):
            with pytest.raises(RuntimeError):
                self._process(db, admin, payout_id, approve=False)

        assert db.get(Payout, payout_id).status == "PENDING"

    def test_organizer_notified_of_approval(self, db):
        admin = make_admin(db)
        organizer = make_organizer(db)
        payout = make_payout(db, organizer=organizer, status="PENDING", net_amount=19000)

        self._process(db, admin, payout.id, approve=True)

        notifications = get_notifications_for_user(db, organizer.id)
        assert len(notifications) == 1
        assert notifications[0].title == "Payout Processed Successfully"
        assert notifications[0].message.startswith("Your payout of ₦19,000 has been processed")
        assert notifications[0].action_url == "/dashboard/analytics"

    def test_organizer_notified_of_rejection_with_reason(self, db):
        admin = make_admin(db)
        organizer = make_organizer(db)
        payout = make_payout(db, organizer=organizer, status="PENDING", net_amount=500)

        self._process(db, admin, payout.id, approve=False, notes="Account mismatch")

        notifications = get_notifications_for_user(db, organizer.id)
        assert notifications[0].title == "Payout Request Rejected"
        assert notifications[0].message == (
            "Your payout request of ₦500 has been rejected. Account mismatch"
        )
        assert notifications[0].notification_metadata["rejectionReason"] == "Account mismatch"

    def test_notification_failure_does_not_undo_decision(self, db):
        notifier = MagicMock()
        notifier.notify.side_effect = RuntimeError("queue unavailable")
        service = PayoutService(
            ledger=LedgerAggregator(default_fee_percent=5.0), notifier=notifier
        )
        admin = make_admin(db)
        payout = make_payout(db, organizer=make_organizer(db), status="PENDING")
        payout_id = payout.id

        result = self._process(db, admin, payout_id, approve=True, service=service)

        assert result.success is True
        assert db.get(Payout, payout_id).status == "COMPLETED"


class TestBulkProcessPayouts:
    """Tests for bulk approve/reject."""

    def setup_method(self):
        self.service = PayoutService(ledger=LedgerAggregator(default_fee_percent=5.0))

    def _pending_payouts(self, db, count):
        return [
            make_payout(db, organizer=make_organizer(db, name=f"Organizer {i}"), status="PENDING")
            for i in range(count)
        ]

    def test_missing_id_counts_as_failure_without_blocking_others(self, db):
        admin = make_admin(db)
        payouts = self._pending_payouts(db, 4)
        ids = [p.id for p in payouts[:2]] + ["po_missing"] + [p.id for p in payouts[2:]]

        result = run_async(
            self.service.bulk_process_payouts(
                db, auth=admin_context(admin), payout_ids=ids, approve=True
            )
        )

        assert result.success is True
        assert result.data.successful == 4
        assert result.data.failed == 1
        assert result.data.message == "Processed 4 payouts successfully, 1 failed"
        assert result.message == result.data.message
        assert db.query(Payout).filter(Payout.status == "COMPLETED").count() == 4

    def test_all_successful_message_omits_failures(self, db):
        admin = make_admin(db)
        payouts = self._pending_payouts(db, 2)

        result = run_async(
            self.service.bulk_process_payouts(
                db, auth=admin_context(admin), payout_ids=[p.id for p in payouts], approve=False
            )
        )

        assert result.data.message == "Processed 2 payouts successfully"
        assert db.query(Payout).filter(Payout.status == "FAILED").count() == 2

    def test_already_processed_ids_are_counted_as_failed(self, db):
        admin = make_admin(db)
        done = make_payout(db, organizer=make_organizer(db), status="COMPLETED")
        pending = self._pending_payouts(db, 1)[0]

        result = run_async(
            self.service.bulk_process_payouts(
                db, auth=admin_context(admin), payout_ids=[done.id, pending.id], approve=True
            )
        )

        assert (result.data.successful, result.data.failed) == (1, 1)

    def test_unexpected_item_error_is_isolated(self, db):
        admin = make_admin(db)
        payouts = self._pending_payouts(db, 2)
        real_process = self.service.process_payout

        async def flaky_process(db, *, auth, payout_id, approve, notes=None):
            if payout_id == payouts[0].id:
                raise RuntimeError("bug")
            return await real_process(
                db, auth=auth, payout_id=payout_id, approve=approve, notes=notes
            )

        with patch.object(self.service, "process_payout", side_effect=flaky_process):
            result = run_async(
                self.service.bulk_process_payouts(
                    db, auth=admin_context(admin), payout_ids=[p.id for p in payouts], approve=True
                )
            )

        assert (result.data.successful, result.data.failed) == (1, 1)

    def test_non_admin_is_unauthorized(self, db):
        organizer = make_organizer(db)
        payout = make_payout(db, organizer=organizer, status="PENDING")

        result = run_async(
            self.service.bulk_process_payouts(
                db, auth=organizer_context(organizer), payout_ids=[payout.id], approve=True
            )
        )

        assert result.error == PayoutErrorCode.UNAUTHORIZED
        db.refresh(payout)
        assert payout.status == "PENDING"
