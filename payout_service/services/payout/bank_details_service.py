# payout_service/services/payout/bank_details_service.py
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from payout_service.core.auth import AuthContext
from payout_service.crud.crud_user import organizer_profile as crud_organizer_profile
from payout_service.models.user import OrganizerProfile
from payout_service.services.bank.bank_verification import (
    BankVerificationError,
    BankVerificationService,
)
from .errors import ActionResult, PayoutErrorCode

logger = logging.getLogger(__name__)


class BankDetailsService:
    """Verifies and stores the account an organizer is paid into."""

    def __init__(self, verifier: Optional[BankVerificationService] = None):
        self.verifier = verifier or BankVerificationService()

    async def update_bank_details(
        self,
        db: Session,
        *,
        auth: AuthContext,
        account_number: str,
        bank_code: str,
    ) -> ActionResult[OrganizerProfile]:
        """
        Resolve the account holder name, then save account number, bank code
        and verified name on the organizer profile. Existing payouts keep the
        snapshot they were created with.
        """
        if not auth.is_organizer:
            return ActionResult.fail(
                PayoutErrorCode.UNAUTHORIZED, "Only organizers can update bank details"
            )

        try:
            verification = self.verifier.verify(account_number, bank_code)
        except BankVerificationError as e:
            return ActionResult.fail(PayoutErrorCode.VERIFICATION_FAILED, e.message)

        try:
            profile = crud_organizer_profile.set_bank_details(
                db,
                user_id=auth.user_id,
                bank_account=verification.account_number,
                bank_code=verification.bank_code,
                account_name=verification.account_name,
            )
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Error updating bank details for {auth.user_id}")
            return ActionResult.fail(
                PayoutErrorCode.PERSISTENCE_FAILURE, "Failed to update bank details"
            )

        logger.info(f"Bank details verified and saved for organizer {auth.user_id}")
        return ActionResult.ok(profile, "Bank details updated successfully")


def get_bank_details_service() -> BankDetailsService:
    return BankDetailsService()
