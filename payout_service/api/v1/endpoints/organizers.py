# payout_service/api/v1/endpoints/organizers.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from payout_service.api import deps
from payout_service.core.auth import AuthContext
from payout_service.db.session import get_db
from payout_service.schemas.organizer import BankDetailsUpdate, OrganizerBankProfile
from payout_service.services.payout.bank_details_service import (
    BankDetailsService,
    get_bank_details_service,
)

router = APIRouter(tags=["Organizers"])


@router.put("/organizers/me/bank-details", response_model=OrganizerBankProfile)
async def update_my_bank_details(
    body: BankDetailsUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: BankDetailsService = Depends(get_bank_details_service),
):
    """Verify a bank account with the provider and save it as the payout destination."""
    result = await service.update_bank_details(
        db,
        auth=auth,
        account_number=body.account_number,
        bank_code=body.bank_code,
    )
    return deps.unwrap(result)
