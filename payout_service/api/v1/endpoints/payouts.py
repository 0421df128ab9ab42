# payout_service/api/v1/endpoints/payouts.py
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from payout_service.api import deps
from payout_service.core.auth import AuthContext
from payout_service.db.session import get_db
from payout_service.schemas.payout import (
    BulkProcessPayoutsRequest,
    BulkProcessResult,
    OrganizerRevenueAnalytics,
    Payout,
    PayoutDetail,
    PayoutStatus,
    PayoutWithOrganizer,
    ProcessPayoutRequest,
)
from payout_service.services.payout.payout_service import PayoutService, get_payout_service

router = APIRouter(tags=["Payouts"])


# ============================================
# Organizer endpoints
# ============================================

@router.post(
    "/payouts/request", response_model=Payout, status_code=status.HTTP_201_CREATED
)
async def request_payout(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: PayoutService = Depends(get_payout_service),
):
    """Request a payout of everything earned since the last paid period."""
    result = await service.request_payout(db, auth=auth)
    return deps.unwrap(result)


@router.get("/payouts/me", response_model=List[Payout])
async def list_my_payouts(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: PayoutService = Depends(get_payout_service),
):
    result = await service.get_organizer_payouts(db, auth=auth)
    return deps.unwrap(result)


@router.get("/payouts/me/analytics", response_model=OrganizerRevenueAnalytics)
async def my_revenue_analytics(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: PayoutService = Depends(get_payout_service),
):
    result = await service.get_organizer_revenue_analytics(db, auth=auth)
    return deps.unwrap(result)


# ============================================
# Admin endpoints
# ============================================

@router.get("/admin/payouts", response_model=List[PayoutWithOrganizer])
async def admin_list_payouts(
    status: Optional[PayoutStatus] = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: PayoutService = Depends(get_payout_service),
):
    """List payout requests for admin review, newest first."""
    result = await service.get_all_payout_requests(db, auth=auth, status=status)
    return deps.unwrap(result)


@router.post("/admin/payouts/bulk-process", response_model=BulkProcessResult)
async def admin_bulk_process_payouts(
    body: BulkProcessPayoutsRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: PayoutService = Depends(get_payout_service),
):
    """Approve or reject many payouts; individual failures are only counted."""
    result = await service.bulk_process_payouts(
        db, auth=auth, payout_ids=body.payout_ids, approve=body.approve
    )
    return deps.unwrap(result)


@router.get("/admin/payouts/{payout_id}", response_model=PayoutDetail)
async def admin_get_payout(
    payout_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: PayoutService = Depends(get_payout_service),
):
    result = await service.get_payout(db, auth=auth, payout_id=payout_id)
    return deps.unwrap(result)


@router.post("/admin/payouts/{payout_id}/process", response_model=Payout)
async def admin_process_payout(
    payout_id: str,
    body: ProcessPayoutRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(deps.get_auth_context),
    service: PayoutService = Depends(get_payout_service),
):
    """Approve or reject a single PENDING payout."""
    result = await service.process_payout(
        db, auth=auth, payout_id=payout_id, approve=body.approve, notes=body.notes
    )
    return deps.unwrap(result)
