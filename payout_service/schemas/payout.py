# payout_service/schemas/payout.py
from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict
from datetime import datetime
from decimal import Decimal
from enum import Enum


# ============================================
# Enums
# ============================================

class PayoutStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class OrderPaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


# ============================================
# Ledger / period value objects
# ============================================

class PayoutComputation(BaseModel):
    gross_amount: Decimal
    platform_fee: Decimal
    net_amount: Decimal
    order_count: int


class PayoutPeriod(BaseModel):
    period_start: datetime
    period_end: datetime


# ============================================
# Payout Schemas
# ============================================

class Payout(BaseModel):
    id: str
    organizer_id: str
    amount: Decimal
    platform_fee: Decimal
    net_amount: Decimal
    currency: str
    status: PayoutStatus
    bank_account: str
    bank_code: str
    account_name: Optional[str] = None
    period_start: datetime
    period_end: datetime
    failure_reason: Optional[str] = None
    notes: Optional[str] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PayoutOrganizer(BaseModel):
    id: str
    name: str
    email: str
    organization_name: Optional[str] = None


class PayoutWithOrganizer(Payout):
    organizer: PayoutOrganizer


class PayoutAuditEntry(BaseModel):
    id: str
    sequence: int
    action: str
    actor_type: str
    actor_id: Optional[str] = None
    previous_status: Optional[PayoutStatus] = None
    new_status: PayoutStatus
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PayoutDetail(PayoutWithOrganizer):
    audit_trail: List[PayoutAuditEntry] = []


class ProcessPayoutRequest(BaseModel):
    approve: bool
    notes: Optional[str] = Field(None, max_length=1000)


class BulkProcessPayoutsRequest(BaseModel):
    payout_ids: List[str] = Field(..., min_length=1, max_length=100)
    approve: bool


class BulkProcessResult(BaseModel):
    successful: int
    failed: int
    message: str


# ============================================
# Revenue analytics
# ============================================

class PendingPayoutSummary(BaseModel):
    amount: Decimal
    order_count: int
    can_request: bool


class RecentOrder(BaseModel):
    id: str
    event_id: str
    event_title: str
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    total_amount: Decimal
    platform_fee: Optional[Decimal] = None
    created_at: datetime


class OrganizerRevenueAnalytics(BaseModel):
    pending_payout: PendingPayoutSummary
    total_earnings: Decimal
    payout_history: List[Payout]
    recent_orders: List[RecentOrder]
