from .errors import ActionResult, PayoutError, PayoutErrorCode
from .ledger import LedgerAggregator
from .periods import PayoutPeriodTracker
from .payout_service import PayoutService, get_payout_service
from .bank_details_service import BankDetailsService, get_bank_details_service

__all__ = [
    "ActionResult",
    "PayoutError",
    "PayoutErrorCode",
    "LedgerAggregator",
    "PayoutPeriodTracker",
    "PayoutService",
    "get_payout_service",
    "BankDetailsService",
    "get_bank_details_service",
]
