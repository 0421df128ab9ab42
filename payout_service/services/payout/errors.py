# payout_service/services/payout/errors.py
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class PayoutErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    BANK_DETAILS_MISSING = "BANK_DETAILS_MISSING"
    COOLDOWN_ACTIVE = "COOLDOWN_ACTIVE"
    NO_FUNDS_AVAILABLE = "NO_FUNDS_AVAILABLE"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


class PayoutError(Exception):
    """Expected, user-reportable failure of a payout operation."""

    def __init__(self, code: PayoutErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


@dataclass
class ActionResult(Generic[T]):
    """Tagged outcome handed back across the service boundary."""

    success: bool
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[PayoutErrorCode] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: Optional[str] = None) -> "ActionResult[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: PayoutErrorCode, message: str) -> "ActionResult[T]":
        return cls(success=False, message=message, error=error)

    @classmethod
    def from_error(cls, exc: PayoutError) -> "ActionResult[T]":
        return cls.fail(exc.code, exc.message)
