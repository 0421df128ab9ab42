# payout_service/services/bank/bank_verification.py
"""
Bank account verification against the Paystack resolve endpoint.

Uses synchronous httpx; called only while an organizer sets up bank
details, never during payout processing.
"""
import logging
from typing import Optional

import httpx

from payout_service.core.config import settings
from payout_service.schemas.organizer import BankAccountVerification

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Payment system not configured. Please contact administrator."
DEFAULT_FAILURE_MESSAGE = "Failed to verify bank account"


class BankVerificationError(Exception):
    """The account was rejected or the upstream service was unusable."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BankVerificationService:
    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.PAYSTACK_SECRET_KEY
        self.base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.BANK_VERIFICATION_TIMEOUT

    def verify(self, account_number: str, bank_code: str) -> BankAccountVerification:
        """
        Resolve the account holder name for an account number and bank code.

        Raises:
            BankVerificationError: if the key is missing, the account is
                rejected, or the request fails
        """
        if not self.secret_key:
            logger.error("Bank verification attempted without a Paystack secret key")
            raise BankVerificationError(NOT_CONFIGURED_MESSAGE)

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(
                    f"{self.base_url}/bank/resolve",
                    params={"account_number": account_number, "bank_code": bank_code},
                    headers={
                        "Authorization": f"Bearer {self.secret_key}",
                        "Content-Type": "application/json",
                    },
                )
            data = response.json()
        except httpx.TimeoutException:
            logger.warning(f"Bank verification timed out for bank {bank_code}")
            raise BankVerificationError(DEFAULT_FAILURE_MESSAGE)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Bank verification request failed: {e}")
            raise BankVerificationError(DEFAULT_FAILURE_MESSAGE)

        if not isinstance(data, dict):
            logger.error(f"Unexpected bank verification response for bank {bank_code}")
            raise BankVerificationError(DEFAULT_FAILURE_MESSAGE)

        if data.get("status"):
            account = data.get("data") or {}
            account_name = account.get("account_name") if isinstance(account, dict) else None
            if not isinstance(account_name, str) or not account_name.strip():
                logger.error(f"Bank verification for bank {bank_code} returned no account name")
                raise BankVerificationError(DEFAULT_FAILURE_MESSAGE)
            return BankAccountVerification(
                account_number=account_number,
                bank_code=bank_code,
                account_name=account_name,
            )

        message = data.get("message")
        if not isinstance(message, str) or not message:
            message = DEFAULT_FAILURE_MESSAGE
        logger.warning(f"Bank verification rejected for bank {bank_code}: {message}")
        raise BankVerificationError(message)
