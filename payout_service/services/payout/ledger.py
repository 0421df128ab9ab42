# payout_service/services/payout/ledger.py
"""
Ledger aggregation for organizer payouts.

Fee model:
- Orders with an explicit platform_fee use it as-is
- Orders without one pay the default rate on their own total_amount
- The fallback is resolved PER ORDER, so negotiated-fee orders and
  default-rate orders in the same window each keep their own fee
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from sqlalchemy.orm import Session

from payout_service.crud.crud_order import order as crud_order
from payout_service.models.order import Order
from payout_service.schemas.payout import PayoutComputation

CENT = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class LedgerAggregator:
    """
    Sums completed order revenue into gross/fee/net figures.

    Args:
        default_fee_percent: Platform rate applied to orders without an
            explicit fee (e.g., 5.0 for 5%)
    """

    def __init__(self, default_fee_percent: float):
        self.default_fee_rate = _to_decimal(default_fee_percent) / Decimal(100)

    def order_fee(self, order: Order) -> Decimal:
        """Explicit fee if the order carries one, otherwise the default rate."""
        if order.platform_fee is not None:
            return _to_decimal(order.platform_fee)
        return (_to_decimal(order.total_amount) * self.default_fee_rate).quantize(
            CENT, rounding=ROUND_HALF_UP
        )

    def summarize(self, orders: Iterable[Order]) -> PayoutComputation:
        gross = Decimal("0")
        fee = Decimal("0")
        count = 0
        for order in orders:
            gross += _to_decimal(order.total_amount)
            fee += self.order_fee(order)
            count += 1

        return PayoutComputation(
            gross_amount=gross,
            platform_fee=fee,
            net_amount=gross - fee,
            order_count=count,
        )

    def compute_payout(
        self,
        db: Session,
        *,
        organizer_id: str,
        period_start: datetime,
        period_end: datetime,
    ) -> PayoutComputation:
        """
        Aggregate the organizer's COMPLETED orders created in
        (period_start, period_end]. Read-only; zero orders gives all zeros.
        """
        orders = crud_order.get_completed_in_window(
            db,
            organizer_id=organizer_id,
            period_start=period_start,
            period_end=period_end,
        )
        return self.summarize(orders)
