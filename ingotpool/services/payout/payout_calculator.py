"""
Payout calculator.

Settlement math for a single order.
"""

from dataclasses import dataclass
from decimal import Decimal

from ingotpool.config.business_constants import PAYOUT_FEE_PERCENT
from ingotpool.utils.decimal_utils import percent_of, to_money


@dataclass(frozen=True)
class Settlement:
    """Settlement of one order, in base value."""

    principal: Decimal
    interest: Decimal
    gross: Decimal
    fee: Decimal
    net: Decimal


class PayoutCalculator:
    """Order settlement calculations."""

    def __init__(self, fee_percent: Decimal | int = PAYOUT_FEE_PERCENT) -> None:
        self.fee_percent = fee_percent

    def settle(self, principal: Decimal, rate_percent: Decimal) -> Settlement:
        """
        Settle an order.

        Formula:
            interest = principal * rate / 100
            gross = principal + interest
            fee = gross * fee_percent / 100
            net = gross - fee

        Args:
            principal: Invested base value
            rate_percent: Order interest rate in percent

        Returns:
            Settlement breakdown
        """
        interest = percent_of(principal, rate_percent)
        gross = to_money(principal + interest)
        fee = percent_of(gross, self.fee_percent)
        return Settlement(
            principal=principal,
            interest=interest,
            gross=gross,
            fee=fee,
            net=gross - fee,
        )
