"""
Payout services package.

- payout_calculator: Per-order settlement math
- payout_engine: Coverage-gated pool payouts and settled balance withdrawals
"""

from ingotpool.services.payout.payout_calculator import PayoutCalculator, Settlement
from ingotpool.services.payout.payout_engine import PayoutEngine, PayoutResult


__all__ = [
    "PayoutCalculator",
    "PayoutEngine",
    "PayoutResult",
    "Settlement",
]
