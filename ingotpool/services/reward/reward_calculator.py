"""
Reward calculator.

Single source of truth for referral commission and withdrawal-cap math.
"""

from decimal import Decimal

from ingotpool.config.business_constants import BASIS_POINTS, REFERRAL_CAP_MULTIPLIER
from ingotpool.models.user import User
from ingotpool.services.referral.config import REFERRAL_RATES
from ingotpool.utils.decimal_utils import mul_div, to_money


class RewardCalculator:
    """Referral commission calculations."""

    def calculate_level_reward(self, amount: Decimal, level: int) -> Decimal:
        """
        Calculate the commission of one upline level.

        Formula: amount * rate_bps / 10000

        Args:
            amount: Deposit base value
            level: Upline level, 1-based

        Returns:
            Commission (0 if level not configured or amount not positive)

        Example:
            >>> RewardCalculator().calculate_level_reward(Decimal("1000"), 1)
            Decimal('30.000000000000000000')
        """
        rate = REFERRAL_RATES.get(level, 0)
        if rate == 0 or amount <= 0:
            return Decimal("0")
        return mul_div(amount, rate, BASIS_POINTS)

    def calculate_withdrawal_cap(self, invested: Decimal) -> Decimal:
        """
        Lifetime referral withdrawal cap.

        Formula: invested * REFERRAL_CAP_MULTIPLIER

        Args:
            invested: User's cumulative deposits

        Returns:
            Cap amount
        """
        if invested <= 0:
            return Decimal("0")
        return to_money(invested * REFERRAL_CAP_MULTIPLIER)

    def calculate_claimable(
        self,
        invested: Decimal,
        reward_total: Decimal,
        withdrawn: Decimal,
    ) -> Decimal:
        """
        Referral reward a user may withdraw now.

        Formula: min(reward_total - withdrawn, cap - withdrawn), floored at 0.
        The cap follows the user's current deposits, so depositing more
        unlocks rewards already credited.

        Args:
            invested: User's cumulative deposits
            reward_total: Lifetime commissions credited
            withdrawn: Lifetime commissions paid out

        Returns:
            Claimable amount
        """
        cap = self.calculate_withdrawal_cap(invested)
        claimable = min(reward_total - withdrawn, cap - withdrawn)
        return max(Decimal("0"), claimable)

    def claimable_for(self, user: User) -> Decimal:
        """Claimable referral reward of a user."""
        return self.calculate_claimable(
            user.invested,
            user.referral_reward_total,
            user.referral_withdrawn,
        )
