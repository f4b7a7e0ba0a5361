"""
Reward services package.

- reward_calculator: Level commission and withdrawal-cap math
- referral_reward_processor: Credits uplines on every deposit
- referral_withdrawal: Pays out claimable referral rewards
"""

from ingotpool.services.reward.referral_reward_processor import (
    LevelReward,
    ProcessResult,
    ReferralRewardProcessor,
)
from ingotpool.services.reward.referral_withdrawal import (
    ReferralWithdrawalService,
    WithdrawalResult,
)
from ingotpool.services.reward.reward_calculator import RewardCalculator


__all__ = [
    "LevelReward",
    "ProcessResult",
    "ReferralRewardProcessor",
    "ReferralWithdrawalService",
    "RewardCalculator",
    "WithdrawalResult",
]
