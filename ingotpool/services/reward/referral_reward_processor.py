"""
Referral reward processor.

Credits upline commissions on every deposit. Rewards are pushed once, at
deposit time, and never recomputed.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.enums import LedgerEventType
from ingotpool.models.user import User
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.user_repository import UserRepository
from ingotpool.services.reward.reward_calculator import RewardCalculator
from ingotpool.utils.decimal_utils import to_money
from ingotpool.utils.exceptions import StateError


@dataclass
class LevelReward:
    """Commission credited to one upline."""

    level: int
    account: str
    amount: Decimal


@dataclass
class ProcessResult:
    """Result of reward processing."""

    total_rewards: Decimal
    rewards: list[LevelReward] = field(default_factory=list)

    @property
    def rewards_count(self) -> int:
        """Number of credited uplines."""
        return len(self.rewards)


class ReferralRewardProcessor:
    """Walks the upline array of a depositor crediting commissions."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize referral reward processor.

        Args:
            session: Async database session
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.event_repo = LedgerEventRepository(session)
        self.calculator = RewardCalculator()

    async def distribute(
        self,
        depositor: User,
        amount: Decimal,
        pool_id: int | None = None,
    ) -> ProcessResult:
        """
        Credit commissions for a deposit to the depositor's uplines.

        Iteration stops at the first empty upline slot.

        Args:
            depositor: User who deposited
            amount: Deposit base value
            pool_id: Pool the deposit went into

        Returns:
            ProcessResult with the per-level breakdown

        Raises:
            StateError: If a stored upline account does not exist
        """
        rewards: list[LevelReward] = []
        total = Decimal("0")

        for index, upline_id in enumerate(depositor.uplines):
            if upline_id is None:
                break

            level = index + 1
            reward = self.calculator.calculate_level_reward(amount, level)
            if reward <= 0:
                continue

            upline = await self.user_repo.get_for_update(upline_id)
            if upline is None:
                raise StateError(
                    f"Upline {upline_id} of {depositor.id} is not registered",
                    upline=upline_id,
                )

            upline.referral_reward_total = to_money(
                upline.referral_reward_total + reward
            )
            rewards.append(LevelReward(level=level, account=upline_id, amount=reward))
            total += reward

            logger.debug(
                "Referral reward credited",
                extra={
                    "upline": upline_id,
                    "depositor": depositor.id,
                    "level": level,
                    "amount": str(reward),
                },
            )

        await self.session.flush()

        if rewards:
            await self.event_repo.record(
                LedgerEventType.REFERRAL_REWARDS_CREDITED,
                account=depositor.id,
                pool_id=pool_id,
                deposit=str(amount),
                total=str(total),
                levels=[
                    {"level": r.level, "account": r.account, "amount": str(r.amount)}
                    for r in rewards
                ],
            )

        result = ProcessResult(total_rewards=total, rewards=rewards)

        logger.info(
            "Referral rewards processed",
            extra={
                "depositor": depositor.id,
                "deposit": str(amount),
                "total_rewards": str(total),
                "rewards_count": result.rewards_count,
            },
        )

        return result
