"""
Referral chain management module.

Handles registration into the sponsor tree, administrative referrer
overrides and materialization of the seven-level upline array.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.config.business_constants import MAX_DIRECT_REFERRALS, REFERRAL_DEPTH
from ingotpool.models.enums import LedgerEventType
from ingotpool.models.user import User
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.referral_repository import ReferralLinkRepository
from ingotpool.repositories.user_repository import UserRepository
from ingotpool.utils.exceptions import StateError, ValidationError


class ReferralChainManager:
    """Manages the sponsor tree."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.link_repo = ReferralLinkRepository(session)
        self.event_repo = LedgerEventRepository(session)

    async def build_uplines(self, referrer: User | None) -> list[str | None]:
        """
        Materialize the upline array for a user sponsored by ``referrer``.

        Walks the referrer chain upwards, at most REFERRAL_DEPTH steps, and
        stops at the first ancestor without a referrer.

        Args:
            referrer: Direct sponsor, or None

        Returns:
            REFERRAL_DEPTH slots, level 1 first, None when absent
        """
        uplines: list[str | None] = [None] * REFERRAL_DEPTH
        current = referrer

        for level in range(REFERRAL_DEPTH):
            if current is None:
                break
            uplines[level] = current.id
            if current.referrer_id is None:
                break
            current = await self.user_repo.get_by_id(current.referrer_id)

        return uplines

    async def _descends_from(self, user: User | None, ancestor_id: str) -> bool:
        """Check whether ``ancestor_id`` appears anywhere above ``user``."""
        current = user
        while current is not None:
            if current.id == ancestor_id:
                return True
            if current.referrer_id is None:
                return False
            current = await self.user_repo.get_by_id(current.referrer_id)
        return False

    async def register(self, account: str, referrer_id: str | None = None) -> User:
        """
        Register an account, optionally under a sponsor.

        Args:
            account: Account to register
            referrer_id: Sponsor account, or None for a root user

        Returns:
            Created user

        Raises:
            StateError: If the account is already registered
            ValidationError: On self-referral, unregistered sponsor or when
                the sponsor already has MAX_DIRECT_REFERRALS referrals
        """
        if not account:
            raise ValidationError("Account must not be empty")

        if await self.user_repo.is_registered(account):
            raise StateError(f"Account {account} is already registered")

        referrer = None
        if referrer_id is not None:
            if referrer_id == account:
                raise ValidationError("Account cannot refer itself")

            referrer = await self.user_repo.get_for_update(referrer_id)
            if referrer is None:
                raise ValidationError(
                    f"Referrer {referrer_id} is not registered",
                    referrer=referrer_id,
                )

            direct_count = await self.link_repo.count_downlines(referrer_id)
            if direct_count >= MAX_DIRECT_REFERRALS:
                raise ValidationError(
                    f"Referrer {referrer_id} already has "
                    f"{MAX_DIRECT_REFERRALS} direct referrals",
                    referrer=referrer_id,
                )

        uplines = await self.build_uplines(referrer)
        user = await self.user_repo.create(
            id=account,
            referrer_id=referrer_id,
            uplines=uplines,
        )

        if referrer is not None:
            await self.link_repo.append(referrer_id, account)

        await self.event_repo.record(
            LedgerEventType.USER_REGISTERED,
            account=account,
            referrer=referrer_id,
        )

        logger.info(
            "User registered",
            extra={
                "account": account,
                "referrer": referrer_id,
                "upline_depth": sum(1 for u in uplines if u is not None),
            },
        )

        return user

    async def change_referrer(
        self, account: str, new_referrer_id: str | None, actor: str
    ) -> User:
        """
        Override a user's sponsor and recompute their upline array.

        Rewards already credited stay where they are. Downline lists and
        the stored uplines of the user's own referrals are left untouched.

        Args:
            account: User whose sponsor changes
            new_referrer_id: New sponsor, or None to detach
            actor: Administrator performing the change

        Returns:
            Updated user

        Raises:
            ValidationError: On self-referral, unregistered user or sponsor,
                or when the new sponsor descends from the user
        """
        if account == new_referrer_id:
            raise ValidationError("Account cannot refer itself")

        user = await self.user_repo.get_for_update(account)
        if user is None:
            raise ValidationError(f"Account {account} is not registered")

        new_referrer = None
        if new_referrer_id is not None:
            new_referrer = await self.user_repo.get_by_id(new_referrer_id)
            if new_referrer is None:
                raise ValidationError(
                    f"Referrer {new_referrer_id} is not registered",
                    referrer=new_referrer_id,
                )

        uplines = await self.build_uplines(new_referrer)
        if await self._descends_from(new_referrer, account):
            raise ValidationError(
                f"Referrer {new_referrer_id} is a descendant of {account}",
                referrer=new_referrer_id,
            )

        old_referrer_id = user.referrer_id
        user.referrer_id = new_referrer_id
        user.uplines = uplines
        await self.session.flush()

        await self.event_repo.record(
            LedgerEventType.REFERRER_CHANGED,
            account=account,
            old_referrer=old_referrer_id,
            new_referrer=new_referrer_id,
            actor=actor,
        )

        logger.warning(
            "Referrer changed by administrator",
            extra={
                "account": account,
                "old_referrer": old_referrer_id,
                "new_referrer": new_referrer_id,
                "actor": actor,
            },
        )

        return user
