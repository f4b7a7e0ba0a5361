"""
Access control.

Single capability check invoked at the entry of every administrative
operation.
"""

from enum import Enum

from loguru import logger

from ingotpool.config.settings import Settings
from ingotpool.utils.exceptions import AuthorizationError


class Capability(str, Enum):
    """Administrative capabilities."""

    MANAGE_CONFIG = "manage_config"
    MANAGE_POOLS = "manage_pools"
    MANAGE_REFERRALS = "manage_referrals"
    MANAGE_BLACKLIST = "manage_blacklist"
    TRIGGER_PAYOUT = "trigger_payout"
    MANAGE_TREASURY = "manage_treasury"
    EMERGENCY_HALT = "emergency_halt"


ALL_CAPABILITIES = frozenset(Capability)

# Admins can operate the engine but cannot move treasury funds
ADMIN_CAPABILITIES = ALL_CAPABILITIES - {Capability.MANAGE_TREASURY}


class AccessControl:
    """Maps accounts to the capabilities they hold."""

    def __init__(
        self,
        owner: str,
        admins: list[str] | None = None,
    ) -> None:
        """
        Initialize access control.

        Args:
            owner: Account holding every capability
            admins: Accounts holding ADMIN_CAPABILITIES
        """
        self.owner = owner
        self._grants: dict[str, set[Capability]] = {}
        for admin in admins or []:
            self._grants[admin] = set(ADMIN_CAPABILITIES)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AccessControl":
        """Build access control from application settings."""
        return cls(
            owner=settings.owner_account,
            admins=settings.get_admin_accounts(),
        )

    def capabilities_of(self, account: str) -> frozenset[Capability]:
        """Capabilities held by an account."""
        if account == self.owner:
            return ALL_CAPABILITIES
        return frozenset(self._grants.get(account, ()))

    def has(self, account: str, capability: Capability) -> bool:
        """Check whether an account holds a capability."""
        return capability in self.capabilities_of(account)

    def require(self, account: str, capability: Capability) -> None:
        """
        Ensure the caller holds a capability.

        Raises:
            AuthorizationError: If the capability is missing
        """
        if not self.has(account, capability):
            logger.warning(
                "Unauthorized administrative call",
                extra={"account": account, "capability": capability.value},
            )
            raise AuthorizationError(
                f"Account {account} lacks capability {capability.value}",
                account=account,
                capability=capability.value,
            )

    def grant(self, account: str, *capabilities: Capability) -> None:
        """Grant capabilities to an account."""
        self._grants.setdefault(account, set()).update(capabilities)
        logger.info(
            "Capabilities granted",
            extra={
                "account": account,
                "capabilities": [c.value for c in capabilities],
            },
        )

    def revoke(self, account: str, *capabilities: Capability) -> None:
        """Revoke capabilities from an account. The owner cannot be revoked."""
        if account == self.owner:
            raise AuthorizationError("Owner capabilities cannot be revoked")
        granted = self._grants.get(account)
        if granted is None:
            return
        granted.difference_update(capabilities)
        if not granted:
            del self._grants[account]
        logger.info(
            "Capabilities revoked",
            extra={
                "account": account,
                "capabilities": [c.value for c in capabilities],
            },
        )
