"""
Enumerations shared by models and services.
"""

from enum import Enum


class Asset(str, Enum):
    """Deposit assets accepted by the pools."""

    A = "A"
    B = "B"


class PoolKind(str, Enum):
    """Pool types."""

    STANDARD = "standard"
    LOTTERY = "lottery"


class PoolStatus(str, Enum):
    """Derived pool lifecycle state."""

    ACTIVE = "active"
    FULL = "full"
    INACTIVE = "inactive"
    PAID_OUT = "paid_out"


class LedgerEventType(str, Enum):
    """Audit event types."""

    USER_REGISTERED = "user_registered"
    REFERRER_CHANGED = "referrer_changed"
    JOINED_POOL = "joined_pool"
    POOL_CREATED = "pool_created"
    POOL_CLOSED = "pool_closed"
    REFERRAL_REWARDS_CREDITED = "referral_rewards_credited"
    REFERRAL_REWARD_WITHDRAWN = "referral_reward_withdrawn"
    PAYOUT_TRIGGERED = "payout_triggered"
    REWARD_WITHDRAWN = "reward_withdrawn"
    TREASURY_WITHDRAWN = "treasury_withdrawn"
    ASSET_SWEPT = "asset_swept"
    SETTINGS_CHANGED = "settings_changed"
    BLACKLIST_CHANGED = "blacklist_changed"
    EMERGENCY_HALT_CHANGED = "emergency_halt_changed"
