"""
Repositories package.

Data access layer over the ledger tables.
"""

from ingotpool.repositories.blacklist_repository import BlacklistRepository
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.order_repository import PoolOrderRepository
from ingotpool.repositories.pending_payout_repository import (
    PendingPayoutRepository,
)
from ingotpool.repositories.pool_repository import PoolRepository
from ingotpool.repositories.referral_repository import ReferralLinkRepository
from ingotpool.repositories.treasury_repository import TreasuryRepository
from ingotpool.repositories.user_repository import UserRepository


__all__ = [
    "BlacklistRepository",
    "EngineSettingsRepository",
    "LedgerEventRepository",
    "PendingPayoutRepository",
    "PoolOrderRepository",
    "PoolRepository",
    "ReferralLinkRepository",
    "TreasuryRepository",
    "UserRepository",
]
