"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from ingotpool.models.base import Base
from ingotpool.models.blacklist import Blacklist
from ingotpool.models.engine_settings import EngineSettings
from ingotpool.models.enums import Asset, LedgerEventType, PoolKind, PoolStatus
from ingotpool.models.ledger_event import LedgerEvent
from ingotpool.models.order import PoolOrder
from ingotpool.models.pending_payout import PendingPayout
from ingotpool.models.pool import Pool
from ingotpool.models.referral import ReferralLink
from ingotpool.models.treasury import Treasury
from ingotpool.models.user import User


__all__ = [
    "Base",
    # Core
    "User",
    "ReferralLink",
    "Pool",
    "PoolOrder",
    "Treasury",
    "PendingPayout",
    # System
    "EngineSettings",
    "Blacklist",
    "LedgerEvent",
    # Enums
    "Asset",
    "PoolKind",
    "PoolStatus",
    "LedgerEventType",
]
