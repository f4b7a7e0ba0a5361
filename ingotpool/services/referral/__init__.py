"""
Referral services package.

Contains modular services for the sponsor tree:
- config: Per-level commission rates
- chain_manager: Registration, referrer changes and upline materialization
"""

from ingotpool.services.referral.chain_manager import ReferralChainManager
from ingotpool.services.referral.config import REFERRAL_RATES


__all__ = [
    "REFERRAL_RATES",
    "ReferralChainManager",
]
