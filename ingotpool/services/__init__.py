"""
Services.

Business logic layer. Services share the caller's session and never commit.
"""

from ingotpool.services.access_control import AccessControl, Capability
from ingotpool.services.admin_service import AdminService
from ingotpool.services.base_service import BaseService, log_operation
from ingotpool.services.bootstrap import bootstrap_ledger
from ingotpool.services.deposit_service import DepositResult, DepositService
from ingotpool.services.treasury_service import (
    TreasuryService,
    coverage_ratio,
    split_deposit,
)


__all__ = [
    "AccessControl",
    "AdminService",
    "BaseService",
    "Capability",
    "DepositResult",
    "DepositService",
    "TreasuryService",
    "bootstrap_ledger",
    "coverage_ratio",
    "log_operation",
    "split_deposit",
]
