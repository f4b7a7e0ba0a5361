"""
Pool services package.

- allocation: Ingot allocation and pool kind rules
- pool_manager: Pool ID issuance, rollover and provisioning
"""

from ingotpool.services.pool.allocation import IngotAllocator, kind_for_id
from ingotpool.services.pool.pool_manager import PoolManager


__all__ = [
    "IngotAllocator",
    "PoolManager",
    "kind_for_id",
]
