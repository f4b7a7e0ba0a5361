"""
IngotPool accounting engine.

Pooled-investment ledger with capacity-limited pools, seven-level
referral rewards and coverage-gated payouts.
"""

__version__ = "1.0.0"
