"""
Referral system configuration.

Per-level commission rates in basis points, keyed by level
(1 = direct referrer).
"""

from ingotpool.config.business_constants import REFERRAL_RATES_BPS


REFERRAL_RATES = {
    level: bps for level, bps in enumerate(REFERRAL_RATES_BPS, start=1)
}
