"""
Business logic constants for IngotPool.

Central location for the fixed rules of the pool ledger, referral program,
treasury and payouts. Values that operators may tune live in settings.
"""

from decimal import Decimal


# ========================================================================
# REFERRAL PROGRAM
# ========================================================================

# Number of sponsor levels credited on every deposit
REFERRAL_DEPTH = 7

# Per-level commission in basis points (level 1 = direct referrer)
REFERRAL_RATES_BPS = (300, 200, 100, 100, 100, 50, 25)

BASIS_POINTS = 10000

# Maximum number of direct referrals per sponsor
MAX_DIRECT_REFERRALS = 36

# Lifetime referral withdrawals are capped at this multiple of own deposits
REFERRAL_CAP_MULTIPLIER = 3

MIN_REFERRAL_WITHDRAWAL = Decimal("10")

# ========================================================================
# POOLS
# ========================================================================

# Capacity of every pool in ingots
POOL_CAPACITY_INGOTS = 100

# Pool IDs up to this value are Standard, later IDs are Lottery
STANDARD_POOL_MAX_ID = 9

# Initial pool ID series: 1..9 Standard, 10..12 Lottery
INITIAL_POOL_SERIES_MAX_ID = 12

FIRST_POOL_ID = 1

DEFAULT_INGOT_PRICE = Decimal("1000")

DEFAULT_ORDER_INTEREST_PERCENT = Decimal("10")

# ========================================================================
# TREASURY AND PAYOUTS
# ========================================================================

# Share of every deposit routed to reserve, the rest goes to operational
RESERVE_SHARE_PERCENT = 5

# Fee withheld from every settled order and added to reserve
PAYOUT_FEE_PERCENT = 2

# Minimum (reserve + operational) * 100 / total invested to allow payouts
COVERAGE_THRESHOLD_PERCENT = 60

MAX_TOKEN_DECIMALS = 36
