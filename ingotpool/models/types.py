"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL, JSON
from sqlalchemy.dialects.postgresql import JSONB

# Money type for amounts, balances, rewards and treasury counters
# Precision: 36 digits total, 18 after decimal point
# Suitable for: token amounts with up to 18 decimals
MoneyType = DECIMAL(36, 18)

# Percentage type for interest rates
# Precision: 7 digits total, 2 after decimal point
# Range: 0.00 to 99999.99
PercentType = DECIMAL(7, 2)

# Parity rate between assets (value of one unit of B in units of A)
RateType = DECIMAL(36, 18)

# JSON column that uses JSONB on PostgreSQL
JSONType = JSON().with_variant(JSONB(), "postgresql")
