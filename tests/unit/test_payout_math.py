"""
Unit tests for payout settlement and treasury math.

Tests cover:
- Order settlement with interest and fee
- Deposit split between reserve and operational
- Coverage ratio
"""

from decimal import Decimal

import pytest

from ingotpool.services.payout.payout_calculator import PayoutCalculator
from ingotpool.services.treasury_service import coverage_ratio, split_deposit
from ingotpool.utils.exceptions import LedgerArithmeticError


class TestSettlement:
    """Test order settlement."""

    def test_settle_with_interest(self):
        """1000 at 10%: gross 1100, fee 22, net 1078."""
        settlement = PayoutCalculator().settle(Decimal("1000"), Decimal("10"))

        assert settlement.interest == Decimal("100")
        assert settlement.gross == Decimal("1100")
        assert settlement.fee == Decimal("22")
        assert settlement.net == Decimal("1078")

    def test_settle_without_interest(self):
        """Zero rate still pays the principal minus fee."""
        settlement = PayoutCalculator().settle(Decimal("500"), Decimal("0"))

        assert settlement.gross == Decimal("500")
        assert settlement.net == Decimal("490")

    def test_net_plus_fee_is_gross(self):
        settlement = PayoutCalculator().settle(Decimal("333.33"), Decimal("7.5"))
        assert settlement.net + settlement.fee == settlement.gross


class TestDepositSplit:
    """Test the 5/95 split."""

    def test_split_1000(self):
        assert split_deposit(Decimal("1000")) == (Decimal("50"), Decimal("950"))

    def test_split_has_no_leakage(self):
        """Both parts always add up to the deposit."""
        value = Decimal("0.000000000000000019")
        reserve, operational = split_deposit(value)
        assert reserve + operational == value


class TestCoverageRatio:
    """Test coverage ratio."""

    def test_full_coverage(self):
        assert coverage_ratio(Decimal("1000"), Decimal("1000")) == 100

    def test_floors_to_whole_percent(self):
        assert coverage_ratio(Decimal("599.99"), Decimal("1000")) == 59

    def test_threshold_value(self):
        assert coverage_ratio(Decimal("600"), Decimal("1000")) == 60

    def test_nothing_invested(self):
        with pytest.raises(LedgerArithmeticError):
            coverage_ratio(Decimal("0"), Decimal("0"))
