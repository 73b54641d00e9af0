"""
Tests for the Reward Distribution Allocator.

Covers:
- Seed scenario company/team split and member shares
- Overrun absorption
- Eligibility: only positive efficiency shares
- Proportional shares and rounding residual
- Company share percent bounds
"""

from decimal import Decimal

import pytest

from reward_engines.distribution import distribute_reward


class TestSeedScenario:
    """640,000 surplus at 80% company share; only A beat the plan."""

    def setup_method(self):
        self.result = distribute_reward(
            Decimal("640000"),
            Decimal("80"),
            [("m-a", Decimal("20")), ("m-b", Decimal("-12.5"))],
        )

    def test_company_and_team_split(self):
        assert self.result.bonus_pool == Decimal("640000")
        assert self.result.company_share == Decimal("512000")
        assert self.result.team_share == Decimal("128000")

    def test_member_shares(self):
        a = self.result.share_for("m-a")
        b = self.result.share_for("m-b")

        assert a.share_percent == Decimal("100")
        assert a.share_amount == Decimal("128000")
        assert a.is_eligible is True
        assert b.share_percent == Decimal("0")
        assert b.share_amount == Decimal("0")
        assert b.is_eligible is False

    def test_every_member_is_listed_in_order(self):
        assert [s.member_id for s in self.result.shares] == ["m-a", "m-b"]
        assert self.result.eligible_count == 1
        assert self.result.rounding_residual == Decimal("0")


class TestOverrun:
    """Negative performance difference distributes nothing."""

    def test_overrun_absorbed(self):
        result = distribute_reward(
            Decimal("-500000"), Decimal("80"), [("m-a", Decimal("30"))],
        )

        assert result.bonus_pool == Decimal("0")
        assert result.company_share == Decimal("0")
        assert result.team_share == Decimal("0")
        assert result.share_for("m-a").share_amount == Decimal("0")

    def test_zero_diff(self):
        result = distribute_reward(Decimal("0"), Decimal("80"), [("m-a", Decimal("30"))])
        assert result.distributed_total == Decimal("0")


class TestEligibility:
    """Members at or below zero efficiency get nothing."""

    def test_nobody_eligible(self):
        result = distribute_reward(
            Decimal("1000000"),
            Decimal("80"),
            [("m-a", Decimal("0")), ("m-b", Decimal("-5"))],
        )

        assert result.team_share == Decimal("200000")
        assert result.distributed_total == Decimal("0")
        assert result.rounding_residual == Decimal("200000")

    def test_zero_efficiency_excluded_from_denominator(self):
        result = distribute_reward(
            Decimal("1000000"),
            Decimal("50"),
            [("m-a", Decimal("10")), ("m-b", Decimal("0")), ("m-c", Decimal("30"))],
        )

        assert result.share_for("m-a").share_amount == Decimal("125000")
        assert result.share_for("m-b").share_amount == Decimal("0")
        assert result.share_for("m-c").share_amount == Decimal("375000")

    def test_no_members(self):
        result = distribute_reward(Decimal("1000000"), Decimal("80"), [])

        assert result.shares == ()
        assert result.company_share == Decimal("800000")


class TestProportionalShares:
    """Shares are proportional to efficiency and rounded per member."""

    def test_three_way_split_residual(self):
        result = distribute_reward(
            Decimal("500000"),
            Decimal("80"),
            [("a", Decimal("10")), ("b", Decimal("10")), ("c", Decimal("10"))],
        )

        # 100,000 / 3 = 33,333.33 each
        assert [s.share_amount for s in result.shares] == [Decimal("33333")] * 3
        assert result.distributed_total == Decimal("99999")
        assert result.rounding_residual == Decimal("1")
        assert abs(result.rounding_residual) <= result.eligible_count

    def test_share_percent_sums_to_hundred(self):
        result = distribute_reward(
            Decimal("500000"),
            Decimal("80"),
            [("a", Decimal("10")), ("b", Decimal("20")), ("c", Decimal("30"))],
        )

        total = sum(s.share_percent for s in result.shares)
        assert abs(total - Decimal("100")) < Decimal("1e-20")
        assert result.share_for("c").reported_share_percent == Decimal("50.0")

    def test_odd_pool_rounds_half_up(self):
        result = distribute_reward(Decimal("5"), Decimal("50"), [("a", Decimal("1"))])

        assert result.company_share == Decimal("3")
        assert result.team_share == Decimal("3")


class TestCompanySharePercent:
    """Company share percent must lie within [0, 100]."""

    @pytest.mark.parametrize("percent", [Decimal("-1"), Decimal("100.5")])
    def test_out_of_range_rejected(self, percent):
        with pytest.raises(ValueError, match="company_share_percent"):
            distribute_reward(Decimal("100"), percent, [("a", Decimal("1"))])

    def test_all_to_team(self):
        result = distribute_reward(Decimal("1000"), Decimal("0"), [("a", Decimal("1"))])

        assert result.company_share == Decimal("0")
        assert result.share_for("a").share_amount == Decimal("1000")
