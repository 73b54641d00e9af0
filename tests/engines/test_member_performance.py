"""
Tests for the Member-Project Performance Calculator.

Covers:
- Seed scenario: planned vs. actual days and investment
- Efficiency rate sign and zero-plan guard
- Pricing month resolution
- Entry filtering by member, project and classification
- Raw vs. effective measurement
- Reporting rounding
"""

from datetime import date, time
from decimal import Decimal

import pytest

from reward_engines.cost_basis import CostBasisCalculator
from reward_engines.member_performance import (
    calculate_member_performance,
    efficiency_rate,
    resolve_pricing_month,
)
from reward_engines.time_ledger import TimeMeasurement
from reward_engines.working_calendar import WorkingCalendar
from reward_kernel.domain.models import (
    Allocation,
    Project,
    ScheduleEntry,
    WorkHoursConfig,
)


class TestSeedScenario:
    """A planned 10 days and used 8; B planned 8 and used 9."""

    @pytest.fixture(autouse=True)
    def _setup(self, member_a, member_b, opex_records, scenario_schedules):
        calculator = CostBasisCalculator(WorkingCalendar())
        roster = (member_a, member_b)
        self.basis_a = calculator.calculate(roster, member_a, 2027, 2, opex_records)
        self.basis_b = calculator.calculate(roster, member_b, 2027, 2, opex_records)
        self.entries = scenario_schedules
        self.work_hours = WorkHoursConfig()

    def test_member_ahead_of_plan(self):
        perf = calculate_member_performance(
            Allocation("m-a", Decimal("10")), "p-1", self.basis_a, self.entries, self.work_hours,
        )

        assert perf.actual_minutes == 3840
        assert perf.actual_days == Decimal("8")
        assert perf.saved_days == Decimal("2")
        assert perf.efficiency_rate == Decimal("20")
        assert perf.planned_investment == Decimal("4800000")
        assert perf.actual_investment == Decimal("3840000")
        assert perf.saved_cost == Decimal("960000")
        assert perf.is_ahead_of_plan is True

    def test_member_behind_plan(self):
        perf = calculate_member_performance(
            Allocation("m-b", Decimal("8")), "p-1", self.basis_b, self.entries, self.work_hours,
        )

        assert perf.actual_minutes == 4320
        assert perf.actual_days == Decimal("9")
        assert perf.saved_days == Decimal("-1")
        assert perf.efficiency_rate == Decimal("-12.5")
        assert perf.planned_investment == Decimal("2560000")
        assert perf.actual_investment == Decimal("2880000")
        assert perf.is_ahead_of_plan is False


class TestEfficiencyRate:
    """Tests for efficiency_rate."""

    def test_zero_planned_days_is_zero(self):
        assert efficiency_rate(Decimal("0"), Decimal("3")) == Decimal("0")

    def test_on_plan_is_zero(self):
        assert efficiency_rate(Decimal("5"), Decimal("5")) == Decimal("0")

    def test_no_work_at_all_is_hundred(self):
        assert efficiency_rate(Decimal("5"), Decimal("0")) == Decimal("100")


class TestPricingMonth:
    """Allocation start date wins over project start date."""

    def setup_method(self):
        self.project = Project(
            id="p", name="P", contract_amount=Decimal("1"), start_date=date(2027, 2, 10),
        )

    def test_project_start_month(self):
        allocation = Allocation("m", Decimal("1"))
        assert resolve_pricing_month(allocation, self.project) == (2027, 2)

    def test_allocation_start_month(self):
        allocation = Allocation("m", Decimal("1"), start_date=date(2027, 4, 1))
        assert resolve_pricing_month(allocation, self.project) == (2027, 4)


class TestEntryFiltering:
    """Only this member's classified entries on this project count."""

    @pytest.fixture(autouse=True)
    def _setup(self, member_a, opex_records):
        calculator = CostBasisCalculator(WorkingCalendar())
        self.basis = calculator.calculate((member_a,), member_a, 2027, 2, opex_records)
        self.work_hours = WorkHoursConfig()

    def _raw(self, member_id, project_id, minutes):
        return ScheduleEntry(member_id, project_id, date(2027, 2, 2), minutes)

    def test_foreign_and_unclassified_entries_ignored(self):
        entries = [
            self._raw("m-a", "p-1", 240),
            self._raw("m-a", "p-2", 480),
            self._raw("m-b", "p-1", 480),
            self._raw("m-a", None, 480),
        ]

        perf = calculate_member_performance(
            Allocation("m-a", Decimal("1")), "p-1", self.basis, entries, self.work_hours,
        )

        assert perf.actual_minutes == 240
        assert perf.actual_days == Decimal("0.5")

    def test_no_entries_means_zero_actual(self):
        perf = calculate_member_performance(
            Allocation("m-a", Decimal("4")), "p-1", self.basis, [], self.work_hours,
        )

        assert perf.actual_days == Decimal("0")
        assert perf.efficiency_rate == Decimal("100")
        assert perf.actual_investment == Decimal("0")


class TestMeasurement:
    """Raw measurement uses logged minutes as recorded."""

    @pytest.fixture(autouse=True)
    def _setup(self, member_a, opex_records):
        calculator = CostBasisCalculator(WorkingCalendar())
        self.basis = calculator.calculate((member_a,), member_a, 2027, 2, opex_records)
        self.entries = [ScheduleEntry(
            "m-a", "p-1", date(2027, 2, 2), 600,
            start_time=time(8, 30), end_time=time(18, 30),
        )]

    def test_effective(self):
        perf = calculate_member_performance(
            Allocation("m-a", Decimal("1")), "p-1", self.basis, self.entries, WorkHoursConfig(),
        )
        assert perf.actual_minutes == 480

    def test_raw(self):
        perf = calculate_member_performance(
            Allocation("m-a", Decimal("1")), "p-1", self.basis, self.entries, WorkHoursConfig(),
            TimeMeasurement.RAW,
        )
        assert perf.actual_minutes == 600
        assert perf.actual_days == Decimal("1.25")


class TestRounded:
    """Rounding happens only in the reporting copy."""

    def test_days_and_percent_one_decimal(self, member_a, opex_records):
        calculator = CostBasisCalculator(WorkingCalendar())
        basis = calculator.calculate((member_a,), member_a, 2027, 2, opex_records)
        entries = [ScheduleEntry("m-a", "p-1", date(2027, 2, 2), 100)]

        perf = calculate_member_performance(
            Allocation("m-a", Decimal("3")), "p-1", basis, entries, WorkHoursConfig(),
        )
        rounded = perf.rounded()

        # 100 / 480 = 0.2083... days at 800,000 a day
        assert rounded.actual_days == Decimal("0.2")
        assert rounded.efficiency_rate == Decimal("93.1")
        assert rounded.actual_investment == Decimal("166667")
        assert perf.actual_days == Decimal(100) / Decimal(480)
