"""
Tests for PerformanceService.

Covers:
- End-to-end evaluation of the seed scenario
- Missing-member allocations
- Cost basis reuse within a pass
- Settle / unsettle with the injected clock
- Member and organisation summaries over settled projects only
- Raw time measurement from configuration
"""

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from reward_config.schema import EngineConfig, HolidayDef
from reward_engines.time_ledger import TimeMeasurement, UNCLASSIFIED
from reward_kernel.domain.models import Allocation, Project, ScheduleEntry
from reward_services import PerformanceService


class TestEvaluateProject:
    """The seed scenario evaluated end to end."""

    @pytest.fixture(autouse=True)
    def _setup(self, engine_config, deterministic_clock, scenario_snapshot, scenario_project):
        self.service = PerformanceService(engine_config, clock=deterministic_clock)
        self.evaluation = self.service.evaluate_project(scenario_snapshot, scenario_project)

    def test_member_performances(self):
        a = self.evaluation.performance_for("m-a")
        b = self.evaluation.performance_for("m-b")

        assert a.daily_total_cost == Decimal("480000")
        assert b.daily_total_cost == Decimal("320000")
        assert a.actual_days == Decimal("8")
        assert b.actual_days == Decimal("9")
        assert a.efficiency_rate == Decimal("20")
        assert b.efficiency_rate == Decimal("-12.5")

    def test_settlement(self):
        settlement = self.evaluation.settlement

        assert settlement.planned_performance == Decimal("16640000")
        assert settlement.actual_performance == Decimal("17280000")
        assert settlement.performance_diff == Decimal("640000")

    def test_distribution(self):
        distribution = self.evaluation.distribution

        assert distribution.company_share == Decimal("512000")
        assert distribution.team_share == Decimal("128000")
        assert self.evaluation.share_amount_for("m-a") == Decimal("128000")
        assert self.evaluation.share_amount_for("m-b") == Decimal("0")

    def test_unsettled_by_default(self):
        assert self.evaluation.is_settled is False


class TestMissingReferences:
    """Allocations naming unknown members are dropped."""

    def test_unknown_member_dropped(
        self, engine_config, scenario_snapshot, scenario_project, read_logs,
    ):
        project = replace(
            scenario_project,
            allocations=scenario_project.allocations + (Allocation("ghost", Decimal("5")),),
        )
        service = PerformanceService(engine_config)

        evaluation = service.evaluate_project(scenario_snapshot, project)

        assert [p.member_id for p in evaluation.performances] == ["m-a", "m-b"]
        assert evaluation.settlement.performance_diff == Decimal("640000")
        warnings = [r for r in read_logs() if r["message"] == "allocation_member_missing"]
        assert warnings[0]["member_id"] == "ghost"
        assert warnings[0]["level"] == "WARNING"


class TestCostBasisReuse:
    """A member is priced once per month within a pass."""

    def test_one_cost_basis_per_member_month(
        self, engine_config, scenario_snapshot, scenario_project, read_logs,
    ):
        second = replace(scenario_project, id="p-2", name="Second project")
        snapshot = replace(scenario_snapshot, projects=(scenario_project, second))

        PerformanceService(engine_config).evaluate_all(snapshot)

        priced = [r for r in read_logs() if r["message"] == "cost_basis_calculated"]
        assert sorted(r["member_id"] for r in priced) == ["m-a", "m-b"]


class TestSettlement:
    """Settle and unsettle through the service."""

    def setup_method(self):
        self.project = Project(
            id="p", name="P", contract_amount=Decimal("1000"), start_date=date(2027, 2, 1),
        )

    def test_settle_stamps_clock_time(self, engine_config, deterministic_clock):
        service = PerformanceService(engine_config, clock=deterministic_clock)

        settled = service.set_settled(self.project, True)

        assert settled.is_settled is True
        assert settled.settled_at == datetime(2027, 3, 2, 10, 0, tzinfo=timezone.utc)
        assert self.project.is_settled is False

    def test_unsettle_clears_timestamp(self, engine_config, deterministic_clock):
        service = PerformanceService(engine_config, clock=deterministic_clock)

        unsettled = service.set_settled(service.set_settled(self.project, True), False)

        assert unsettled.is_settled is False
        assert unsettled.settled_at is None

    def test_settling_does_not_change_figures(
        self, engine_config, deterministic_clock, scenario_snapshot, scenario_project,
    ):
        service = PerformanceService(engine_config, clock=deterministic_clock)
        settled = service.set_settled(scenario_project, True)

        before = service.evaluate_project(scenario_snapshot, scenario_project)
        after = service.evaluate_project(scenario_snapshot, settled)

        assert before.settlement == after.settlement
        assert before.distribution == after.distribution
        assert after.is_settled is True


class TestSummaries:
    """Member and organisation summaries count settled projects only."""

    def test_no_settled_projects(self, engine_config, scenario_snapshot):
        service = PerformanceService(engine_config)

        assert service.member_summaries(scenario_snapshot) == ()
        org = service.organization_summary(scenario_snapshot)
        assert org.settled_project_count == 0
        assert org.total_company_share == Decimal("0")

    def test_settled_project_counted(
        self, engine_config, deterministic_clock, scenario_snapshot, scenario_project,
    ):
        service = PerformanceService(engine_config, clock=deterministic_clock)
        snapshot = replace(
            scenario_snapshot, projects=(service.set_settled(scenario_project, True),),
        )

        summaries = service.member_summaries(snapshot)
        org = service.organization_summary(snapshot)

        assert [s.member_id for s in summaries] == ["m-a", "m-b"]
        assert summaries[0].total_share_amount == Decimal("128000")
        assert summaries[1].total_saved_days == Decimal("-1")
        assert org.settled_project_count == 1
        assert org.participating_member_count == 2
        assert org.total_company_share == Decimal("512000")
        assert org.total_team_distribution == Decimal("128000")


class TestConfiguration:
    """Configuration drives measurement, opex default and holidays."""

    def test_raw_measurement(self, scenario_snapshot, scenario_project):
        service = PerformanceService(EngineConfig(config_id="raw", time_measurement="raw"))

        evaluation = service.evaluate_project(scenario_snapshot, scenario_project)

        assert service.measurement is TimeMeasurement.RAW
        # 540 logged minutes per entry
        assert evaluation.performance_for("m-a").actual_days == Decimal("9")

    def test_build_snapshot_uses_config_calendar(self, member_a):
        config = EngineConfig(
            config_id="h", holidays=(HolidayDef(date(2027, 2, 1), "Holiday"),),
        )
        service = PerformanceService(config)

        snapshot = service.build_snapshot([member_a], [])

        assert snapshot.holidays.is_holiday(date(2027, 2, 1))
        assert snapshot.work_hours.lunch_for(date(2027, 2, 1)).start.hour == 12

    def test_holiday_raises_daily_cost(self, member_a, member_b, opex_records, scenario_project):
        config = EngineConfig(
            config_id="h", holidays=(HolidayDef(date(2027, 2, 1), "Holiday"),),
        )
        service = PerformanceService(config)
        snapshot = service.build_snapshot(
            [member_a, member_b], [scenario_project], opex_records=opex_records,
        )

        evaluation = service.evaluate_project(snapshot, scenario_project)

        # 19 working days instead of 20
        assert evaluation.performance_for("m-a").daily_total_cost == (
            Decimal("9600000") / 19
        )


class TestProjectMinutes:
    """Per-project minutes over a date range."""

    def test_range_and_member_filter(self, engine_config, scenario_snapshot):
        extra = ScheduleEntry("m-a", None, date(2027, 2, 2), 45)
        snapshot = replace(
            scenario_snapshot, schedules=scenario_snapshot.schedules + (extra,),
        )
        service = PerformanceService(engine_config)

        summary = service.project_minutes(
            snapshot, date(2027, 2, 1), date(2027, 2, 5), member_id="m-a",
        )

        assert summary[0].project_id == "p-1"
        assert summary[0].minutes == 5 * 480
        assert summary[1].project_id == UNCLASSIFIED
        assert summary[1].minutes == 45
