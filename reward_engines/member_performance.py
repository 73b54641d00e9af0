"""
reward_engines.member_performance -- Planned vs. actual investment of one member on one project.

Responsibility:
    Reduce one staffing allocation and the member's logged time on the
    project to planned and actual investment, days saved and an
    efficiency percentage.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Depends on time_ledger (minutes) and a DailyCostBasis from
    cost_basis.  Consumed by settlement (investment totals) and
    distribution (efficiency rates).

Invariants enforced:
    - ``planned_investment == daily_total_cost * planned_days`` and
      ``actual_investment == daily_total_cost * actual_days`` exactly,
      before any rounding.
    - ``efficiency_rate`` has the sign of ``saved_days`` when
      ``planned_days > 0`` and is 0 when ``planned_days == 0``.
    - Only classified entries of this member for this project count.
    - Rounding happens only in ``rounded()``; efficiency is never derived
      from rounded day counts.

Failure modes:
    - None for well-typed input.

Usage:
    from reward_engines.member_performance import calculate_member_performance

    perf = calculate_member_performance(
        allocation=allocation,
        project_id=project.id,
        cost_basis=basis,
        entries=snapshot.entries_for(allocation.member_id, project.id),
        work_hours=snapshot.work_hours,
    )
    perf.efficiency_rate
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal

from reward_engines.cost_basis import DailyCostBasis
from reward_engines.time_ledger import MINUTES_PER_DAY, TimeMeasurement, measured_minutes
from reward_engines.tracer import traced_engine
from reward_kernel.domain.models import Allocation, Project, ScheduleEntry, WorkHoursConfig
from reward_kernel.domain.values import (
    HUNDRED,
    ZERO,
    round_days,
    round_money,
    round_percent,
)
from reward_kernel.logging_config import get_logger

logger = get_logger("engines.member_performance")


@dataclass(frozen=True)
class MemberProjectPerformance:
    """
    Cost and efficiency record of one member on one project.

    Full precision unless produced by ``rounded()``.
    """

    member_id: str
    project_id: str
    year_month: str
    daily_total_cost: Decimal
    planned_days: Decimal
    actual_minutes: int
    actual_days: Decimal
    saved_days: Decimal
    efficiency_rate: Decimal
    planned_investment: Decimal
    actual_investment: Decimal
    saved_cost: Decimal

    @property
    def is_ahead_of_plan(self) -> bool:
        return self.efficiency_rate > ZERO

    def rounded(self) -> MemberProjectPerformance:
        """Reporting copy: money to whole units, days and percent to one decimal."""
        return replace(
            self,
            daily_total_cost=round_money(self.daily_total_cost),
            planned_days=round_days(self.planned_days),
            actual_days=round_days(self.actual_days),
            saved_days=round_days(self.saved_days),
            efficiency_rate=round_percent(self.efficiency_rate),
            planned_investment=round_money(self.planned_investment),
            actual_investment=round_money(self.actual_investment),
            saved_cost=round_money(self.saved_cost),
        )


def resolve_pricing_month(allocation: Allocation, project: Project) -> tuple[int, int]:
    """(year, month) whose costs price the allocation: its own start date, else the project's."""
    start = allocation.start_date or project.start_date
    return start.year, start.month


def efficiency_rate(planned_days: Decimal, actual_days: Decimal) -> Decimal:
    """Percentage of planned days saved; 0 when nothing was planned."""
    if planned_days <= ZERO:
        return ZERO
    return (planned_days - actual_days) / planned_days * HUNDRED


@traced_engine("member_performance", "1.0", fingerprint_fields=("project_id",))
def calculate_member_performance(
    allocation: Allocation,
    project_id: str,
    cost_basis: DailyCostBasis,
    entries: Iterable[ScheduleEntry],
    work_hours: WorkHoursConfig,
    measurement: TimeMeasurement = TimeMeasurement.EFFECTIVE,
) -> MemberProjectPerformance:
    """
    Planned vs. actual investment of ``allocation.member_id`` on ``project_id``.

    Preconditions:
        ``cost_basis`` was priced for the allocation's member and pricing
        month (see ``resolve_pricing_month``).

    Args:
        allocation: Member's allocation on the project.
        project_id: Project the allocation belongs to.
        cost_basis: Member's daily cost basis for the pricing month.
        entries: Schedule entries; entries of other members or projects
            and unclassified entries are ignored.
        work_hours: Work and lunch windows for effective-minute clipping.
        measurement: Effective (work-hours adjusted) or raw minutes.
    """
    actual_minutes = sum(
        measured_minutes(e, work_hours, measurement)
        for e in entries
        if e.member_id == allocation.member_id and e.project_id == project_id
    )
    actual_days = Decimal(actual_minutes) / MINUTES_PER_DAY
    planned_days = allocation.planned_days
    daily_total_cost = cost_basis.daily_total_cost

    planned_investment = daily_total_cost * planned_days
    actual_investment = daily_total_cost * actual_days

    perf = MemberProjectPerformance(
        member_id=allocation.member_id,
        project_id=project_id,
        year_month=cost_basis.year_month,
        daily_total_cost=daily_total_cost,
        planned_days=planned_days,
        actual_minutes=actual_minutes,
        actual_days=actual_days,
        saved_days=planned_days - actual_days,
        efficiency_rate=efficiency_rate(planned_days, actual_days),
        planned_investment=planned_investment,
        actual_investment=actual_investment,
        saved_cost=planned_investment - actual_investment,
    )

    logger.info("member_performance_calculated", extra={
        "member_id": allocation.member_id,
        "project_id": project_id,
        "measurement": measurement.value,
        "planned_days": str(planned_days),
        "actual_minutes": actual_minutes,
        "efficiency_rate": str(perf.efficiency_rate),
    })
    return perf
