"""
Module: reward_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines: working calendar, time ledger, cost basis,
    member performance, settlement, distribution and aggregates.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import reward_kernel (and sibling engine modules).
    MUST NOT import reward_config or reward_services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
    - Decimal-only arithmetic for money and day counts.
    - Determinism: identical inputs always produce identical outputs.
    - Totality: every division with a possibly-zero denominator yields 0.

Usage:
    from reward_engines import CostBasisCalculator, WorkingCalendar
    from reward_engines import calculate_member_performance, distribute_reward
"""

from reward_engines.aggregates import (
    MemberPerformanceSummary,
    MemberProjectLine,
    OrganizationSummary,
    ProjectEvaluation,
    summarize_member,
    summarize_members,
    summarize_organization,
)
from reward_engines.cost_basis import (
    DEFAULT_OPEX_AMOUNT,
    CostBasisCalculator,
    DailyCostBasis,
    OpexSource,
    resolve_opex_amount,
    total_annual_salary,
)
from reward_engines.distribution import (
    MemberShare,
    RewardDistribution,
    distribute_reward,
)
from reward_engines.member_performance import (
    MemberProjectPerformance,
    calculate_member_performance,
    efficiency_rate,
    resolve_pricing_month,
)
from reward_engines.settlement import (
    ProjectSettlement,
    aggregate_settlement,
)
from reward_engines.time_ledger import (
    MINUTES_PER_DAY,
    ProjectMinutes,
    TimeMeasurement,
    effective_minutes,
    measured_minutes,
    summarize_by_project,
)
from reward_engines.working_calendar import (
    MonthWorkingDays,
    WorkingCalendar,
)

__all__ = [
    # Working calendar
    "WorkingCalendar",
    "MonthWorkingDays",
    # Time ledger
    "MINUTES_PER_DAY",
    "TimeMeasurement",
    "ProjectMinutes",
    "effective_minutes",
    "measured_minutes",
    "summarize_by_project",
    # Cost basis
    "DEFAULT_OPEX_AMOUNT",
    "CostBasisCalculator",
    "DailyCostBasis",
    "OpexSource",
    "resolve_opex_amount",
    "total_annual_salary",
    # Member performance
    "MemberProjectPerformance",
    "calculate_member_performance",
    "efficiency_rate",
    "resolve_pricing_month",
    # Settlement
    "ProjectSettlement",
    "aggregate_settlement",
    # Distribution
    "MemberShare",
    "RewardDistribution",
    "distribute_reward",
    # Aggregates
    "ProjectEvaluation",
    "MemberProjectLine",
    "MemberPerformanceSummary",
    "OrganizationSummary",
    "summarize_member",
    "summarize_members",
    "summarize_organization",
]
