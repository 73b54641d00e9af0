"""
reward_engines.settlement -- Project-level planned vs. actual performance.

Responsibility:
    Sum the member performance records of one project and compare the
    contract amount against planned and actual investment.  The
    difference between actual and planned performance is the surplus
    that the distribution engine may hand out.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes member_performance records; feeds distribution.

Invariants enforced:
    - performance = contract amount - investment, for both plan and actual.
    - performance_diff = actual_performance - planned_performance
      (positive = under plan, negative = overrun).
    - Totals are summed at full precision and rounded once in ``rounded()``.

Failure modes:
    - None.  A project with no performance records has zero investment
      and a zero performance_diff.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from reward_engines.member_performance import MemberProjectPerformance
from reward_engines.tracer import traced_engine
from reward_kernel.domain.values import HUNDRED, ZERO, round_money, round_percent
from reward_kernel.logging_config import get_logger

logger = get_logger("engines.settlement")


@dataclass(frozen=True)
class ProjectSettlement:
    """Planned vs. actual performance of one project."""

    project_id: str
    contract_amount: Decimal
    planned_investment_total: Decimal
    actual_investment_total: Decimal
    planned_performance: Decimal
    actual_performance: Decimal
    performance_diff: Decimal

    @property
    def is_overrun(self) -> bool:
        return self.performance_diff < ZERO

    @property
    def actual_profit_rate(self) -> Decimal:
        """Actual performance as a percentage of the contract amount."""
        if self.contract_amount == ZERO:
            return ZERO
        return self.actual_performance / self.contract_amount * HUNDRED

    def rounded(self) -> ProjectSettlement:
        return replace(
            self,
            planned_investment_total=round_money(self.planned_investment_total),
            actual_investment_total=round_money(self.actual_investment_total),
            planned_performance=round_money(self.planned_performance),
            actual_performance=round_money(self.actual_performance),
            performance_diff=round_money(self.performance_diff),
        )

    @property
    def reported_profit_rate(self) -> Decimal:
        return round_percent(self.actual_profit_rate)


@traced_engine("settlement", "1.0", fingerprint_fields=("project_id", "contract_amount"))
def aggregate_settlement(
    project_id: str,
    contract_amount: Decimal,
    performances: Sequence[MemberProjectPerformance],
) -> ProjectSettlement:
    """
    Aggregate member performances into the project's settlement figures.

    Args:
        project_id: Project being settled.
        contract_amount: Contracted revenue of the project.
        performances: Per-member records of this project.
    """
    planned_total = sum((p.planned_investment for p in performances), ZERO)
    actual_total = sum((p.actual_investment for p in performances), ZERO)
    planned_performance = contract_amount - planned_total
    actual_performance = contract_amount - actual_total

    settlement = ProjectSettlement(
        project_id=project_id,
        contract_amount=contract_amount,
        planned_investment_total=planned_total,
        actual_investment_total=actual_total,
        planned_performance=planned_performance,
        actual_performance=actual_performance,
        performance_diff=actual_performance - planned_performance,
    )

    logger.info("settlement_aggregated", extra={
        "project_id": project_id,
        "member_count": len(performances),
        "planned_investment_total": str(planned_total),
        "actual_investment_total": str(actual_total),
        "performance_diff": str(settlement.performance_diff),
    })
    return settlement
