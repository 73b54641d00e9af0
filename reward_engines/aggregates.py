"""
reward_engines.aggregates -- Per-member and organisation-wide views over settled projects.

Responsibility:
    Roll evaluated projects up into a member's track record (days planned,
    used and saved, average efficiency, total reward) and into the
    organisation's total distribution.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes ``ProjectEvaluation`` records produced by the service layer.

Invariants enforced:
    - Only settled projects are summed; unsettled evaluations are skipped.
      Settling or unsettling a project never changes its formulas, only
      whether it is counted here.
    - average_efficiency is 0 for a member with no settled projects.
    - Sums are taken over full-precision values and rounded in ``rounded()``.

Failure modes:
    - None.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from reward_engines.distribution import RewardDistribution
from reward_engines.member_performance import MemberProjectPerformance
from reward_engines.settlement import ProjectSettlement
from reward_kernel.domain.values import ZERO, round_days, round_percent
from reward_kernel.logging_config import get_logger

logger = get_logger("engines.aggregates")


@dataclass(frozen=True)
class ProjectEvaluation:
    """Everything the engine derives for one project from one snapshot."""

    project_id: str
    is_settled: bool
    performances: tuple[MemberProjectPerformance, ...]
    settlement: ProjectSettlement
    distribution: RewardDistribution

    def performance_for(self, member_id: str) -> MemberProjectPerformance | None:
        for perf in self.performances:
            if perf.member_id == member_id:
                return perf
        return None

    def share_amount_for(self, member_id: str) -> Decimal:
        share = self.distribution.share_for(member_id)
        return share.share_amount if share is not None else ZERO


@dataclass(frozen=True)
class MemberProjectLine:
    """One settled project in a member's track record."""

    project_id: str
    planned_days: Decimal
    actual_days: Decimal
    saved_days: Decimal
    efficiency_rate: Decimal
    share_amount: Decimal


@dataclass(frozen=True)
class MemberPerformanceSummary:
    """A member's totals across settled projects."""

    member_id: str
    lines: tuple[MemberProjectLine, ...]
    total_planned_days: Decimal
    total_actual_days: Decimal
    total_saved_days: Decimal
    average_efficiency: Decimal
    total_share_amount: Decimal

    @property
    def project_count(self) -> int:
        return len(self.lines)

    def rounded(self) -> MemberPerformanceSummary:
        return replace(
            self,
            total_planned_days=round_days(self.total_planned_days),
            total_actual_days=round_days(self.total_actual_days),
            total_saved_days=round_days(self.total_saved_days),
            average_efficiency=round_percent(self.average_efficiency),
        )


@dataclass(frozen=True)
class OrganizationSummary:
    """Organisation-wide totals across settled projects."""

    settled_project_count: int
    participating_member_count: int
    total_company_share: Decimal
    total_team_distribution: Decimal


def summarize_member(
    member_id: str,
    evaluations: Iterable[ProjectEvaluation],
) -> MemberPerformanceSummary:
    """Totals of ``member_id`` over the settled evaluations the member worked on."""
    lines: list[MemberProjectLine] = []
    for evaluation in evaluations:
        if not evaluation.is_settled:
            continue
        perf = evaluation.performance_for(member_id)
        if perf is None:
            continue
        lines.append(MemberProjectLine(
            project_id=evaluation.project_id,
            planned_days=perf.planned_days,
            actual_days=perf.actual_days,
            saved_days=perf.saved_days,
            efficiency_rate=perf.efficiency_rate,
            share_amount=evaluation.share_amount_for(member_id),
        ))

    average = (
        sum((line.efficiency_rate for line in lines), ZERO) / len(lines)
        if lines else ZERO
    )
    return MemberPerformanceSummary(
        member_id=member_id,
        lines=tuple(lines),
        total_planned_days=sum((line.planned_days for line in lines), ZERO),
        total_actual_days=sum((line.actual_days for line in lines), ZERO),
        total_saved_days=sum((line.saved_days for line in lines), ZERO),
        average_efficiency=average,
        total_share_amount=sum((line.share_amount for line in lines), ZERO),
    )


def summarize_members(
    member_ids: Iterable[str],
    evaluations: Sequence[ProjectEvaluation],
) -> tuple[MemberPerformanceSummary, ...]:
    """
    Summaries for members with at least one settled project.

    Sorted by total share amount, highest first; ties keep input order.
    """
    summaries = [summarize_member(mid, evaluations) for mid in member_ids]
    kept = [s for s in summaries if s.project_count > 0]
    kept.sort(key=lambda s: s.total_share_amount, reverse=True)

    logger.info("member_summaries_built", extra={
        "candidate_count": len(summaries),
        "participating_count": len(kept),
    })
    return tuple(kept)


def summarize_organization(
    summaries: Sequence[MemberPerformanceSummary],
    evaluations: Iterable[ProjectEvaluation],
) -> OrganizationSummary:
    """Organisation totals; ``summaries`` should come from ``summarize_members``."""
    settled = [e for e in evaluations if e.is_settled]
    return OrganizationSummary(
        settled_project_count=len(settled),
        participating_member_count=len(summaries),
        total_company_share=sum((e.distribution.company_share for e in settled), ZERO),
        total_team_distribution=sum((s.total_share_amount for s in summaries), ZERO),
    )
