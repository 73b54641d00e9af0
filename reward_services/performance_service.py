"""
Performance Service (``reward_services.performance_service``).

Responsibility
--------------
Evaluates an ``EngineSnapshot``: prices every allocation of every
project, measures actual time, aggregates each project's settlement and
distributes its surplus, then rolls settled projects up into member and
organisation summaries.  Also owns the settle/unsettle action, the only
place the wall clock is read.

Architecture position
---------------------
**Services layer** -- stateless orchestration over the pure engines in
``reward_engines``.  Configuration arrives as an ``EngineConfig`` from
``reward_config.get_active_config()``; the clock is injected.

Invariants enforced
-------------------
* Allocations whose member is not in the snapshot are dropped (logged),
  never guessed at.
* A member's cost basis is computed once per (member, year-month) within
  a single evaluation pass and reused for every project priced in that
  month.
* Only settled projects feed member and organisation summaries.
* Engines never see the clock; ``settled_at`` comes from ``self._clock``.
* Every log line of an evaluation pass carries that pass's
  ``evaluation_id``.

Failure modes
-------------
* None for well-formed snapshots.  Invalid model values are rejected when
  the snapshot is built (``ValueError``).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import date

from reward_config.bridges import build_holiday_calendar, build_work_hours
from reward_config.schema import EngineConfig
from reward_engines.aggregates import (
    MemberPerformanceSummary,
    OrganizationSummary,
    ProjectEvaluation,
    summarize_members,
    summarize_organization,
)
from reward_engines.cost_basis import CostBasisCalculator, DailyCostBasis
from reward_engines.distribution import distribute_reward
from reward_engines.member_performance import (
    MemberProjectPerformance,
    calculate_member_performance,
    resolve_pricing_month,
)
from reward_engines.settlement import aggregate_settlement
from reward_engines.time_ledger import ProjectMinutes, TimeMeasurement, summarize_by_project
from reward_engines.working_calendar import WorkingCalendar
from reward_kernel.domain.clock import Clock, SystemClock
from reward_kernel.domain.models import (
    EngineSnapshot,
    Member,
    OpexRecord,
    Project,
    ScheduleEntry,
)
from reward_kernel.logging_config import LogContext, get_logger, new_context_id

logger = get_logger("services.performance")


class _EvaluationPass:
    """Per-pass memo of daily cost bases keyed by (member_id, year_month)."""

    def __init__(self, snapshot: EngineSnapshot, calculator: CostBasisCalculator):
        self.evaluation_id = new_context_id()
        self._snapshot = snapshot
        self._calculator = calculator
        self._cache: dict[tuple[str, str], DailyCostBasis] = {}

    def cost_basis(self, member: Member, year: int, month: int) -> DailyCostBasis:
        key = (member.id, f"{year:04d}-{month:02d}")
        basis = self._cache.get(key)
        if basis is None:
            basis = self._calculator.calculate(
                self._snapshot.members, member, year, month, self._snapshot.opex_records,
            )
            self._cache[key] = basis
        return basis


class PerformanceService:
    """
    Computes planned vs. actual performance and reward distribution.

    Contract
    --------
    * Every method takes the snapshot it reads; the service holds no
      snapshot state between calls.
    * ``evaluate_project`` results are full precision; callers round at the
      reporting boundary with the records' ``rounded()`` methods.

    Guarantees
    ----------
    * Same snapshot and config always produce the same evaluations.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT load or persist snapshots.
    * Does NOT render reports or currency formatting.
    """

    def __init__(self, config: EngineConfig, clock: Clock | None = None):
        self._config = config
        self._clock = clock or SystemClock()
        self._measurement = TimeMeasurement(config.time_measurement)

    @property
    def measurement(self) -> TimeMeasurement:
        return self._measurement

    # =========================================================================
    # Snapshot assembly
    # =========================================================================

    def build_snapshot(
        self,
        members: Iterable[Member],
        projects: Iterable[Project],
        schedules: Iterable[ScheduleEntry] = (),
        opex_records: Iterable[OpexRecord] = (),
    ) -> EngineSnapshot:
        """Bundle loaded records with the configured work hours and holidays."""
        return EngineSnapshot(
            members=tuple(members),
            projects=tuple(projects),
            schedules=tuple(schedules),
            opex_records=tuple(opex_records),
            work_hours=build_work_hours(self._config),
            holidays=build_holiday_calendar(self._config),
        )

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate_project(
        self,
        snapshot: EngineSnapshot,
        project: Project,
    ) -> ProjectEvaluation:
        """Member performances, settlement and distribution for one project."""
        eval_pass = self._new_pass(snapshot)
        with LogContext.bind(evaluation_id=eval_pass.evaluation_id):
            return self._evaluate(snapshot, project, eval_pass)

    def evaluate_all(self, snapshot: EngineSnapshot) -> tuple[ProjectEvaluation, ...]:
        """One evaluation per project in the snapshot, settled or not."""
        eval_pass = self._new_pass(snapshot)
        with LogContext.bind(evaluation_id=eval_pass.evaluation_id):
            evaluations = tuple(
                self._evaluate(snapshot, p, eval_pass) for p in snapshot.projects
            )
            logger.info("snapshot_evaluated", extra={
                "project_count": len(evaluations),
                "settled_count": sum(1 for e in evaluations if e.is_settled),
                "measurement": self._measurement.value,
            })
        return evaluations

    def member_summaries(
        self,
        snapshot: EngineSnapshot,
    ) -> tuple[MemberPerformanceSummary, ...]:
        """Track records of members with at least one settled project."""
        evaluations = self.evaluate_all(snapshot)
        return summarize_members((m.id for m in snapshot.members), evaluations)

    def organization_summary(self, snapshot: EngineSnapshot) -> OrganizationSummary:
        evaluations = self.evaluate_all(snapshot)
        summaries = summarize_members((m.id for m in snapshot.members), evaluations)
        return summarize_organization(summaries, evaluations)

    def project_minutes(
        self,
        snapshot: EngineSnapshot,
        start: date,
        end: date,
        member_id: str | None = None,
    ) -> tuple[ProjectMinutes, ...]:
        """Minutes per project logged between ``start`` and ``end`` inclusive."""
        entries = (
            e for e in snapshot.schedules
            if start <= e.date <= end and (member_id is None or e.member_id == member_id)
        )
        return summarize_by_project(entries, snapshot.work_hours, self._measurement)

    # =========================================================================
    # Settlement state
    # =========================================================================

    def set_settled(self, project: Project, settled: bool) -> Project:
        """
        Settle or unsettle ``project``.

        Returns a new Project; ``settled_at`` is stamped from the clock on
        settle and cleared on unsettle.  Formulas are unaffected; only
        inclusion in the summaries changes.
        """
        updated = replace(
            project,
            is_settled=settled,
            settled_at=self._clock.now() if settled else None,
        )
        logger.info("project_settled" if settled else "project_unsettled", extra={
            "project_id": project.id,
            "settled_at": updated.settled_at.isoformat() if updated.settled_at else None,
        })
        return updated

    # =========================================================================
    # Internal
    # =========================================================================

    def _new_pass(self, snapshot: EngineSnapshot) -> _EvaluationPass:
        calculator = CostBasisCalculator(
            WorkingCalendar(snapshot.holidays),
            default_opex_amount=self._config.default_opex_amount,
        )
        return _EvaluationPass(snapshot, calculator)

    def _evaluate(
        self,
        snapshot: EngineSnapshot,
        project: Project,
        eval_pass: _EvaluationPass,
    ) -> ProjectEvaluation:
        with LogContext.bind(project_id=project.id):
            performances: list[MemberProjectPerformance] = []
            for allocation in project.allocations:
                member = snapshot.member(allocation.member_id)
                if member is None:
                    logger.warning("allocation_member_missing", extra={
                        "project_id": project.id,
                        "member_id": allocation.member_id,
                    })
                    continue

                year, month = resolve_pricing_month(allocation, project)
                with LogContext.bind(member_id=member.id):
                    basis = eval_pass.cost_basis(member, year, month)
                    performances.append(calculate_member_performance(
                        allocation,
                        project.id,
                        basis,
                        snapshot.entries_for(member.id, project.id),
                        snapshot.work_hours,
                        self._measurement,
                    ))

            settlement = aggregate_settlement(project.id, project.contract_amount, performances)
            distribution = distribute_reward(
                settlement.performance_diff,
                project.company_share_percent,
                [(p.member_id, p.efficiency_rate) for p in performances],
            )

        return ProjectEvaluation(
            project_id=project.id,
            is_settled=project.is_settled,
            performances=tuple(performances),
            settlement=settlement,
            distribution=distribution,
        )
