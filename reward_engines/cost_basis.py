"""
reward_engines.cost_basis -- Daily salary and overhead cost of a member for one month.

Responsibility:
    Price one working day of a member: the member's monthly salary spread
    over the month's working days, plus the member's salary-weighted share
    of the operating expense not already covered by payroll.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import reward_kernel and sibling engine modules
    (working_calendar).  Consumed by the member performance calculator
    through the service layer, which memoises results per
    (member, month) within one pass.

Invariants enforced:
    - Division guards: a zero total salary gives a zero salary ratio; a
      month with zero working days gives zero daily costs.
    - ``daily_total_cost == daily_salary_cost + daily_overhead_cost``
      exactly (derived property, never stored separately).
    - The overhead pool is never negative.
    - Decimal-only arithmetic.

Failure modes:
    - None for well-typed input.  A month without an opex record falls
      back to the first record supplied, then to ``default_opex_amount``.

Usage:
    from reward_engines.cost_basis import CostBasisCalculator
    from reward_engines.working_calendar import WorkingCalendar

    calculator = CostBasisCalculator(WorkingCalendar(holidays))
    basis = calculator.calculate(
        roster=snapshot.members,
        member=member,
        year=2025,
        month=3,
        opex_records=snapshot.opex_records,
    )
    basis.daily_total_cost
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from reward_engines.tracer import traced_engine
from reward_engines.working_calendar import WorkingCalendar
from reward_kernel.domain.models import Member, OpexRecord
from reward_kernel.domain.values import ZERO, round_money
from reward_kernel.logging_config import get_logger

logger = get_logger("engines.cost_basis")

MONTHS_PER_YEAR = Decimal("12")

# Business default used when no opex record exists at all.
DEFAULT_OPEX_AMOUNT = Decimal("16000000")


class OpexSource(str, Enum):
    """Where the month's opex amount came from."""

    EXACT_MONTH = "exact_month"
    FIRST_RECORD = "first_record"
    DEFAULT = "default"


@dataclass(frozen=True)
class DailyCostBasis:
    """
    Daily cost of one member in one month.

    Intermediate figures are kept for display; ``daily_total_cost`` is
    derived so that it always equals salary plus overhead.
    """

    member_id: str
    year_month: str
    working_days: int
    total_annual_salary: Decimal
    salary_ratio: Decimal
    opex_amount: Decimal
    opex_source: OpexSource
    overhead_pool: Decimal
    daily_salary_cost: Decimal
    daily_overhead_cost: Decimal

    @property
    def total_monthly_salary(self) -> Decimal:
        return self.total_annual_salary / MONTHS_PER_YEAR

    @property
    def daily_total_cost(self) -> Decimal:
        return self.daily_salary_cost + self.daily_overhead_cost

    def rounded(self) -> DailyCostBasis:
        """Copy with money figures rounded to whole currency units."""
        return replace(
            self,
            daily_salary_cost=round_money(self.daily_salary_cost),
            daily_overhead_cost=round_money(self.daily_overhead_cost),
            overhead_pool=round_money(self.overhead_pool),
        )


def total_annual_salary(roster: Iterable[Member]) -> Decimal:
    """Sum of annual salaries over active, approved members (0 when empty)."""
    return sum((m.annual_salary for m in roster if m.participates), ZERO)


def resolve_opex_amount(
    opex_records: Sequence[OpexRecord],
    year_month: str,
    default_amount: Decimal = DEFAULT_OPEX_AMOUNT,
) -> tuple[Decimal, OpexSource]:
    """
    Opex amount for ``year_month``.

    Exact month match first, then the first record in the list, then
    ``default_amount``.  A record with amount 0 is a real record.
    """
    for record in opex_records:
        if record.year_month == year_month:
            return record.amount, OpexSource.EXACT_MONTH
    if opex_records:
        return opex_records[0].amount, OpexSource.FIRST_RECORD
    return default_amount, OpexSource.DEFAULT


class CostBasisCalculator:
    """
    Pure calculator for a member's daily cost basis.

    Contract:
        No I/O, fully deterministic.  Roster, opex records and the
        holiday calendar are passed in; nothing is cached here.
    Guarantees:
        - salary_ratio = member salary / total active salary, or 0.
        - overhead_pool = max(0, opex - total monthly salary).
        - daily costs are 0 for a month with no working days.
    Non-goals:
        - Does not decide which month to price; see
          ``member_performance.resolve_pricing_month``.
    """

    def __init__(
        self,
        calendar: WorkingCalendar,
        default_opex_amount: Decimal = DEFAULT_OPEX_AMOUNT,
    ):
        self._calendar = calendar
        self._default_opex_amount = default_opex_amount

    @property
    def default_opex_amount(self) -> Decimal:
        return self._default_opex_amount

    @traced_engine("cost_basis", "1.0", fingerprint_fields=("year", "month"))
    def calculate(
        self,
        roster: Sequence[Member],
        member: Member,
        year: int,
        month: int,
        opex_records: Sequence[OpexRecord] = (),
    ) -> DailyCostBasis:
        """
        Daily salary, overhead and total cost of ``member`` in ``year``-``month``.

        Args:
            roster: All members; only active, approved ones weigh in.
            member: Member to price.
            year: Pricing year.
            month: Pricing month (1-12).
            opex_records: Monthly opex records, in loader order.

        Returns:
            DailyCostBasis with full-precision figures.
        """
        year_month = f"{year:04d}-{month:02d}"

        total_salary = total_annual_salary(roster)
        total_monthly_salary = total_salary / MONTHS_PER_YEAR
        salary_ratio = member.annual_salary / total_salary if total_salary > ZERO else ZERO

        opex_amount, opex_source = resolve_opex_amount(
            opex_records, year_month, self._default_opex_amount,
        )
        if opex_source is not OpexSource.EXACT_MONTH:
            logger.debug("opex_month_fallback", extra={
                "year_month": year_month,
                "opex_source": opex_source.value,
                "opex_amount": str(opex_amount),
            })
        overhead_pool = max(ZERO, opex_amount - total_monthly_salary)

        working_days = self._calendar.working_days_in_month(year, month)
        if working_days > 0:
            daily_overhead_cost = overhead_pool * salary_ratio / working_days
            daily_salary_cost = member.annual_salary / MONTHS_PER_YEAR / working_days
        else:
            logger.warning("cost_basis_no_working_days", extra={
                "member_id": member.id,
                "year_month": year_month,
            })
            daily_overhead_cost = ZERO
            daily_salary_cost = ZERO

        basis = DailyCostBasis(
            member_id=member.id,
            year_month=year_month,
            working_days=working_days,
            total_annual_salary=total_salary,
            salary_ratio=salary_ratio,
            opex_amount=opex_amount,
            opex_source=opex_source,
            overhead_pool=overhead_pool,
            daily_salary_cost=daily_salary_cost,
            daily_overhead_cost=daily_overhead_cost,
        )

        logger.info("cost_basis_calculated", extra={
            "member_id": member.id,
            "year_month": year_month,
            "working_days": working_days,
            "salary_ratio": str(salary_ratio),
            "daily_total_cost": str(basis.daily_total_cost),
        })
        return basis
