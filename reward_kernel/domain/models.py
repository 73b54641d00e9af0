"""
Reward Domain Models (``reward_kernel.domain.models``).

Responsibility
--------------
Frozen dataclass value objects for the inputs of the reward engines:
members, projects with their staffing allocations, logged schedule
entries, monthly operating expense records, the organisation's work-hours
configuration and its holiday calendar, bundled into one
``EngineSnapshot``.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Produced by
the (external) loading layer, consumed read-only by engines and services.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All money and day fields are ``Decimal`` -- NEVER ``float``; ints and
  strings are coerced on construction.
* ``Allocation.planned_days >= 0``.
* ``Project.company_share_percent`` in [0, 100].
* Every time window ends strictly after it starts.
* At most one allocation per member within a ``Project``.

Failure modes
-------------
* Construction with an invalid value raises ``ValueError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from types import MappingProxyType

from reward_kernel.domain.values import HUNDRED, ZERO, to_decimal

DEFAULT_COMPANY_SHARE_PERCENT = Decimal("80")


def _coerce(obj: object, name: str) -> Decimal:
    value = to_decimal(getattr(obj, name))
    object.__setattr__(obj, name, value)
    return value


def _check_window(label: str, start: time, end: time) -> None:
    if end <= start:
        raise ValueError(f"{label} must end after it starts: {start} - {end}")


@dataclass(frozen=True)
class Member:
    """An organisation member whose salary feeds the cost basis."""

    id: str
    name: str
    annual_salary: Decimal
    is_active: bool = True
    is_approved: bool = True

    def __post_init__(self) -> None:
        if _coerce(self, "annual_salary") < ZERO:
            raise ValueError(f"Member {self.id}: annual_salary cannot be negative")

    @property
    def participates(self) -> bool:
        """Only active, approved members count towards salary ratios."""
        return self.is_active and self.is_approved


@dataclass(frozen=True)
class Allocation:
    """
    Assignment of a member to a project with a planned day budget.

    ``start_date`` overrides the project start date when picking the
    pricing month.  ``end_date`` is informational.
    """

    member_id: str
    planned_days: Decimal
    start_date: date | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        if _coerce(self, "planned_days") < ZERO:
            raise ValueError(
                f"Allocation for member {self.member_id}: planned_days cannot be negative"
            )


@dataclass(frozen=True)
class Project:
    """A contracted project and its staffing plan."""

    id: str
    name: str
    contract_amount: Decimal
    start_date: date
    end_date: date | None = None
    company_share_percent: Decimal = DEFAULT_COMPANY_SHARE_PERCENT
    is_settled: bool = False
    settled_at: datetime | None = None
    allocations: tuple[Allocation, ...] = ()

    def __post_init__(self) -> None:
        _coerce(self, "contract_amount")
        share = _coerce(self, "company_share_percent")
        if not ZERO <= share <= HUNDRED:
            raise ValueError(
                f"Project {self.id}: company_share_percent must be within [0, 100], got {share}"
            )
        object.__setattr__(self, "allocations", tuple(self.allocations))
        seen: set[str] = set()
        for allocation in self.allocations:
            if allocation.member_id in seen:
                raise ValueError(
                    f"Project {self.id}: duplicate allocation for member {allocation.member_id}"
                )
            seen.add(allocation.member_id)

    @property
    def team_share_percent(self) -> Decimal:
        return HUNDRED - self.company_share_percent


@dataclass(frozen=True)
class ScheduleEntry:
    """
    One block of logged work.

    ``project_id`` is None for unclassified time, which never counts
    towards a project.  When either ``start_time`` or ``end_time`` is
    missing, ``minutes`` is taken as-is.
    """

    member_id: str
    project_id: str | None
    date: date
    minutes: int
    start_time: time | None = None
    end_time: time | None = None

    def __post_init__(self) -> None:
        if self.minutes < 0:
            raise ValueError(f"Schedule entry on {self.date}: minutes cannot be negative")

    @property
    def is_classified(self) -> bool:
        return self.project_id is not None

    @property
    def has_time_range(self) -> bool:
        return self.start_time is not None and self.end_time is not None


@dataclass(frozen=True)
class OpexRecord:
    """Total operating expense of the organisation for one month."""

    year_month: str  # "YYYY-MM"
    amount: Decimal

    def __post_init__(self) -> None:
        _coerce(self, "amount")
        year, sep, month = self.year_month.partition("-")
        if not (sep and year.isdigit() and month.isdigit() and 1 <= int(month) <= 12):
            raise ValueError(f"Invalid year_month: {self.year_month!r}")


@dataclass(frozen=True)
class LunchWindow:
    """Lunch break for a working day."""

    start: time = time(12, 0)
    end: time = time(13, 0)

    def __post_init__(self) -> None:
        _check_window("Lunch window", self.start, self.end)


@dataclass(frozen=True)
class WorkHoursConfig:
    """
    Organisation-wide working hours.

    The lunch window may be overridden for individual dates; the work
    window is the same every day.
    """

    work_start: time = time(9, 30)
    work_end: time = time(18, 30)
    lunch: LunchWindow = field(default_factory=LunchWindow)
    lunch_overrides: Mapping[date, LunchWindow] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_window("Work window", self.work_start, self.work_end)
        object.__setattr__(
            self, "lunch_overrides", MappingProxyType(dict(self.lunch_overrides))
        )

    def work_window_for(self, day: date) -> tuple[time, time]:
        return self.work_start, self.work_end

    def lunch_for(self, day: date) -> LunchWindow:
        return self.lunch_overrides.get(day, self.lunch)


@dataclass(frozen=True)
class HolidayCalendar:
    """Set of non-working dates."""

    dates: frozenset[date] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "dates", frozenset(self.dates))

    def is_holiday(self, day: date) -> bool:
        return day in self.dates

    def holidays_in_month(self, year: int, month: int) -> tuple[date, ...]:
        return tuple(sorted(d for d in self.dates if d.year == year and d.month == month))


@dataclass(frozen=True)
class EngineSnapshot:
    """
    One self-consistent set of engine inputs.

    Contract:
        Handed over atomically by the loading layer.  Engines and services
        read it, never mutate it.
    """

    members: tuple[Member, ...] = ()
    projects: tuple[Project, ...] = ()
    schedules: tuple[ScheduleEntry, ...] = ()
    opex_records: tuple[OpexRecord, ...] = ()
    work_hours: WorkHoursConfig = field(default_factory=WorkHoursConfig)
    holidays: HolidayCalendar = field(default_factory=HolidayCalendar)

    def __post_init__(self) -> None:
        for name in ("members", "projects", "schedules", "opex_records"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def active_members(self) -> tuple[Member, ...]:
        return tuple(m for m in self.members if m.participates)

    @property
    def settled_projects(self) -> tuple[Project, ...]:
        return tuple(p for p in self.projects if p.is_settled)

    def member(self, member_id: str) -> Member | None:
        for m in self.members:
            if m.id == member_id:
                return m
        return None

    def project(self, project_id: str) -> Project | None:
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    def entries_for(self, member_id: str, project_id: str) -> tuple[ScheduleEntry, ...]:
        return tuple(
            s for s in self.schedules
            if s.member_id == member_id and s.project_id == project_id
        )
