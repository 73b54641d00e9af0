"""
reward_engines.working_calendar -- Working-day arithmetic over a holiday calendar.

Responsibility:
    Count working days (weekdays that are not holidays) in a month or a
    date range, and project the date on which a given number of working
    days is reached.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import reward_kernel.  Leaf of the cost pipeline: the cost
    basis calculator divides monthly cost by ``working_days_in_month``.

Invariants enforced:
    - Saturdays and Sundays are never working days.
    - A holiday that falls on a weekend is not subtracted twice.
    - Purity: no clock access; every date is an explicit parameter.

Failure modes:
    - None for well-typed input.  A month with no business days (e.g. an
      artificial calendar listing every weekday) yields 0; downstream
      consumers treat 0 as "cost undefined, report 0".

Usage:
    from reward_engines.working_calendar import WorkingCalendar
    from reward_kernel.domain.models import HolidayCalendar

    calendar = WorkingCalendar(HolidayCalendar(frozenset({date(2025, 1, 1)})))
    calendar.working_days_in_month(2025, 1)  # 22
"""

from __future__ import annotations

import calendar as _calendar
import math
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from reward_kernel.domain.models import HolidayCalendar
from reward_kernel.logging_config import get_logger

logger = get_logger("engines.working_calendar")

_SATURDAY = 5


@dataclass(frozen=True)
class MonthWorkingDays:
    """Working-day count for one calendar month."""

    year: int
    month: int
    working_days: int

    @property
    def year_month(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class WorkingCalendar:
    """
    Working-day calculator bound to one holiday calendar.

    Contract:
        Pure functions -- no I/O.  The holiday calendar is supplied at
        construction and never modified.
    Guarantees:
        - ``working_days_in_month`` = days in month - weekend days -
          holidays in the month that are not weekend days.
        - Results never go below 0.
    """

    def __init__(self, holidays: HolidayCalendar | None = None):
        self._holidays = holidays or HolidayCalendar()

    @property
    def holidays(self) -> HolidayCalendar:
        return self._holidays

    def is_working_day(self, day: date) -> bool:
        """True when ``day`` is a weekday and not a holiday."""
        return day.weekday() < _SATURDAY and not self._holidays.is_holiday(day)

    def working_days_in_month(self, year: int, month: int) -> int:
        """Count working days in ``year``-``month``."""
        days_in_month = _calendar.monthrange(year, month)[1]
        weekend_days = sum(
            1 for d in range(1, days_in_month + 1)
            if date(year, month, d).weekday() >= _SATURDAY
        )
        weekday_holidays = sum(
            1 for h in self._holidays.holidays_in_month(year, month)
            if h.weekday() < _SATURDAY
        )
        working_days = max(0, days_in_month - weekend_days - weekday_holidays)

        logger.debug("working_days_counted", extra={
            "year_month": f"{year:04d}-{month:02d}",
            "days_in_month": days_in_month,
            "weekend_days": weekend_days,
            "weekday_holidays": weekday_holidays,
            "working_days": working_days,
        })
        return working_days

    def working_days_between(self, start: date, end: date) -> int:
        """Count working days in [start, end], both ends inclusive."""
        if end < start:
            return 0
        count = 0
        current = start
        while current <= end:
            if self.is_working_day(current):
                count += 1
            current += timedelta(days=1)
        return count

    def add_working_days(self, start: date, working_days: Decimal | int) -> date:
        """
        Date on which the ``working_days``-th working day falls.

        ``start`` counts as the first day when it is itself a working day.
        Fractional budgets are rounded up, since a partial day still
        occupies the calendar day.  A budget of 0 or less returns ``start``.
        """
        remaining = math.ceil(working_days)
        if remaining <= 0:
            return start

        current = start
        if self.is_working_day(current):
            remaining -= 1
        while remaining > 0:
            current += timedelta(days=1)
            if self.is_working_day(current):
                remaining -= 1
        return current

    def working_days_by_month(self, start: date, end: date) -> tuple[MonthWorkingDays, ...]:
        """Working-day counts for every calendar month touched by [start, end]."""
        if end < start:
            return ()
        result: list[MonthWorkingDays] = []
        year, month = start.year, start.month
        while (year, month) <= (end.year, end.month):
            result.append(
                MonthWorkingDays(year, month, self.working_days_in_month(year, month))
            )
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        return tuple(result)
