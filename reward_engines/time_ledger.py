"""
reward_engines.time_ledger -- Translate logged schedule entries into billable minutes.

Responsibility:
    Normalise a raw time-tracking entry into the minutes that count as
    work: the part of the entry inside the organisation's work window,
    less the part of that which falls in the lunch window for the date.
    Also provides per-project minute summaries of a set of entries.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import reward_kernel.  Leaf of the performance pipeline;
    the member performance calculator sums ``measured_minutes``.

Invariants enforced:
    - Effective minutes are never negative and never exceed the overlap
      of the entry with the work window.
    - Entries without a start or end time are taken at face value
      (their ``minutes`` field is used unmodified).
    - An entry whose end is not after its start contributes 0 minutes.

Failure modes:
    - None for well-typed input.

Usage:
    from reward_engines.time_ledger import TimeMeasurement, measured_minutes

    minutes = measured_minutes(entry, work_hours, TimeMeasurement.EFFECTIVE)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import time
from enum import Enum

from reward_kernel.domain.models import ScheduleEntry, WorkHoursConfig
from reward_kernel.logging_config import get_logger

logger = get_logger("engines.time_ledger")

# 8-hour day convention: 480 logged minutes make one day.
MINUTES_PER_DAY = 480

UNCLASSIFIED = "unclassified"


class TimeMeasurement(str, Enum):
    """How logged time is turned into actual minutes."""

    EFFECTIVE = "effective"  # Clipped to work hours, lunch removed
    RAW = "raw"  # Logged minutes as recorded


@dataclass(frozen=True)
class ProjectMinutes:
    """Minutes logged against one project (or the unclassified bucket)."""

    project_id: str
    minutes: int

    @property
    def is_unclassified(self) -> bool:
        return self.project_id == UNCLASSIFIED

    @property
    def hours(self) -> int:
        return self.minutes // 60

    @property
    def remaining_minutes(self) -> int:
        return self.minutes % 60


def minute_of_day(value: time) -> int:
    """Minutes elapsed since midnight."""
    return value.hour * 60 + value.minute


def overlap_minutes(start: int, end: int, window_start: int, window_end: int) -> int:
    """Length of the intersection of [start, end) and [window_start, window_end)."""
    return max(0, min(end, window_end) - max(start, window_start))


def effective_minutes(entry: ScheduleEntry, work_hours: WorkHoursConfig) -> int:
    """
    Effective worked minutes of one entry.

    Postconditions:
        0 <= result <= overlap of the entry with the work window, for
        entries with a time range.  Entries without a range return
        ``entry.minutes``.
    """
    if not entry.has_time_range:
        return entry.minutes

    start = minute_of_day(entry.start_time)
    end = minute_of_day(entry.end_time)
    if end <= start:
        return 0

    work_start, work_end = (minute_of_day(t) for t in work_hours.work_window_for(entry.date))
    lunch = work_hours.lunch_for(entry.date)

    in_hours_start = max(start, work_start)
    in_hours_end = min(end, work_end)
    in_hours = max(0, in_hours_end - in_hours_start)
    if in_hours == 0:
        return 0

    lunch_overlap = overlap_minutes(
        in_hours_start, in_hours_end, minute_of_day(lunch.start), minute_of_day(lunch.end),
    )
    return max(0, in_hours - lunch_overlap)


def measured_minutes(
    entry: ScheduleEntry,
    work_hours: WorkHoursConfig,
    measurement: TimeMeasurement = TimeMeasurement.EFFECTIVE,
) -> int:
    """Minutes an entry contributes under the selected measurement."""
    if measurement is TimeMeasurement.RAW:
        return entry.minutes
    return effective_minutes(entry, work_hours)


def summarize_by_project(
    entries: Iterable[ScheduleEntry],
    work_hours: WorkHoursConfig,
    measurement: TimeMeasurement = TimeMeasurement.EFFECTIVE,
) -> tuple[ProjectMinutes, ...]:
    """
    Total minutes per project, most minutes first.

    Entries without a project are collected in the ``"unclassified"``
    bucket.  Ties keep first-seen order.
    """
    totals: dict[str, int] = defaultdict(int)
    entry_count = 0
    for entry in entries:
        entry_count += 1
        key = entry.project_id if entry.is_classified else UNCLASSIFIED
        totals[key] += measured_minutes(entry, work_hours, measurement)

    summary = sorted(
        (ProjectMinutes(project_id=pid, minutes=m) for pid, m in totals.items()),
        key=lambda pm: pm.minutes,
        reverse=True,
    )

    logger.debug("project_minutes_summarized", extra={
        "entry_count": entry_count,
        "project_count": len(summary),
        "measurement": measurement.value,
        "total_minutes": sum(pm.minutes for pm in summary),
    })
    return tuple(summary)
