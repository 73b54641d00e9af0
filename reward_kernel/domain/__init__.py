"""
Pure domain layer.

This module contains immutable input models and value helpers
with NO dependencies on:
- Database
- Time/clock (except the injectable Clock)
- I/O

All domain objects are immutable and deterministic.
"""

from reward_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from reward_kernel.domain.models import (
    Allocation,
    EngineSnapshot,
    HolidayCalendar,
    LunchWindow,
    Member,
    OpexRecord,
    Project,
    ScheduleEntry,
    WorkHoursConfig,
)
from reward_kernel.domain.values import (
    HUNDRED,
    ZERO,
    round_days,
    round_money,
    round_percent,
    to_decimal,
)

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Models
    "Allocation",
    "EngineSnapshot",
    "HolidayCalendar",
    "LunchWindow",
    "Member",
    "OpexRecord",
    "Project",
    "ScheduleEntry",
    "WorkHoursConfig",
    # Values
    "HUNDRED",
    "ZERO",
    "round_days",
    "round_money",
    "round_percent",
    "to_decimal",
]
