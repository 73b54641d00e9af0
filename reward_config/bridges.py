"""
Config → Kernel Bridges.

Functions that convert an ``EngineConfig`` into kernel value objects.
These live in reward_config (the producer) because the kernel must
NEVER import reward_config.

Usage:
    from reward_config.bridges import build_holiday_calendar, build_work_hours

    config = get_active_config()
    calendar = build_holiday_calendar(config)
    work_hours = build_work_hours(config)
"""

from __future__ import annotations

from reward_config.schema import EngineConfig
from reward_kernel.domain.models import HolidayCalendar, LunchWindow, WorkHoursConfig


def build_work_hours(config: EngineConfig) -> WorkHoursConfig:
    """Build the organisation's WorkHoursConfig, including per-date lunch overrides."""
    hours = config.work_hours
    return WorkHoursConfig(
        work_start=hours.work_start,
        work_end=hours.work_end,
        lunch=LunchWindow(start=hours.lunch_start, end=hours.lunch_end),
        lunch_overrides={
            o.date: LunchWindow(start=o.start, end=o.end)
            for o in config.lunch_overrides
        },
    )


def build_holiday_calendar(config: EngineConfig) -> HolidayCalendar:
    return HolidayCalendar(frozenset(h.date for h in config.holidays))
