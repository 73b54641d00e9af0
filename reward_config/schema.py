"""
Engine configuration schema.

Human-authored configuration is written as YAML fragments and parsed by
the loader into these frozen types.  The kernel never imports them;
``reward_config.bridges`` turns them into kernel value objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal

TIME_MEASUREMENTS = ("effective", "raw")


@dataclass(frozen=True)
class WorkHoursDef:
    """Organisation default work and lunch windows."""

    work_start: time = time(9, 30)
    work_end: time = time(18, 30)
    lunch_start: time = time(12, 0)
    lunch_end: time = time(13, 0)


@dataclass(frozen=True)
class LunchOverrideDef:
    """Lunch window for one specific date."""

    date: date
    start: time
    end: time


@dataclass(frozen=True)
class HolidayDef:
    """A non-working date."""

    date: date
    name: str = ""


@dataclass(frozen=True)
class EngineConfig:
    """
    Complete engine configuration.

    ``time_measurement`` selects how logged time becomes actual days:
    ``effective`` clips entries to work hours and removes lunch,
    ``raw`` uses logged minutes as recorded.
    """

    config_id: str
    version: int = 1
    currency: str = "KRW"
    default_opex_amount: Decimal = Decimal("16000000")
    time_measurement: str = "effective"
    work_hours: WorkHoursDef = WorkHoursDef()
    lunch_overrides: tuple[LunchOverrideDef, ...] = ()
    holidays: tuple[HolidayDef, ...] = ()
    checksum: str = ""
