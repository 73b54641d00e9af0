"""
Pytest fixtures for the reward engine test suite.

Provides:
- The seed scenario: two members on one project priced in 2027-02, a
  month with exactly 20 working days and no holidays
- Schedule-entry builders
- A structured-log capture fixture
"""

import json
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from io import StringIO

import pytest

from reward_config.schema import EngineConfig
from reward_kernel.domain.clock import DeterministicClock
from reward_kernel.domain.models import (
    Allocation,
    EngineSnapshot,
    HolidayCalendar,
    Member,
    OpexRecord,
    Project,
    ScheduleEntry,
    WorkHoursConfig,
)
from reward_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

SCENARIO_YEAR = 2027
SCENARIO_MONTH = 2


def working_dates(start: date, count: int) -> list[date]:
    """The first ``count`` weekdays on or after ``start``."""
    result = []
    current = start
    while len(result) < count:
        if current.weekday() < 5:
            result.append(current)
        current += timedelta(days=1)
    return result


def full_day_entries(member_id: str, project_id: str | None, days: int) -> list[ScheduleEntry]:
    """``days`` entries of 09:30-18:30, each worth 480 effective minutes."""
    return [
        ScheduleEntry(
            member_id=member_id,
            project_id=project_id,
            date=d,
            minutes=540,
            start_time=time(9, 30),
            end_time=time(18, 30),
        )
        for d in working_dates(date(SCENARIO_YEAR, SCENARIO_MONTH, 1), days)
    ]


@pytest.fixture
def member_a() -> Member:
    return Member(id="m-a", name="Member A", annual_salary=Decimal("72000000"))


@pytest.fixture
def member_b() -> Member:
    return Member(id="m-b", name="Member B", annual_salary=Decimal("48000000"))


@pytest.fixture
def opex_records() -> tuple[OpexRecord, ...]:
    return (OpexRecord(year_month="2027-02", amount=Decimal("16000000")),)


@pytest.fixture
def scenario_project() -> Project:
    """Contract of 24,000,000; A planned 10 days, B planned 8 days."""
    return Project(
        id="p-1",
        name="Seed project",
        contract_amount=Decimal("24000000"),
        start_date=date(SCENARIO_YEAR, SCENARIO_MONTH, 1),
        allocations=(
            Allocation(member_id="m-a", planned_days=Decimal("10")),
            Allocation(member_id="m-b", planned_days=Decimal("8")),
        ),
    )


@pytest.fixture
def scenario_schedules() -> list[ScheduleEntry]:
    """A works 8 full days, B works 9."""
    return full_day_entries("m-a", "p-1", 8) + full_day_entries("m-b", "p-1", 9)


@pytest.fixture
def scenario_snapshot(
    member_a, member_b, scenario_project, scenario_schedules, opex_records,
) -> EngineSnapshot:
    return EngineSnapshot(
        members=(member_a, member_b),
        projects=(scenario_project,),
        schedules=tuple(scenario_schedules),
        opex_records=opex_records,
        work_hours=WorkHoursConfig(),
        holidays=HolidayCalendar(),
    )


@pytest.fixture
def engine_config() -> EngineConfig:
    """Defaults with no holidays."""
    return EngineConfig(config_id="test")


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2027, 3, 2, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def log_stream():
    """Capture reward_kernel JSON log lines at DEBUG level."""
    reset_logging()
    LogContext.clear()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    configure_logging(level=logging.DEBUG, handler=handler)
    yield stream
    LogContext.clear()
    reset_logging()


def parse_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


@pytest.fixture
def read_logs(log_stream):
    """Callable returning the log records captured so far."""
    return lambda: parse_logs(log_stream)
