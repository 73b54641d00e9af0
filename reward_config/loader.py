"""
Configuration Loader (``reward_config.loader``).

Responsibility
--------------
Loads the YAML files of a configuration set and parses them into typed
``reward_config.schema`` dataclass instances.  The single public entry
point for runtime config is ``reward_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel only
for its exception types.

Invariants enforced
-------------------
* Every parse error for a required or malformed value raises
  ``ConfigurationError`` naming the file and the field.
* Times must be quoted ``"HH:MM"`` strings; YAML would otherwise read
  some unquoted times (``12:00``) as base-60 integers.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid values  -> ``ConfigurationError``.
* A block key with no body (``holidays:``) reads as an empty block.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from datetime import date, time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from reward_config.schema import (
    TIME_MEASUREMENTS,
    EngineConfig,
    HolidayDef,
    LunchOverrideDef,
    WorkHoursDef,
)
from reward_kernel.exceptions import ConfigurationError, InvalidTimeError

ROOT_FILE = "root.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (ISO string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_time_of_day(value: Any) -> time:
    """
    Parse an ``HH:MM`` string (or ``time``) into a ``datetime.time``.

    Raises:
        InvalidTimeError: for anything else, including YAML base-60 ints.
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise InvalidTimeError(value)
    hours, sep, minutes = value.strip().partition(":")
    if not (sep and hours.isdigit() and minutes.isdigit() and len(minutes) == 2):
        raise InvalidTimeError(value)
    h, m = int(hours), int(minutes)
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise InvalidTimeError(value)
    return time(h, m)


def _field(source: str, name: str, parse, raw: Any) -> Any:
    try:
        return parse(raw)
    except (ValueError, TypeError, InvalidOperation, InvalidTimeError) as e:
        raise ConfigurationError(source, name, str(e)) from e


def _decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        raise TypeError("amounts must be written as integers or quoted strings")
    return Decimal(str(value))


def _section(data: dict[str, Any], key: str, kind: type, source: str) -> Any:
    """Read a mapping or list block; a key written with no body reads as empty."""
    value = data.get(key)
    if value is None:
        return kind()
    if not isinstance(value, kind):
        expected = "a mapping" if kind is dict else "a list"
        raise ConfigurationError(source, key, f"must be {expected}, got {type(value).__name__}")
    return value


def parse_work_hours(data: dict[str, Any], source: str) -> WorkHoursDef:
    """Parse the ``work_hours`` block; absent keys keep their defaults."""
    defaults = WorkHoursDef()
    values = {}
    for name in ("work_start", "work_end", "lunch_start", "lunch_end"):
        if name in data:
            values[name] = _field(source, f"work_hours.{name}", parse_time_of_day, data[name])
        else:
            values[name] = getattr(defaults, name)
    if values["work_end"] <= values["work_start"]:
        raise ConfigurationError(source, "work_hours", "work_end must be after work_start")
    if values["lunch_end"] <= values["lunch_start"]:
        raise ConfigurationError(source, "work_hours", "lunch_end must be after lunch_start")
    return WorkHoursDef(**values)


def parse_lunch_override(data: dict[str, Any], source: str) -> LunchOverrideDef:
    """Parse one entry of ``lunch_overrides``."""
    for key in ("date", "start", "end"):
        if key not in data:
            raise ConfigurationError(source, f"lunch_overrides.{key}", "required")
    override = LunchOverrideDef(
        date=_field(source, "lunch_overrides.date", parse_date, data["date"]),
        start=_field(source, "lunch_overrides.start", parse_time_of_day, data["start"]),
        end=_field(source, "lunch_overrides.end", parse_time_of_day, data["end"]),
    )
    if override.end <= override.start:
        raise ConfigurationError(
            source, "lunch_overrides", f"lunch on {override.date} must end after it starts",
        )
    return override


def parse_holiday(data: Any, source: str) -> HolidayDef:
    """Parse a holiday given as a date or as ``{date, name}``."""
    if isinstance(data, dict):
        if "date" not in data:
            raise ConfigurationError(source, "holidays.date", "required")
        return HolidayDef(
            date=_field(source, "holidays.date", parse_date, data["date"]),
            name=str(data.get("name", "")),
        )
    return HolidayDef(date=_field(source, "holidays", parse_date, data))


def parse_holiday_file(path: Path) -> tuple[HolidayDef, ...]:
    """Parse a holiday fragment file (``holidays:`` list)."""
    data = load_yaml_file(path)
    entries = _section(data, "holidays", list, path.name)
    return tuple(parse_holiday(h, path.name) for h in entries)


def parse_engine_config(
    data: dict[str, Any],
    source: str = ROOT_FILE,
    base_dir: Path | None = None,
) -> EngineConfig:
    """
    Parse an ``EngineConfig`` from a root document.

    Holiday fragments listed under ``holiday_files`` are resolved against
    ``base_dir`` and merged with any inline ``holidays``.
    """
    if "config_id" not in data:
        raise ConfigurationError(source, "config_id", "required")

    measurement = str(data.get("time_measurement", "effective")).lower()
    if measurement not in TIME_MEASUREMENTS:
        raise ConfigurationError(
            source, "time_measurement",
            f"must be one of {', '.join(TIME_MEASUREMENTS)}, got {measurement!r}",
        )

    default_opex = _field(
        source, "default_opex_amount", _decimal, data.get("default_opex_amount", "16000000"),
    )
    if default_opex < 0:
        raise ConfigurationError(source, "default_opex_amount", "cannot be negative")

    holidays = [parse_holiday(h, source) for h in _section(data, "holidays", list, source)]
    for name in _section(data, "holiday_files", list, source):
        if base_dir is None:
            raise ConfigurationError(source, "holiday_files", "no base directory to resolve against")
        holidays.extend(parse_holiday_file(base_dir / name))

    return EngineConfig(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        currency=str(data.get("currency", "KRW")),
        default_opex_amount=default_opex,
        time_measurement=measurement,
        work_hours=parse_work_hours(_section(data, "work_hours", dict, source), source),
        lunch_overrides=tuple(
            parse_lunch_override(o, source)
            for o in _section(data, "lunch_overrides", list, source)
        ),
        holidays=tuple(sorted(holidays, key=lambda h: h.date)),
    )


def load_config_set(config_dir: Path) -> EngineConfig:
    """Load ``root.yaml`` (plus its fragments) from ``config_dir`` and stamp the checksum."""
    root_path = config_dir / ROOT_FILE
    data = load_yaml_file(root_path)
    config = parse_engine_config(data, source=str(root_path), base_dir=config_dir)

    checksum = compute_checksum({
        "config_id": config.config_id,
        "version": config.version,
        "currency": config.currency,
        "default_opex_amount": config.default_opex_amount,
        "time_measurement": config.time_measurement,
        "work_hours": config.work_hours,
        "lunch_overrides": config.lunch_overrides,
        "holidays": [h.date for h in config.holidays],
    })
    return replace(config, checksum=checksum)


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
