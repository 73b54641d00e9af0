"""
Typed exception hierarchy for the reward kernel.

The allocation pipeline itself is total: missing references are filtered,
zero denominators yield 0, missing opex months fall back to policy, and
negative surpluses are floored.  None of those conditions raise.

Exceptions are reserved for configuration and input-format problems that
a caller must fix before a snapshot can be evaluated:

    RewardEngineError (base)
    |
    +-- ConfigurationError      CONFIGURATION_ERROR
    |
    +-- InvalidTimeError        INVALID_TIME

Every class carries a ``code`` class attribute (machine-readable) and
stores its context as attributes rather than only in the message.
"""


class RewardEngineError(Exception):
    """Base exception for all reward engine errors."""

    code: str = "REWARD_ENGINE_ERROR"


class ConfigurationError(RewardEngineError):
    """Engine configuration is missing a required value or holds a bad one."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, source: str, field: str, reason: str):
        self.source = source
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {field}: {reason}")


class InvalidTimeError(RewardEngineError):
    """A time-of-day value could not be parsed as ``HH:MM``."""

    code: str = "INVALID_TIME"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid time of day (expected HH:MM): {value!r}")
