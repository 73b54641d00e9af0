"""
Reward Kernel

Domain values, input snapshot models, structured logging and the typed
error hierarchy shared by the reward engines and services:
- Immutable input snapshots (members, projects, allocations, schedules, opex)
- Decimal-only money and day arithmetic with explicit rounding
- Structured JSON logging
"""

__version__ = "0.1.0"
