"""Orchestration services over the reward engines."""

from reward_services.performance_service import PerformanceService

__all__ = ["PerformanceService"]
