"""Scheduling of recurring imports."""

from .apsched_adapter import ImportScheduler

__all__ = ["ImportScheduler"]
