"""Runtime configuration."""

from .settings import JobLocation, ScheduleDefaults, Settings, cfg

__all__ = ["JobLocation", "ScheduleDefaults", "Settings", "cfg"]
