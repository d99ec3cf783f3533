"""Exceptions raised for infrastructure failures.

User-input problems never raise; they are returned as reply text.
"""

from __future__ import annotations


class StandupError(Exception):
    """Base class for failures talking to the store or Google APIs."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class StateStoreError(StandupError):
    """The state store rejected or failed a read or write."""


class JobRegistryError(StandupError):
    """Cloud Scheduler returned a non-2xx status the caller cannot absorb."""

    @property
    def not_found(self) -> bool:
        return self.status == 404

    @property
    def conflict(self) -> bool:
        return self.status == 409
