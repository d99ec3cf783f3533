"""Outcome type for user-input validation.

Validation failures are a normal branch in this bot: they become a chat
reply and never raise.  ``Validation`` carries either the parsed value or
the reply text explaining what was wrong.

Examples::

    v = Validation.ok(value=("9", "30"))
    if not v:
        return v.message

    ok, msg = Validation.fail("Hours must be less than 24")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Validation:
    success: bool
    message: str = ""
    value: Any = field(default=None, repr=False)

    @classmethod
    def ok(cls, message: str = "", *, value: Any = None) -> Validation:
        return cls(success=True, message=message, value=value)

    @classmethod
    def fail(cls, message: str) -> Validation:
        return cls(success=False, message=message)

    def __bool__(self) -> bool:
        return self.success

    def __iter__(self):
        yield self.success
        yield self.message
