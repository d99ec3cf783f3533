"""Reset hooks for module-level singletons (settings, credentials)."""

from __future__ import annotations

from collections.abc import Callable

_reset_hooks: list[Callable[[], None]] = []


def register_singleton(reset_fn: Callable[[], None]) -> None:
    """Remember *reset_fn* so tests can rebuild the singleton it owns."""
    if reset_fn not in _reset_hooks:
        _reset_hooks.append(reset_fn)


def reset_all_singletons() -> None:
    """Rebuild every registered singleton, in registration order."""
    for hook in list(_reset_hooks):
        hook()
