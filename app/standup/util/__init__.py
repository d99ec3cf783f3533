"""Shared utilities."""

from .async_helpers import gather_all, run_sync
from .env_file import EnvFile
from .singletons import register_singleton, reset_all_singletons
from .validation import Validation

__all__ = [
    "EnvFile",
    "Validation",
    "gather_all",
    "register_singleton",
    "reset_all_singletons",
    "run_sync",
]
