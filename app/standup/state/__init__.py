"""State store backends and path helpers."""

from __future__ import annotations

import logging

from ..config.settings import Settings
from ..services.google_auth import FIREBASE_SCOPES, GoogleCredentials
from .firebase import FirebaseStateStore
from .store import SERVER_TIMESTAMP, JsonStateStore, StateStore

logger = logging.getLogger(__name__)

__all__ = [
    "FirebaseStateStore",
    "JsonStateStore",
    "SERVER_TIMESTAMP",
    "StateStore",
    "create_store",
]


def create_store(settings: Settings) -> StateStore:
    """Build the backend selected by ``STATE_BACKEND``."""
    if settings.state_backend == "firebase":
        logger.info("[store] Using Firebase Realtime Database at %s", settings.firebase_database_url)
        return FirebaseStateStore(
            settings.firebase_database_url, GoogleCredentials(FIREBASE_SCOPES),
        )
    if settings.state_backend != "json":
        raise ValueError(f"Unknown STATE_BACKEND {settings.state_backend!r}")
    logger.info("[store] Using JSON state file %s", settings.state_path)
    return JsonStateStore(settings.state_path)
