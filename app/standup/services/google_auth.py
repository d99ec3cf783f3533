"""Google credentials -- OAuth access tokens and the service-account email.

Tokens are fetched fresh on every call.  Application Default Credentials
cover both Cloud Run (metadata server) and local runs with
``GOOGLE_APPLICATION_CREDENTIALS`` pointing at a key file.
"""

from __future__ import annotations

import logging
import os

import google.auth
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from ..util.async_helpers import run_sync

logger = logging.getLogger(__name__)

CHAT_BOT_SCOPE = "https://www.googleapis.com/auth/chat.bot"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
FIREBASE_SCOPES = (
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/firebase.database",
)

DEFAULT_SCOPES: tuple[str, ...] = (CHAT_BOT_SCOPE, CLOUD_PLATFORM_SCOPE, *FIREBASE_SCOPES)


class GoogleCredentials:
    """Async facade over ``google-auth`` credential refresh."""

    def __init__(
        self,
        scopes: tuple[str, ...] = DEFAULT_SCOPES,
        *,
        service_account_email: str = "",
    ) -> None:
        self._scopes = list(scopes)
        self._email_override = service_account_email

    def _build(self):
        key_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        if key_path and os.path.exists(key_path):
            return service_account.Credentials.from_service_account_file(
                key_path, scopes=self._scopes,
            )
        creds, _ = google.auth.default(scopes=self._scopes)
        return creds

    def _refreshed(self):
        creds = self._build()
        creds.refresh(Request())
        return creds

    async def get_token(self) -> str:
        creds = await run_sync(self._refreshed)
        return creds.token

    async def get_email(self) -> str:
        if self._email_override:
            return self._email_override
        creds = await run_sync(self._refreshed)
        email = getattr(creds, "service_account_email", "") or ""
        logger.debug("[auth] Current service account email is %s", email or "(unknown)")
        return email
