"""Firebase Realtime Database backend over the REST API.

``GET``/``PUT``/``PATCH``/``DELETE``/``POST`` on ``{db}/{path}.json`` map
one-to-one onto the store primitives; the database provides the per-path
atomicity and the ``{".sv": "timestamp"}`` server value.
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ..errors import StateStoreError
from ..services.google_auth import FIREBASE_SCOPES, GoogleCredentials
from .store import join_path, split_path

logger = logging.getLogger(__name__)


class FirebaseStateStore:
    """Realtime Database client authenticated with an OAuth access token."""

    def __init__(self, database_url: str, credentials: GoogleCredentials | None = None) -> None:
        if not database_url:
            raise StateStoreError("FIREBASE_DATABASE_URL is not configured")
        self._base = database_url.rstrip("/")
        self._credentials = credentials or GoogleCredentials(FIREBASE_SCOPES)

    def _url(self, path: str) -> str:
        return f"{self._base}/{join_path(*split_path(path))}.json"

    async def _request(self, method: str, path: str, payload: Any = None) -> Any:
        token = await self._credentials.get_token()
        kwargs: dict[str, Any] = {"params": {"access_token": token}}
        if method in ("PUT", "PATCH", "POST"):
            kwargs["json"] = payload
        async with aiohttp.ClientSession() as session:
            async with session.request(method, self._url(path), **kwargs) as resp:
                if resp.status >= 300:
                    text = await resp.text()
                    raise StateStoreError(
                        f"{method} {path} failed with status {resp.status}: {text[:300]}",
                        status=resp.status,
                    )
                return await resp.json(content_type=None)

    async def get(self, path: str) -> Any:
        return await self._request("GET", path)

    async def set(self, path: str, value: Any) -> None:
        if value is None:
            await self._request("DELETE", path)
            return
        await self._request("PUT", path, value)
        logger.debug("[store] set %s", path)

    async def update(self, path: str, values: dict[str, Any]) -> None:
        if not values:
            return
        await self._request("PATCH", path, values)
        logger.debug("[store] update %s (%s)", path, ", ".join(values))

    async def remove(self, path: str) -> None:
        await self._request("DELETE", path)
        logger.debug("[store] remove %s", path)

    async def push(self, path: str, value: Any) -> str:
        data = await self._request("POST", path, value)
        return (data or {}).get("name", "")
