"""Google Chat REST client -- posts messages as the bot."""

from __future__ import annotations

import logging

import aiohttp

from ..config.settings import CHAT_API_ORIGIN
from ..services.google_auth import GoogleCredentials

logger = logging.getLogger(__name__)


class ChatClient:
    def __init__(self, credentials: GoogleCredentials, origin: str = CHAT_API_ORIGIN) -> None:
        self._credentials = credentials
        self._origin = origin if origin.endswith("/") else origin + "/"

    async def send_message(self, space_id: str, text: str) -> int:
        """POST *text* to the space and return the HTTP status.

        The response is only logged; a failed send is not retried.
        """
        token = await self._credentials.get_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        url = f"{self._origin}spaces/{space_id}/messages"
        async with aiohttp.ClientSession() as session:
            async with session.post(url, json={"text": text}, headers=headers) as resp:
                body = await resp.text()
                logger.debug("[chat] Response Status %s\n%s", resp.status, body)
                if resp.status >= 300:
                    logger.warning(
                        "[chat] Send to space %s failed (HTTP %s): %s",
                        space_id, resp.status, body[:300],
                    )
                return resp.status
