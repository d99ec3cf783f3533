"""Webhook endpoints -- POST /handlechat and POST /postchat."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from aiohttp import web

from ..chat.events import ChatEvent

if TYPE_CHECKING:
    from ..messaging.bot import Bot
    from ..messaging.standup import StandupDispatcher

logger = logging.getLogger(__name__)


class ChatEndpoint:
    """Unwraps inbound Google Chat and Cloud Scheduler webhooks."""

    def __init__(self, bot: Bot, standups: StandupDispatcher, default_space_id: str = "") -> None:
        self._bot = bot
        self._standups = standups
        self._default_space_id = default_space_id

    def register(self, router: web.UrlDispatcher) -> None:
        router.add_post("/handlechat", self.handle_chat)
        router.add_post("/postchat", self.post_chat)

    async def _read_json(self, req: web.Request) -> dict | web.Response:
        raw_body = await req.read()
        try:
            body = json.loads(raw_body or b"{}")
        except ValueError as exc:
            logger.error("[chat] Failed to parse JSON body: %s | raw=%s", exc, raw_body[:500])
            return web.json_response(
                {"status": "error", "message": f"Invalid JSON: {exc}"}, status=400,
            )
        if not isinstance(body, dict):
            return web.json_response(
                {"status": "error", "message": "Expected a JSON object"}, status=400,
            )
        return body

    async def handle_chat(self, req: web.Request) -> web.Response:
        body = await self._read_json(req)
        if isinstance(body, web.Response):
            return body
        logger.debug("[chat] Received message %s", json.dumps(body, indent=2))

        event = ChatEvent.from_dict(body)
        try:
            reply = await self._bot.on_event(event)
        except Exception as exc:
            logger.exception(
                "[chat] Error processing event: %s (type=%s space=%s)",
                exc, event.type, event.space.name,
            )
            return web.json_response(
                {"status": "error", "message": f"Processing failed: {exc}"}, status=500,
            )
        if reply is None:
            return web.Response(status=200)
        return web.json_response(reply)

    async def post_chat(self, req: web.Request) -> web.Response:
        logger.debug("[standup] in postchat")
        body = await self._read_json(req)
        if isinstance(body, web.Response):
            return body
        space_id = body.get("spaceId") or self._default_space_id
        if not space_id:
            logger.warning("[standup] Trigger without spaceId and no DEFAULT_SPACE_ID; skipping")
            return web.Response(text="OK")
        try:
            await self._standups.handle_standup(space_id)
        except Exception as exc:
            logger.exception("[standup] Standup for space %s failed: %s", space_id, exc)
        return web.Response(text="OK")
