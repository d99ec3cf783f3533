"""Standup notifications -- called when a room's scheduler job fires."""

from __future__ import annotations

import logging
from datetime import datetime

from ..context import AppContext
from ..state import paths
from .strings import standup_message

logger = logging.getLogger(__name__)


class StandupDispatcher:
    def __init__(self, ctx: AppContext) -> None:
        self._ctx = ctx

    async def handle_standup(self, space_id: str, now: datetime | None = None) -> int:
        """Post the standup prompt to *space_id*; returns the chat API status.

        An unknown space is logged and still receives a prompt, with
        nobody mentioned.
        """
        logger.debug("[standup] Handling standup for %s", space_id)
        room = await self._ctx.store.get(paths.space(space_id))
        if room is None:
            logger.error(
                "[standup] Asked to hold standup for space %s but do not know anything about this space",
                space_id,
            )
        text = standup_message(room, now, self._ctx.schedule_defaults.time_zone)
        return await self._ctx.chat.send_message(space_id, text)
