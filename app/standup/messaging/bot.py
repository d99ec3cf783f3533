"""Google Chat event handler -- space lifecycle and message routing."""

from __future__ import annotations

import logging
from typing import Any

from ..chat.events import ADDED_TO_SPACE, REMOVED_FROM_SPACE, ChatEvent
from ..context import AppContext
from ..scheduler.reconciler import Reconciler
from ..state import paths
from ..util.async_helpers import gather_all
from . import strings
from .commands import CommandDispatcher

logger = logging.getLogger(__name__)


class Bot:
    def __init__(self, ctx: AppContext) -> None:
        self._ctx = ctx
        self._reconciler = Reconciler(ctx)
        self._commands = CommandDispatcher(ctx, self._reconciler)

    @property
    def commands(self) -> CommandDispatcher:
        return self._commands

    async def on_event(self, event: ChatEvent) -> dict[str, Any] | None:
        """Handle one inbound event; return the JSON reply body, if any."""
        if event.type == ADDED_TO_SPACE:
            await self.on_added_to_space(event)
            # no command in the join mention: greet
            if not self._commands.get_action(event.argument_text):
                return {"text": strings.WELCOME}
        elif event.type == REMOVED_FROM_SPACE:
            await self.on_removed_from_space(event)

        if event.message and event.message.argument_text:
            reply = await self._commands.handle_message(event.message)
            if reply:
                return {"text": reply}
        return None

    async def on_added_to_space(self, event: ChatEvent) -> None:
        user = event.user
        room_id = event.space.id
        uid = user.id
        # per-field keys leave users/{uid}/spaces/{room}/updates in place
        user_update: dict[str, Any] = {
            "displayName": user.display_name,
            "email": user.email,
            "domainId": user.domain_id,
            f"spaces/{room_id}/spaceType": event.space.type,
        }
        room_settings: dict[str, Any] = {
            "type": event.space.type,
            "spaceType": event.space.type,
            "invitedBy": uid,
            "users": {uid: user.email},
        }
        if event.space.display_name:
            user_update[f"spaces/{room_id}/displayName"] = event.space.display_name
            room_settings["displayName"] = event.space.display_name

        logger.info("[chat] Added to space %s by %s", room_id, uid)
        prior = await self._ctx.store.get(paths.space(room_id))
        await gather_all(
            self._ctx.store.update(paths.user(uid), user_update),
            self._ctx.store.set(paths.space(room_id), room_settings),
        )
        # the replaced record has no schedule; drop any job the old one had
        await self._reconciler.remove_room(room_id, prior)

    async def on_removed_from_space(self, event: ChatEvent) -> None:
        # Users keep their per-room profile and status updates after the
        # bot leaves; only the room record and its job go away.
        room_id = event.space.id
        room = await self._ctx.store.get(paths.space(room_id))
        await self._ctx.store.remove(paths.space(room_id))
        await self._reconciler.remove_room(room_id, room)
        logger.info("[chat] Removed from space %s", room_id)
