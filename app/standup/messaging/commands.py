"""Chat command router and handlers.

Message text is matched against an ordered table; the first matching
pattern picks the handler.  Each handler takes the parsed message and
returns reply text, or ``None`` to stay silent.
"""

from __future__ import annotations

import functools
import logging
import re
import zoneinfo
from collections.abc import Awaitable, Callable

from ..chat.events import Message, User
from ..context import AppContext
from ..scheduler.reconciler import Reconciler
from ..state import SERVER_TIMESTAMP, paths
from ..util.async_helpers import gather_all
from ..util.validation import Validation
from . import strings

logger = logging.getLogger(__name__)

Handler = Callable[[Message], Awaitable[str | None]]

VALID_DAYS: tuple[str, ...] = (
    "mon", "tue", "wed", "thu", "fri", "sat", "sun",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")


@functools.lru_cache(maxsize=1)
def available_time_zones() -> frozenset[str]:
    return frozenset(zoneinfo.available_timezones())


def parse_schedule_time(token: str) -> Validation:
    match = _TIME_RE.fullmatch(token.strip())
    if not match:
        return Validation.fail("Expected schedule to be in the form 'HH:MM'")
    if int(match.group(1)) >= 24:
        return Validation.fail("Hours must be less than 24")
    if int(match.group(2)) >= 60:
        return Validation.fail("Minutes must be less than 60")
    return Validation.ok(value=match.group(0))


def parse_days(days_text: str) -> Validation:
    """Validate a space/comma separated day list, all or nothing."""
    days = [d for d in re.split(r"[ ,]", days_text.lower()) if d.strip()]
    if not days:
        return Validation.fail(strings.HELP_SET_DAYS)
    invalid = [d for d in days if d not in VALID_DAYS]
    if invalid:
        return Validation.fail(
            f"Invalid day(s) {' '.join(invalid)}; valid day values are {', '.join(VALID_DAYS)}"
        )
    return Validation.ok(value=days)


def validate_time_zone(time_zone: str) -> Validation:
    if time_zone not in available_time_zones():
        return Validation.fail(f'Do not recognize time zone "{time_zone}"')
    return Validation.ok(value=time_zone)


class CommandDispatcher:
    # First match wins.  The status-update markers are searched anywhere in
    # the text and must stay ahead of the prefix commands.
    DISPATCH_TABLE: tuple[tuple[re.Pattern[str], str], ...] = (
        (re.compile(r"⬅️|👈|y(exterday)?:"), "_cmd_status_update"),
        (re.compile(r"^help"), "_cmd_help"),
        (re.compile(r"^add"), "_cmd_add"),
        (re.compile(r"^remove"), "_cmd_remove"),
        (re.compile(r"^schedule"), "_cmd_schedule"),
        (re.compile(r"^unschedule"), "_cmd_unschedule"),
        (re.compile(r"^set"), "_cmd_set_property"),
        (re.compile(r"^forgetme"), "_cmd_forget_me"),
        (re.compile(r"^forget me"), "_cmd_forget_me"),
    )

    def __init__(self, ctx: AppContext, reconciler: Reconciler | None = None) -> None:
        self._ctx = ctx
        self._reconciler = reconciler or Reconciler(ctx)

    @classmethod
    def get_action(cls, text: str) -> str | None:
        """Name of the handler for *text*, or ``None`` when nothing matches."""
        text = text.strip().lower()
        for pattern, handler_name in cls.DISPATCH_TABLE:
            if pattern.search(text):
                return handler_name
        return None

    def resolve(self, text: str) -> Handler | None:
        handler_name = self.get_action(text)
        return getattr(self, handler_name) if handler_name else None

    async def handle_message(self, message: Message) -> str | None:
        """Route *message* and return the reply text, if any.

        Infrastructure failures are logged and turned into a reply that
        carries the error text.
        """
        try:
            handler = self.resolve(message.argument_text)
            if handler is None:
                return f"Unknown command {message.argument_text}.\n{strings.HELP_COMMANDS}"
            return await handler(message)
        except Exception as exc:
            logger.exception("[chat] Unhandled exception for %r: %s", message.argument_text, exc)
            return f"Standup Bot failed with unhandled exception: {exc}"

    # -- handlers ------------------------------------------------------------

    async def _cmd_help(self, message: Message) -> str:
        return strings.help_text(message.argument_text)

    @staticmethod
    def _targets(message: Message, shortcut: str) -> list[User]:
        if message.argument_text.strip().lower() == shortcut:
            return [message.sender]
        return message.mentioned_users()

    async def _cmd_add(self, message: Message) -> str:
        users = self._targets(message, "add me")
        if not users:
            return 'Mention the people to add, or say "add me".'
        room_id = message.room_id
        profile = {"spaceType": message.space.type}
        if message.space.display_name:
            profile["displayName"] = message.space.display_name
        store = self._ctx.store
        writes = [store.update(paths.user_space(u.id, room_id), profile) for u in users]
        writes.append(store.update(paths.space_users(room_id), {u.id: u.email for u in users}))
        await gather_all(*writes)
        return f"Added {', '.join(u.email for u in users)} to standup"

    async def _cmd_remove(self, message: Message) -> str:
        users = self._targets(message, "remove me")
        if not users:
            return 'Mention the people to remove, or say "remove me".'
        await self._ctx.store.update(
            paths.space_users(message.room_id), {u.id: None for u in users},
        )
        return f"Removed {', '.join(u.email for u in users)} from standup"

    async def _cmd_schedule(self, message: Message) -> str:
        parts = message.argument_text.split()
        logger.debug("[chat] argumentText is %r. parts is %s", message.argument_text, parts)
        if parts and parts[0].lower() == "schedule":
            parts = parts[1:]
        check = parse_schedule_time(parts[0] if parts else "")
        if not check:
            return check.message
        room_id = message.room_id
        await self._ctx.store.set(paths.space_schedule(room_id), check.value)
        await self._reconciler.reconcile(room_id)
        return (
            f"Sounds good. Standups are scheduled at {check.value}. "
            "To set the time zone use the `set timezone` command"
        )

    async def _cmd_unschedule(self, message: Message) -> str:
        room_id = message.room_id
        await gather_all(
            self._ctx.store.set(paths.space_schedule(room_id), None),
            self._reconciler.unschedule(room_id),
        )
        return "OK. I won't bother you anymore. To reschedule standups say 'schedule <time>'"

    async def _cmd_set_property(self, message: Message) -> str:
        parts = message.argument_text.split()
        logger.debug("[chat] Argument text is %r and parts are %s", message.argument_text, parts)
        if parts and parts[0].lower() == "set":
            parts = parts[1:]
        if not parts:
            return "Valid properties are timezone and days. Please ask for further help"
        prop = parts[0].lower()
        if prop == "timezone":
            return await self._set_time_zone(message.room_id, parts[1] if len(parts) > 1 else "")
        if prop == "time" and len(parts) > 1 and parts[1].lower() == "zone":
            return await self._set_time_zone(message.room_id, parts[2] if len(parts) > 2 else "")
        if prop == "days":
            return await self._set_days(message.room_id, ",".join(parts[1:]))
        return f"Cannot set unknown property {parts[0]}.\n{strings.HELP_COMMANDS}"

    async def _set_time_zone(self, room_id: str, time_zone: str) -> str:
        check = validate_time_zone(time_zone)
        if not check:
            return check.message
        await self._ctx.store.set(paths.space_time_zone(room_id), time_zone)
        await self._reconciler.reconcile_if_scheduled(room_id)
        return (
            f"Sounds good. Standups are scheduled in {time_zone}. "
            "To set the schedule use the `schedule` command"
        )

    async def _set_days(self, room_id: str, days_text: str) -> str:
        check = parse_days(days_text)
        if not check:
            return check.message
        days: list[str] = check.value
        await self._ctx.store.set(paths.space_days(room_id), ",".join(days))
        await self._reconciler.reconcile_if_scheduled(room_id)
        return f"Standups are now scheduled for {', '.join(days)}"

    async def _cmd_forget_me(self, message: Message) -> str:
        uid = message.user_id
        store = self._ctx.store
        rooms = await store.get(paths.user_spaces(uid)) or {}
        writes = [store.set(paths.space_user(room, uid), None) for room in rooms]
        writes.append(store.set(paths.user(uid), None))
        await gather_all(*writes)
        logger.info("[chat] Forgot user %s (%d rooms)", uid, len(rooms))
        return strings.FORGET_ME_CONFIRMATION

    async def _cmd_status_update(self, message: Message) -> None:
        await self._ctx.store.push(
            paths.user_updates(message.user_id, message.room_id),
            {"text": message.text, "time": SERVER_TIMESTAMP},
        )
