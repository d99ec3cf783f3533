"""User-facing text: help topics and the standup prompt."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

DEFAULT_TIME_ZONE = "America/Los_Angeles"

HELP_COMMANDS = (
    "Valid commands are:\n"
    "- help [command]?: display a list of valid commands\n"
    "- help standup: display syntax for recording standups for snippet parsing\n"
    "- schedule <time>: schedule standup for a particular time\n"
    "- unschedule: stop scheduling standups\n"
    "- set timezone <tz>: set the time zone for standup\n"
    "- set days <day list>: set the days for standup\n"
    "- add <username>: add a user to standup\n"
    "- remove <username>: remove a user from standup\n"
    "- forgetme: purge all data about me"
)
HELP_SCHEDULE = (
    "schedule <time>: schedule a standup for a particular time. "
    "<time> should be in the form HH:MM in a 24hr clock."
)
HELP_UNSCHEDULE = "unschedule: stop scheduling standups"
HELP_SET_TIME_ZONE = (
    "set timezone <timezone>: schedule standup to happen at a particular timezone, "
    "e.g. America/Los_Angeles"
)
HELP_SET_DAYS = (
    "set days <day list>: schedule standup to happen on particular days. "
    'Day names can be full names (e.g. "monday") or three-letter acronyms (e.g. "mon"). '
    "Days can be space or comma delimited."
)
HELP_ADD = 'add <user mention>: adds a user to daily standup. Use "add me" to schedule yourself'
HELP_REMOVE = 'remove <user mention>: removes a user from daily standup. Use "remove me" to unschedule yourself'
HELP_FORGET_ME = "forgetme: remove yourself from all standups and delete all recorded snippets"
HELP_STANDUP = (
    "Standups can be formatted in multiple ways to preserve yesterday's accomplishments as snippets.\n"
    "If you prefer emojis, you can use 👈 (yesterday), 👇 (today), 🛑 (blockers), ❓ (questions)\n"
    'If you prefer terse text, you can use "y:", "t:", "b:", "q:"\n'
    "You will soon be able to get snippets based on all previous day's accomplishments"
)

WELCOME = "Hi, my name is Standup Bot\n" + HELP_COMMANDS
FORGET_ME_CONFIRMATION = "Done. I don't even know who you are."

_TOPICS: dict[str, str] = {
    "schedule": HELP_SCHEDULE,
    "unschedule": HELP_UNSCHEDULE,
    "add": HELP_ADD,
    "remove": HELP_REMOVE,
    "forgetme": HELP_FORGET_ME,
    "standup": HELP_STANDUP,
}

MONTH_NAMES = (
    "Jan", "Feb", "March", "April", "May", "June",
    "July", "Aug", "Sept", "Oct", "Nov", "Dec",
)


def help_text(argument_text: str) -> str:
    """Resolve ``help [topic [property]]`` to its help string."""
    parts = [p for p in argument_text.lower().split() if p]
    if parts and parts[0] == "help":
        parts = parts[1:]
    if not parts:
        return HELP_COMMANDS
    topic = parts[0]
    if topic == "set":
        if len(parts) == 1:
            return "Valid properties are timezone and days. Please ask for further help"
        if parts[1] == "timezone" or parts[1:3] == ["time", "zone"]:
            return HELP_SET_TIME_ZONE
        if parts[1] == "days":
            return HELP_SET_DAYS
        return f"Cannot set unknown property {' '.join(parts[1:])}\n{HELP_COMMANDS}"
    if topic in _TOPICS:
        return _TOPICS[topic]
    return f"Cannot help with unknown command {' '.join(parts)}.\n{HELP_COMMANDS}"


def standup_message(
    room: dict[str, Any] | None,
    now: datetime | None = None,
    default_time_zone: str = DEFAULT_TIME_ZONE,
) -> str:
    """The standup prompt, dated in the room's time zone.

    Members are mentioned in sorted id order.  A missing room yields a
    prompt with no mentions.
    """
    room = room or {}
    tz = ZoneInfo(room.get("timeZone") or default_time_zone)
    local = now.astimezone(tz) if now is not None else datetime.now(tz)
    month_name = MONTH_NAMES[local.month - 1]
    user_list = ", ".join(f"<users/{uid}>" for uid in sorted(room.get("users") or {}))
    return (
        f"It's time for the {month_name} {local.day} standup {user_list}!\n"
        "What did you do yesterday? What do you hope to do today? Blockers? Questions?. "
        'Ask me to "help standup" for syntax'
    )
