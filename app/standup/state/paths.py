"""Logical paths of the bot's state tree."""

from __future__ import annotations


def user(uid: str) -> str:
    return f"users/{uid}"


def user_spaces(uid: str) -> str:
    return f"users/{uid}/spaces"


def user_space(uid: str, room_id: str) -> str:
    return f"users/{uid}/spaces/{room_id}"


def user_updates(uid: str, room_id: str) -> str:
    return f"users/{uid}/spaces/{room_id}/updates"


def space(room_id: str) -> str:
    return f"spaces/{room_id}"


def space_schedule(room_id: str) -> str:
    return f"spaces/{room_id}/schedule"


def space_days(room_id: str) -> str:
    return f"spaces/{room_id}/days"


def space_time_zone(room_id: str) -> str:
    return f"spaces/{room_id}/timeZone"


def space_users(room_id: str) -> str:
    return f"spaces/{room_id}/users"


def space_user(room_id: str, uid: str) -> str:
    return f"spaces/{room_id}/users/{uid}"
