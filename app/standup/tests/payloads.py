"""Builders for Google Chat webhook payloads used across tests."""

from __future__ import annotations

from typing import Any

from app.standup.chat.events import ChatEvent, Message

ROOM = "AAAAroom01"
ALICE = {"name": "users/111", "displayName": "Alice", "email": "alice@example.com", "type": "HUMAN", "domainId": "d1"}
BOB = {"name": "users/222", "displayName": "Bob", "email": "bob@example.com", "type": "HUMAN"}
CAROL = {"name": "users/333", "displayName": "Carol", "email": "carol@example.com", "type": "HUMAN"}
BOT = {"name": "users/999", "displayName": "Standup Bot", "type": "BOT"}


def space(room: str = ROOM, display_name: str = "Team Room") -> dict[str, Any]:
    data: dict[str, Any] = {"name": f"spaces/{room}", "type": "ROOM", "spaceType": "SPACE"}
    if display_name:
        data["displayName"] = display_name
    return data


def mention(user: dict[str, Any]) -> dict[str, Any]:
    return {"type": "USER_MENTION", "userMention": {"user": user, "type": "MENTION"}}


def message_dict(
    argument_text: str,
    *,
    sender: dict[str, Any] = ALICE,
    room: str = ROOM,
    display_name: str = "Team Room",
    mentions: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "name": f"spaces/{room}/messages/m1",
        "sender": sender,
        "text": f"@Standup Bot {argument_text}",
        "argumentText": argument_text,
        "annotations": [mention(BOT)] + [mention(u) for u in mentions or []],
        "space": space(room, display_name),
    }


def message(argument_text: str, **kwargs: Any) -> Message:
    return Message.from_dict(message_dict(argument_text, **kwargs))


def event_dict(event_type: str, argument_text: str = "", *, user: dict[str, Any] = ALICE, room: str = ROOM) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": event_type,
        "eventTime": "2026-10-19T16:00:00Z",
        "user": user,
        "space": space(room),
    }
    if argument_text:
        data["message"] = message_dict(argument_text, sender=user, room=room)
    return data


def event(event_type: str, argument_text: str = "", **kwargs: Any) -> ChatEvent:
    return ChatEvent.from_dict(event_dict(event_type, argument_text, **kwargs))
