"""Google Chat event payloads.

Only the fields the bot reads are modelled; unknown keys are ignored so
new API fields never break parsing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ADDED_TO_SPACE = "ADDED_TO_SPACE"
REMOVED_FROM_SPACE = "REMOVED_FROM_SPACE"
MESSAGE = "MESSAGE"

USER_MENTION = "USER_MENTION"
HUMAN = "HUMAN"


def resource_id(name: str, index: int = 0) -> str:
    """Return the *index*-th id of a resource name.

    ``resource_id("spaces/AAA/messages/BBB", 1)`` is ``"BBB"``.
    """
    parts = name.split("/")
    if len(parts) < index * 2 + 2 or not parts[index * 2 + 1]:
        raise ValueError(f"name {name} does not have id number {index}")
    return parts[index * 2 + 1]


@dataclass
class User:
    name: str = ""
    display_name: str = ""
    email: str = ""
    type: str = ""
    domain_id: str | None = None

    @property
    def id(self) -> str:
        return resource_id(self.name)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> User:
        data = data or {}
        return cls(
            name=data.get("name", ""),
            display_name=data.get("displayName", ""),
            email=data.get("email", ""),
            type=data.get("type", ""),
            domain_id=data.get("domainId"),
        )


@dataclass
class Space:
    name: str = ""
    type: str = ""
    display_name: str = ""

    @property
    def id(self) -> str:
        return resource_id(self.name)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Space:
        data = data or {}
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            display_name=data.get("displayName", ""),
        )


@dataclass
class Annotation:
    type: str = ""
    user: User | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Annotation:
        mention = data.get("userMention") or {}
        return cls(
            type=data.get("type", ""),
            user=User.from_dict(mention["user"]) if mention.get("user") else None,
        )


@dataclass
class Message:
    name: str = ""
    text: str = ""
    argument_text: str = ""
    sender: User = field(default_factory=User)
    space: Space = field(default_factory=Space)
    annotations: list[Annotation] = field(default_factory=list)

    @property
    def room_id(self) -> str:
        return self.space.id

    @property
    def user_id(self) -> str:
        return self.sender.id

    def mentioned_users(self) -> list[User]:
        """Human users @-mentioned in the message, in order of appearance."""
        return [
            a.user for a in self.annotations
            if a.type == USER_MENTION and a.user is not None and a.user.type == HUMAN
        ]

    @classmethod
    def from_dict(cls, data: dict[str, Any], space: Space | None = None) -> Message:
        return cls(
            name=data.get("name", ""),
            text=data.get("text", ""),
            argument_text=data.get("argumentText", ""),
            sender=User.from_dict(data.get("sender")),
            space=Space.from_dict(data["space"]) if data.get("space") else (space or Space()),
            annotations=[Annotation.from_dict(a) for a in data.get("annotations") or []],
        )


@dataclass
class ChatEvent:
    type: str = ""
    event_time: str = ""
    user: User = field(default_factory=User)
    space: Space = field(default_factory=Space)
    message: Message | None = None

    @property
    def argument_text(self) -> str:
        return self.message.argument_text if self.message else ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatEvent:
        space = Space.from_dict(data.get("space"))
        message = data.get("message")
        return cls(
            type=data.get("type", ""),
            event_time=data.get("eventTime", ""),
            user=User.from_dict(data.get("user")),
            space=space,
            message=Message.from_dict(message, space) if message else None,
        )
