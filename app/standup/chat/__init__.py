"""Google Chat event model and REST client."""

from .client import ChatClient
from .events import Annotation, ChatEvent, Message, Space, User, resource_id

__all__ = ["Annotation", "ChatClient", "ChatEvent", "Message", "Space", "User", "resource_id"]
