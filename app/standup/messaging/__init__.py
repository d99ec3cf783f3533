"""Chat messaging pipeline -- event handler, commands, notifications, text."""

__all__ = [
    "Bot",
    "CommandDispatcher",
    "StandupDispatcher",
    "help_text",
    "standup_message",
]
