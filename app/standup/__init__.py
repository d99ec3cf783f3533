"""Standup Bot -- Google Chat standup scheduling backend."""

__version__ = "1.0.0"
