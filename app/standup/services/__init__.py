"""External service integrations."""

__all__ = [
    "GoogleCredentials",
]
