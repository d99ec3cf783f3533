"""Read-only view of a ``.env`` file."""

from __future__ import annotations

from pathlib import Path

from dotenv import dotenv_values


class EnvFile:
    """Lazily parsed ``.env`` file; a missing file reads as empty."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._values: dict[str, str] | None = None

    def read(self, key: str) -> str:
        values = self._values if self._values is not None else self.reload()
        return values.get(key, "")

    def reload(self) -> dict[str, str]:
        """Re-parse the file and return its values."""
        if not self.path.is_file():
            self._values = {}
        else:
            self._values = {k: v or "" for k, v in dotenv_values(self.path).items()}
        return self._values
