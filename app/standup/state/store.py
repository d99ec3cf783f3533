"""Hierarchical key-value state store.

Paths are ``/``-separated (``spaces/{roomId}/users``).  The store offers
two distinct write primitives and handlers depend on the difference:

* ``set``    -- replace the value at *path* (``None`` deletes it)
* ``update`` -- merge the named children of *path*, leaving siblings
  untouched; a child value of ``None`` deletes that child and a child key
  may be a relative ``a/b`` path

Every primitive is atomic for its own path only.  Nothing groups writes to
different paths; callers that issue several writes must tolerate readers
observing them one at a time.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Any, Protocol

from ..errors import StateStoreError

logger = logging.getLogger(__name__)

SERVER_TIMESTAMP: dict[str, str] = {".sv": "timestamp"}

_PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


class StateStore(Protocol):
    async def get(self, path: str) -> Any: ...

    async def set(self, path: str, value: Any) -> None: ...

    async def update(self, path: str, values: dict[str, Any]) -> None: ...

    async def remove(self, path: str) -> None: ...

    async def push(self, path: str, value: Any) -> str: ...


def split_path(path: str) -> list[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    for part in parts:
        if part in (".", "..") or any(c in part for c in ".#$[]"):
            raise StateStoreError(f"Invalid path segment {part!r} in {path!r}")
    return parts


def join_path(*parts: str) -> str:
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


class PushIdGenerator:
    """Chronologically ordered child keys, Firebase push-id style.

    Eight characters of millisecond timestamp followed by twelve random
    characters; ids generated in the same millisecond increment the random
    tail so lexical order always matches insertion order.
    """

    def __init__(self) -> None:
        self._last_ms = -1
        self._last_rand: list[int] = [0] * 12

    def __call__(self, now_ms: int | None = None) -> str:
        now = int(time.time() * 1000) if now_ms is None else now_ms
        if now == self._last_ms:
            for i in range(11, -1, -1):
                if self._last_rand[i] != 63:
                    self._last_rand[i] += 1
                    break
                self._last_rand[i] = 0
        else:
            self._last_rand = [secrets.randbelow(64) for _ in range(12)]
        self._last_ms = now

        stamp = []
        for _ in range(8):
            stamp.append(_PUSH_CHARS[now % 64])
            now //= 64
        return "".join(reversed(stamp)) + "".join(_PUSH_CHARS[i] for i in self._last_rand)


def resolve_server_values(value: Any, now_ms: int) -> Any:
    """Replace every ``SERVER_TIMESTAMP`` placeholder with *now_ms*."""
    if value == SERVER_TIMESTAMP:
        return now_ms
    if isinstance(value, dict):
        return {k: resolve_server_values(v, now_ms) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_server_values(v, now_ms) for v in value]
    return value


def _prune(value: Any) -> Any:
    """Drop ``None`` leaves and empty containers, as the database does."""
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        pruned = {k: v for k, v in pruned.items() if v is not None}
        return pruned or None
    return value


class JsonStateStore:
    """JSON-file-backed store holding the whole tree in one document.

    Each primitive loads, mutates and saves without yielding to the event
    loop, so it is atomic with respect to other coroutines in the process.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._root: dict[str, Any] = {}
        self._push_id = PushIdGenerator()
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            self._root = json.loads(self._path.read_text()) or {}
        except (json.JSONDecodeError, OSError) as exc:
            raise StateStoreError(f"Failed to load state from {self._path}: {exc}") from exc

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self._root, indent=2, sort_keys=True) + "\n")
        os.replace(tmp, self._path)

    def _read(self, parts: list[str]) -> Any:
        node: Any = self._root
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _write(self, parts: list[str], value: Any) -> None:
        if not parts:
            self._root = value if isinstance(value, dict) else {}
            return
        node = self._root
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        if value is None:
            node.pop(parts[-1], None)
        else:
            node[parts[-1]] = value
        self._root = _prune(self._root) or {}

    async def get(self, path: str) -> Any:
        return copy.deepcopy(self._read(split_path(path)))

    async def set(self, path: str, value: Any) -> None:
        now = int(time.time() * 1000)
        self._write(split_path(path), _prune(resolve_server_values(copy.deepcopy(value), now)))
        self._save()
        logger.debug("[store] set %s", path)

    async def update(self, path: str, values: dict[str, Any]) -> None:
        base = split_path(path)
        now = int(time.time() * 1000)
        for key, value in values.items():
            value = _prune(resolve_server_values(copy.deepcopy(value), now))
            self._write(base + split_path(key), value)
        self._save()
        logger.debug("[store] update %s (%s)", path, ", ".join(values))

    async def remove(self, path: str) -> None:
        self._write(split_path(path), None)
        self._save()
        logger.debug("[store] remove %s", path)

    async def push(self, path: str, value: Any) -> str:
        key = self._push_id()
        await self.set(join_path(path, key), value)
        return key
