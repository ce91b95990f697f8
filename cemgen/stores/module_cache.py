"""In-memory cache of per-module analysis results."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from ..analyzers import ModuleResult


def fingerprint(text: str | bytes) -> str:
    data = text.encode("utf-8") if isinstance(text, str) else text
    return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class _Entry:
    signature: str
    fingerprint: str
    result: ModuleResult


class ModuleCache:
    """Stores module results keyed by path, plugin signature and source fingerprint.

    A watch cycle re-analyzes only the modules whose text changed; every
    other module is served from here, which keeps linking input identical
    between cycles.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def get(self, path: str, *, signature: str, fingerprint: str) -> Optional[ModuleResult]:
        entry = self._entries.get(path)
        if entry is None:
            return None
        if entry.signature != signature or entry.fingerprint != fingerprint:
            return None
        return entry.result

    def store(self, path: str, *, signature: str, fingerprint: str, result: ModuleResult) -> None:
        self._entries[path] = _Entry(signature=signature, fingerprint=fingerprint, result=result)

    def invalidate(self, paths: Iterable[str]) -> None:
        for path in paths:
            self._entries.pop(path, None)

    def prune(self, keys_to_keep: Iterable[str]) -> None:
        keep = set(keys_to_keep)
        for path in [path for path in self._entries if path not in keep]:
            self._entries.pop(path, None)

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["ModuleCache", "fingerprint"]
