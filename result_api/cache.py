from __future__ import annotations

from typing import Dict, Optional, Union

from .drawlog.models import ParsedResult


class _Missing:
    """Tombstone: the asset was looked for and the server said it is not there."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

CacheEntry = Union[ParsedResult, _Missing]


class ResultCache:
    """Per-session memo of probe outcomes, keyed by filename. Never persisted."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, filename: str) -> Optional[CacheEntry]:
        return self._entries.get(filename)

    def put(self, filename: str, entry: CacheEntry) -> None:
        self._entries[filename] = entry

    def mark_missing(self, filename: str) -> None:
        # never overwrite a positive hit with a tombstone
        if isinstance(self._entries.get(filename), ParsedResult):
            return
        self._entries[filename] = MISSING

    def found(self) -> Dict[str, ParsedResult]:
        return {k: v for k, v in self._entries.items() if isinstance(v, ParsedResult)}

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, filename: object) -> bool:
        return filename in self._entries

    def __len__(self) -> int:
        return len(self._entries)
