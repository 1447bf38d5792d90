from __future__ import annotations

import logging
import time
from datetime import date
from pathlib import Path
from typing import List, Optional

from .drawlog.candidates import ALL_EXTENSIONS
from .drawlog.models import ParsedResult
from .drawlog.parser import parse_result_name
from .drawlog.selection import sort_newest_first

logger = logging.getLogger("resultweb")

IMAGE_EXTS = {"." + e for e in ALL_EXTENSIONS}


def _extension_rank(r: ParsedResult) -> int:
    try:
        return list(ALL_EXTENSIONS).index(r.extension)
    except ValueError:
        return len(ALL_EXTENSIONS)


def scan_directory(images_dir: Path) -> List[ParsedResult]:
    """Every result image directly inside images_dir, newest first."""
    out: List[ParsedResult] = []
    if not images_dir.is_dir():
        logger.warning("Images directory not found: %s", images_dir)
        return out

    for p in sorted(images_dir.iterdir(), key=lambda x: x.name):
        if not p.is_file() or p.suffix.lower() not in IMAGE_EXTS:
            continue
        parsed = parse_result_name(p.name)
        if parsed is None:
            continue
        st = p.stat()
        out.append(
            ParsedResult(
                filename=parsed.filename,
                day=parsed.day,
                month=parsed.month,
                year=parsed.year,
                hour=parsed.hour,
                period=parsed.period,
                extension=parsed.extension,
                timestamp=int(parsed.date_time.timestamp()),
                file_size=int(st.st_size),
                last_modified=int(st.st_mtime),
            )
        )

    # unprefixed names and preferred formats first within one draw
    out.sort(key=lambda r: (r.has_prefix, _extension_rank(r)))
    return sort_newest_first(out)


class ResultIndex:
    """Directory listing of result images, memoized for ttl_seconds."""

    def __init__(self, images_dir: Path, *, ttl_seconds: float = 60.0) -> None:
        self.images_dir = Path(images_dir)
        self.ttl_seconds = float(ttl_seconds)
        self._listing: Optional[List[ParsedResult]] = None
        self._listed_at = 0.0

    def list(self) -> List[ParsedResult]:
        now = time.monotonic()
        if self._listing is None or now - self._listed_at > self.ttl_seconds:
            self._listing = scan_directory(self.images_dir)
            self._listed_at = now
            logger.debug("Indexed %d result images in %s", len(self._listing), self.images_dir)
        return list(self._listing)

    def find(self, d: date, slot: str) -> Optional[ParsedResult]:
        for r in self.list():
            if r.date == d and r.display_time == slot:
                return r
        return None

    def clear(self) -> None:
        self._listing = None
        self._listed_at = 0.0
