from __future__ import annotations

from datetime import date
from typing import Optional, Tuple

import regex as re

from .models import ParsedResult


# Result image names:
#   [File ]D{1,2}-M{1,2}-YYYY H{1,2}(am|pm).<ext>
# - "File " prefix is optional (older uploads)
# - am/pm is case-insensitive; the rest is ASCII digits only
_RX_RESULT_NAME = re.compile(
    r"""
    ^(?P<prefix>File\s+)?
    (?P<day>[0-9]{1,2})-(?P<month>[0-9]{1,2})-(?P<year>[0-9]{4})
    \s+
    (?P<hour>[0-9]{1,2})(?P<period>am|pm)
    $
    """,
    re.IGNORECASE | re.VERBOSE,
)

_RX_DATE_FRAGMENT = re.compile(r"^\s*([0-9]{1,2})-([0-9]{1,2})-([0-9]{4})\s*$")
_RX_SLOT = re.compile(r"^\s*([0-9]{1,2})\s*(am|pm)\s*$", re.IGNORECASE)
_RX_EXTENSION = re.compile(r"\.[^/.]+$")


def _split_extension(filename: str) -> Tuple[str, str]:
    m = _RX_EXTENSION.search(filename)
    if not m:
        return filename, ""
    return filename[: m.start()], m.group(0)[1:].lower()


def _valid_parts(day: int, month: int, year: int, hour: int) -> bool:
    if not (1 <= day <= 31 and 1 <= month <= 12 and 1 <= hour <= 12):
        return False
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def parse_result_name(filename: str) -> Optional[ParsedResult]:
    """
    Parse a result image name such as "12-08-2025 8pm.webp" or "File 1-8-2025 1PM.jpeg".
    Anything that is not a result name gives None; this never raises.
    """
    if not filename or not isinstance(filename, str):
        return None

    stem, ext = _split_extension(filename.strip())
    m = _RX_RESULT_NAME.match(stem)
    if not m:
        return None

    day = int(m.group("day"))
    month = int(m.group("month"))
    year = int(m.group("year"))
    hour = int(m.group("hour"))
    if not _valid_parts(day, month, year, hour):
        return None

    return ParsedResult(
        filename=filename.strip(),
        day=day,
        month=month,
        year=year,
        hour=hour,
        period=m.group("period").lower(),
        extension=ext,
    )


def result_from_parts(
    filename: str,
    *,
    day: int,
    month: int,
    year: int,
    hour: int,
    period: str,
    timestamp: Optional[int] = None,
    file_size: Optional[int] = None,
    last_modified: Optional[int] = None,
) -> Optional[ParsedResult]:
    """Build a result from already-split fields (Remote Index descriptors)."""
    p = (period or "").strip().lower()
    if p not in ("am", "pm") or not _valid_parts(day, month, year, hour):
        return None
    _, ext = _split_extension(filename or "")
    return ParsedResult(
        filename=filename,
        day=day,
        month=month,
        year=year,
        hour=hour,
        period=p,
        extension=ext,
        timestamp=timestamp,
        file_size=file_size,
        last_modified=last_modified,
    )


def format_date_fragment(d: date) -> str:
    """DD-MM-YYYY, zero padded: the date part of a result name."""
    return f"{d.day:02d}-{d.month:02d}-{d.year:04d}"


def parse_date_fragment(s: str) -> Optional[date]:
    m = _RX_DATE_FRAGMENT.match(s or "")
    if not m:
        return None
    try:
        return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
    except ValueError:
        return None


def normalize_slot(s: str) -> Optional[str]:
    """'8PM', ' 08pm ' -> '8pm'. None for anything that is not a 12-hour slot."""
    m = _RX_SLOT.match(s or "")
    if not m:
        return None
    hour = int(m.group(1))
    if not 1 <= hour <= 12:
        return None
    return f"{hour}{m.group(2).lower()}"


def build_result_name(d: date, slot: str, ext: str, prefix: str = "") -> str:
    return f"{prefix}{format_date_fragment(d)} {slot}.{ext}"
