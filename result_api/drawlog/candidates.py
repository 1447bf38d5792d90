from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Sequence

from .parser import build_result_name


# Draw slots in priority order (8pm > 6pm > 1pm)
PRIORITY_SLOTS: Sequence[str] = ("8pm", "6pm", "1pm")

# Slots the codec understands but the default search does not prioritise
EXTENDED_SLOTS: Sequence[str] = ("1pm", "6pm", "8pm", "1am", "6am", "8am", "12pm", "12am")

# webp first: it is what gets uploaded most
PREFERRED_EXTENSIONS: Sequence[str] = ("webp", "jpeg", "jpg", "png")
ALL_EXTENSIONS: Sequence[str] = ("webp", "jpeg", "jpg", "png", "gif", "bmp")

FILENAME_PREFIXES: Sequence[str] = ("", "File ")


def days_back(today: date, lookback_days: int) -> List[date]:
    """today, yesterday, ... for lookback_days entries (window [today-lookback+1, today])."""
    return [today - timedelta(days=n) for n in range(max(0, int(lookback_days)))]


def priority_first(
    today: date,
    lookback_days: int,
    slots: Sequence[str] = PRIORITY_SLOTS,
    extensions: Sequence[str] = PREFERRED_EXTENSIONS,
) -> List[str]:
    """
    Slot-major order for the fast path: every date's 8pm is tried before any 6pm.
      for slot: for day (today first): for ext
    """
    dates = days_back(today, lookback_days)
    return [
        build_result_name(d, slot, ext)
        for slot in slots
        for d in dates
        for ext in extensions
    ]


def date_first(
    today: date,
    lookback_days: int,
    slots: Sequence[str] = PRIORITY_SLOTS,
    extensions: Sequence[str] = PREFERRED_EXTENSIONS,
) -> List[str]:
    """
    Date-major order for background scans.
      for day (today first): for slot: for ext
    """
    return [
        build_result_name(d, slot, ext)
        for d in days_back(today, lookback_days)
        for slot in slots
        for ext in extensions
    ]


def exact_candidates(
    d: date,
    slot: str,
    extensions: Sequence[str] = ALL_EXTENSIONS,
    prefixes: Sequence[str] = FILENAME_PREFIXES,
) -> List[str]:
    """Every name one (date, slot) result may have been uploaded under."""
    return [build_result_name(d, slot, ext, prefix) for prefix in prefixes for ext in extensions]


def without(names: Iterable[str], seen: Iterable[str]) -> List[str]:
    skip = set(seen)
    out: List[str] = []
    for n in names:
        if n in skip:
            continue
        skip.add(n)
        out.append(n)
    return out
