from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Sequence

from .candidates import PRIORITY_SLOTS
from .models import ParsedResult


def slot_priority(display_time: str, order: Sequence[str] = PRIORITY_SLOTS) -> int:
    """8pm -> 3, 6pm -> 2, 1pm -> 1, anything else -> 0."""
    t = (display_time or "").strip().lower()
    if t in order:
        return len(order) - list(order).index(t)
    return 0


def sort_newest_first(results: Iterable[ParsedResult]) -> List[ParsedResult]:
    # sorted() is stable: equal date_time keeps input order
    return sorted(results, key=lambda r: r.date_time, reverse=True)


def dedupe(results: Iterable[ParsedResult]) -> List[ParsedResult]:
    seen = set()
    out: List[ParsedResult] = []
    for r in results:
        if r.filename in seen:
            continue
        seen.add(r.filename)
        out.append(r)
    return out


def select_best(results: Sequence[ParsedResult]) -> ParsedResult:
    """Newest result overall. Caller guarantees a non-empty input."""
    return sort_newest_first(results)[0]


def select_for_date(results: Sequence[ParsedResult], order: Sequence[str] = PRIORITY_SLOTS) -> ParsedResult:
    """
    Pick one result among those of a single day: highest priority slot wins,
    otherwise the first one given.
    """
    for slot in order:
        for r in results:
            if r.display_time == slot:
                return r
    return results[0]


def results_on(results: Iterable[ParsedResult], d: date) -> List[ParsedResult]:
    return [r for r in results if r.date == d]


def slots_by_day(results: Iterable[ParsedResult], year: int, month: int) -> Dict[int, List[str]]:
    out: Dict[int, List[str]] = {}
    for r in results:
        if r.year != year or r.month != month:
            continue
        slots = out.setdefault(r.day, [])
        if r.display_time not in slots:
            slots.append(r.display_time)
    for slots in out.values():
        slots.sort(key=slot_priority, reverse=True)
    return out
