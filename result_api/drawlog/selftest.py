from __future__ import annotations

import logging
from typing import Dict, List

from .models import hour_to_24
from .parser import format_date_fragment, parse_result_name

logger = logging.getLogger("resultweb")


DEFAULT_SELFTEST_NAMES: List[str] = [
    "12-08-2025 8pm.webp",
    "1-8-2025 1PM.jpeg",
    "File 13-08-2025 6pm.png",
    "31-12-2024 12am.jpg",
]

_HOUR_TABLE: Dict[str, int] = {
    "12am": 0,
    "1am": 1,
    "11am": 11,
    "12pm": 12,
    "1pm": 13,
    "11pm": 23,
}


def run_codec_selftest(names: List[str] | None = None) -> None:
    """Smoke-test the filename codec at startup.

    Raises RuntimeError if a known-good sample does not parse or the hour table drifts.
    """
    samples = names or DEFAULT_SELFTEST_NAMES
    for name in samples:
        parsed = parse_result_name(name)
        if parsed is None:
            raise RuntimeError(f"codec self-test: could not parse {name!r}")
        # date fragment must survive a format/parse cycle
        if parse_result_name(f"{format_date_fragment(parsed.date)} {parsed.display_time}") is None:
            raise RuntimeError(f"codec self-test: {name!r} did not round-trip")

    for slot, expected in _HOUR_TABLE.items():
        got = hour_to_24(int(slot[:-2]), slot[-2:])
        if got != expected:
            raise RuntimeError(f"codec self-test: {slot} -> {got}, expected {expected}")

    logger.info("Codec self-test passed (%d names).", len(samples))
