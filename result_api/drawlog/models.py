from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


class ProbeOutcome(enum.Enum):
    FOUND = "found"
    MISSING = "missing"  # server answered: no such asset (or not an image)
    TRANSIENT = "transient"  # timeout / network trouble; absence not proven

    def __bool__(self) -> bool:
        return self is ProbeOutcome.FOUND


def hour_to_24(hour: int, period: str) -> int:
    p = (period or "").lower()
    if p == "am":
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12


@dataclass(frozen=True)
class ParsedResult:
    filename: str
    day: int
    month: int
    year: int
    hour: int  # 1..12
    period: str  # am | pm
    extension: str = ""

    # Filled in when the result comes from the Remote Index
    timestamp: Optional[int] = None
    file_size: Optional[int] = None
    last_modified: Optional[int] = None

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def hour24(self) -> int:
        return hour_to_24(self.hour, self.period)

    @property
    def display_time(self) -> str:
        return f"{self.hour}{self.period}"

    @property
    def date_time(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour24)

    @property
    def has_prefix(self) -> bool:
        return self.filename.lower().startswith("file ")

    def __str__(self) -> str:
        return f"{self.day:02d}-{self.month:02d}-{self.year:04d} {self.display_time} ({self.filename})"
