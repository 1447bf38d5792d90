from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .drawlog.models import ParsedResult
from .drawlog.parser import result_from_parts


class ResultDescriptor(BaseModel):
    """One result image as the Remote Index reports it (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    filename: str
    day: int
    month: int
    year: int
    hour: int
    hour24: int
    period: str
    display_time: str = Field(alias="displayTime")
    timestamp: Optional[int] = None
    file_size: Optional[int] = Field(default=None, alias="fileSize")
    last_modified: Optional[int] = Field(default=None, alias="lastModified")

    @classmethod
    def from_result(cls, r: ParsedResult) -> "ResultDescriptor":
        return cls(
            filename=r.filename,
            day=r.day,
            month=r.month,
            year=r.year,
            hour=r.hour,
            hour24=r.hour24,
            period=r.period,
            display_time=r.display_time,
            timestamp=r.timestamp if r.timestamp is not None else int(r.date_time.timestamp()),
            file_size=r.file_size,
            last_modified=r.last_modified,
        )

    def to_result(self) -> Optional[ParsedResult]:
        return result_from_parts(
            self.filename,
            day=self.day,
            month=self.month,
            year=self.year,
            hour=self.hour,
            period=self.period,
            timestamp=self.timestamp,
            file_size=self.file_size,
            last_modified=self.last_modified,
        )

    def wire(self) -> dict:
        return self.model_dump(by_alias=True)
