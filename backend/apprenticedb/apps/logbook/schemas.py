# backend/apprenticedb/apps/logbook/schemas.py

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import ata
from .models import LogbookEntry, LogbookEntryStatus


# ---------------------------------------------------------------------------
# INPUT
# ---------------------------------------------------------------------------


class LogbookEntryInput(BaseModel):
    """
    Fields an apprentice submits when creating or editing an entry.

    hours_worked is not accepted; it is always derived from the times.
    """

    entry_date: date = Field(..., description="Day the work was performed.")
    start_time: time
    end_time: time
    description: str = Field(
        ...,
        min_length=10,
        max_length=500,
        description="Task description (10-500 characters).",
    )
    ata_chapter: str = Field(..., min_length=1, max_length=8, description="ATA chapter code, e.g. '32'.")
    certified: bool = Field(
        False,
        description="Apprentice certifies the entry; it is submitted for review instead of kept as draft.",
    )

    @field_validator("ata_chapter")
    @classmethod
    def _known_chapter(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ATA Chapter is required")
        if value not in ata.ATA_CHAPTERS:
            raise ValueError(f"Unknown ATA chapter: {value}")
        return value

    @field_validator("end_time")
    @classmethod
    def _end_after_start(cls, value: time, info) -> time:
        start = info.data.get("start_time")
        if start is not None and value <= start:
            raise ValueError("End time must be after start time")
        return value


# ---------------------------------------------------------------------------
# OUTPUT
# ---------------------------------------------------------------------------


class LogbookEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    apprentice_id: str
    entry_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    hours_worked: float
    description: str
    ata_chapter_code: Optional[str] = None
    ata_chapter_label: Optional[str] = None
    skills_practiced: Optional[List[str]] = None
    status: LogbookEntryStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("hours_worked", mode="before")
    @classmethod
    def _decimal_hours(cls, value):
        if isinstance(value, Decimal):
            return float(value)
        return value if value is not None else 0.0

    @classmethod
    def from_entry(cls, entry: LogbookEntry) -> "LogbookEntryRead":
        item = cls.model_validate(entry)
        code = ata.entry_chapter_code(entry)
        item.ata_chapter_code = code
        item.ata_chapter_label = ata.label_for(code) if code else None
        return item
