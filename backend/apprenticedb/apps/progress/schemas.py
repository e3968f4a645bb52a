# backend/apprenticedb/apps/progress/schemas.py

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..logbook.schemas import LogbookEntryRead


class ChapterSummary(BaseModel):
    code: str
    label: str
    hours: float = 0.0
    status: str = Field(..., description="submitted > draft > first-seen status of contributing entries.")
    latest_entry_id: Optional[str] = None


class CurrentTraining(BaseModel):
    topic: str
    curriculum_item_id: Optional[str] = None
    due_date: date


class Milestone(BaseModel):
    week: int
    label: str
    completed: bool
    upcoming: bool


class ProgressSummary(BaseModel):
    """
    Derived metrics for one apprentice. Recomputed on every read; never stored.
    """

    apprentice_id: str
    start_date: date

    total_hours: float
    approved_hours: float
    approved_count: int
    this_week_hours: float
    target_hours: int
    hours_progress: int = Field(..., description="total_hours / target_hours, percent, rounded.")

    current_week: int
    total_weeks: int
    program_progress: int = Field(..., description="current_week / total_weeks, percent, rounded.")
    expected_hours: int
    hours_difference: float
    pace_status: str = Field(..., description="behind_pace / on_track / ahead")
    due_date: date

    chapter_hours: Dict[str, float]
    chapters: List[ChapterSummary]
    chapter_coverage_count: int
    chapter_total: int

    curriculum_completed: int
    curriculum_total: int
    overall_curriculum_progress: int

    current_training: CurrentTraining
    milestones: List[Milestone]
    recent_entries: List[LogbookEntryRead] = Field(default_factory=list)
