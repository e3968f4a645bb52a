# backend/apprenticedb/apps/mentoring/schemas.py

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..logbook.schemas import LogbookEntryRead


class RosterOrder(str, enum.Enum):
    CREATED_DESC = "created_desc"
    CREATED_ASC = "created_asc"
    NAME = "name"
    PROGRESS = "progress"


class ApprenticeSummary(BaseModel):
    """
    One row of a mentor's roster.
    """

    apprentice_id: str
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    start_date: date
    created_at: Optional[datetime] = None

    current_week: int
    total_hours: float
    target_hours: int
    hours_progress: int
    pace_status: str
    overall_curriculum_progress: int
    curriculum_completed: int
    curriculum_total: int
    pending_entries: int = Field(..., description="Entries waiting for review (status submitted).")


class ReviewQueueItem(LogbookEntryRead):
    apprentice_name: Optional[str] = None
    apprentice_email: Optional[str] = None


class ClaimableApprentice(BaseModel):
    apprentice_id: str
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    mentor_id: Optional[str] = None
    total_hours: float
    is_assigned: bool = Field(..., description="Already assigned to the calling mentor.")
