# backend/apprenticedb/apps/submissions/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import WeeklySubmissionStatus

MAX_REFLECTION_CHARS = 1000
MAX_ATTACHMENTS = 5
MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024  # 10 MB


class AttachmentIn(BaseModel):
    """An already-uploaded file; only its metadata is stored here."""

    url: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: int = Field(..., ge=0, le=MAX_ATTACHMENT_BYTES, description="Bytes; 10 MB maximum.")
    file_type: Optional[str] = Field(None, max_length=128)


class WeeklyReflectionInput(BaseModel):
    reflection_text: str = Field("", max_length=MAX_REFLECTION_CHARS)
    curriculum_item_id: Optional[str] = None
    attachments: List[AttachmentIn] = Field(default_factory=list, max_length=MAX_ATTACHMENTS)


class SubmissionFileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_url: str
    file_name: str
    file_size: int
    file_type: Optional[str] = None


class WeeklySubmissionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    apprentice_id: str
    week_number: int
    curriculum_item_id: Optional[str] = None
    reflection_text: str
    status: WeeklySubmissionStatus
    submitted_at: datetime
    files: List[SubmissionFileRead] = Field(default_factory=list)
