# backend/apprenticedb/apps/apprentices/schemas.py

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .models import ApprenticeStatus


class ApprenticeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    mentor_id: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    status: ApprenticeStatus
