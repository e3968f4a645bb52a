# backend/apprenticedb/apps/submissions/router.py

from typing import Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from ... import actions
from ...database import get_db
from ...security import Identity, get_current_identity
from . import schemas as submission_schemas

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.get(
    "/weeks/{week_number}",
    response_model=actions.ActionResult,
    summary="The caller's reflection for one programme week (data is null if none)",
)
def get_week(
    week_number: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.get_weekly_submission(db, identity, week_number))


@router.put(
    "/weeks/{week_number}",
    response_model=actions.ActionResult,
    summary="Create or replace the caller's reflection for one programme week",
)
def put_week(
    payload: submission_schemas.WeeklyReflectionInput,
    week_number: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.submit_weekly_reflection(db, identity, week_number, payload))
