# backend/apprenticedb/apps/progress/router.py

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ... import actions
from ...database import get_read_db
from ...security import Identity, get_current_identity

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/me", response_model=actions.ActionResult, summary="Progress summary for the caller")
def my_progress(
    db: Session = Depends(get_read_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.get_my_progress(db, identity))


@router.get(
    "/apprentices/{apprentice_id}",
    response_model=actions.ActionResult,
    summary="Progress summary for one apprentice (owner, mentor or manager)",
)
def apprentice_progress(
    apprentice_id: str,
    db: Session = Depends(get_read_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.get_apprentice_progress(db, identity, apprentice_id))
