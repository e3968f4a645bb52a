# backend/apprenticedb/apps/mentoring/router.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ... import actions
from ...database import get_db, get_read_db
from ...security import Identity, get_current_identity
from ..logbook.models import LogbookEntryStatus
from .schemas import RosterOrder

router = APIRouter(prefix="/mentor", tags=["mentoring"])


@router.get("/roster", response_model=actions.ActionResult, summary="Active mentees with progress and pace")
def roster(
    order: RosterOrder = RosterOrder.CREATED_DESC,
    db: Session = Depends(get_read_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.get_mentor_roster(db, identity, order=order))


@router.get("/review-queue", response_model=actions.ActionResult, summary="Submitted entries awaiting review")
def review_queue(
    db: Session = Depends(get_read_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.get_review_queue(db, identity))


# Declared before /apprentices/{apprentice_id}/... so "claimable" is not read as an id.
@router.get(
    "/apprentices/claimable",
    response_model=actions.ActionResult,
    summary="Active apprentices a mentor can take on",
)
def claimable_apprentices(
    db: Session = Depends(get_read_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.list_claimable_apprentices(db, identity))


@router.get(
    "/apprentices/{apprentice_id}/entries",
    response_model=actions.ActionResult,
    summary="Entries of one mentee, optionally filtered by status",
)
def mentee_entries(
    apprentice_id: str,
    status_filter: Optional[LogbookEntryStatus] = Query(None, alias="status"),
    db: Session = Depends(get_read_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.list_mentee_entries(db, identity, apprentice_id, status=status_filter))


@router.post(
    "/apprentices/{apprentice_id}/claim",
    response_model=actions.ActionResult,
    summary="Become the apprentice's mentor",
)
def claim(
    apprentice_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.claim_apprentice(db, identity, apprentice_id))
