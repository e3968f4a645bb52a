# backend/apprenticedb/apps/logbook/router.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ... import actions
from ...database import get_db
from ...security import Identity, get_current_identity
from . import schemas as logbook_schemas
from .models import LogbookEntryStatus

router = APIRouter(prefix="/logbook", tags=["logbook"])


# --------------------------------------------------------------------------
# APPRENTICE
# --------------------------------------------------------------------------

@router.get(
    "/entries",
    response_model=actions.ActionResult,
    summary="List the caller's logbook entries, newest first",
)
def list_my_entries(
    status_filter: Optional[LogbookEntryStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.list_my_entries(db, identity, status=status_filter))


@router.post(
    "/entries",
    response_model=actions.ActionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create a logbook entry (draft, or submitted when certified)",
)
def create_entry(
    payload: logbook_schemas.LogbookEntryInput,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.create_entry(db, identity, payload))


@router.put(
    "/entries/{entry_id}",
    response_model=actions.ActionResult,
    summary="Edit a draft entry; certified=true submits it",
)
def update_entry(
    entry_id: str,
    payload: logbook_schemas.LogbookEntryInput,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.update_entry(db, identity, entry_id, payload))


@router.get(
    "/entries/{entry_id}/history",
    response_model=actions.ActionResult,
    summary="Audit trail of one entry, oldest first",
)
def entry_history(
    entry_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.entry_history(db, identity, entry_id))


# --------------------------------------------------------------------------
# MENTOR REVIEW
# --------------------------------------------------------------------------

@router.post(
    "/entries/{entry_id}/approve",
    response_model=actions.ActionResult,
    summary="Approve a submitted entry (assigned mentor only)",
)
def approve_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.approve_entry(db, identity, entry_id))


@router.post(
    "/entries/{entry_id}/reject",
    response_model=actions.ActionResult,
    summary="Reject a submitted entry (assigned mentor only)",
)
def reject_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return actions.unwrap(actions.reject_entry(db, identity, entry_id))
