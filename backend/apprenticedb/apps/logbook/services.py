from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from apprenticedb.apps.apprentices import models as apprentice_models
from apprenticedb.apps.apprentices import services as apprentice_services
from apprenticedb.apps.audit import services as audit_services
from apprenticedb.apps.workflow import apply_transition
from apprenticedb.errors import NotFound, PermissionDenied
from apprenticedb.security import Identity

from . import ata, models, schemas
from .hours import compute_hours_worked

logger = logging.getLogger(__name__)

ENTITY_TYPE = "logbook_entry"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _status_value(status: Any) -> str:
    return status.value if hasattr(status, "value") else str(status)


def _snapshot(entry: models.LogbookEntry) -> Dict[str, Any]:
    return {
        "entry_date": entry.entry_date,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
        "hours_worked": entry.hours_worked,
        "description": entry.description,
        "ata_chapter_code": entry.ata_chapter_code,
        "status": _status_value(entry.status),
    }


def _apply_fields(entry: models.LogbookEntry, payload: schemas.LogbookEntryInput) -> None:
    entry.entry_date = payload.entry_date
    entry.start_time = payload.start_time
    entry.end_time = payload.end_time
    entry.hours_worked = compute_hours_worked(payload.start_time, payload.end_time)
    entry.description = payload.description
    entry.ata_chapter_code = payload.ata_chapter
    entry.skills_practiced = ata.to_legacy_skills(payload.ata_chapter)


def _target_status(payload: schemas.LogbookEntryInput) -> models.LogbookEntryStatus:
    if payload.certified:
        return models.LogbookEntryStatus.SUBMITTED
    return models.LogbookEntryStatus.DRAFT


# ---------------------------------------------------------------------------
# READS
# ---------------------------------------------------------------------------


def get_entry(db: Session, entry_id: str) -> models.LogbookEntry:
    entry = db.query(models.LogbookEntry).filter(models.LogbookEntry.id == entry_id).first()
    if entry is None:
        raise NotFound("Entry not found.")
    return entry


def list_entries(
    db: Session,
    apprentice_id: str,
    *,
    status: Optional[models.LogbookEntryStatus] = None,
) -> List[models.LogbookEntry]:
    query = db.query(models.LogbookEntry).filter(models.LogbookEntry.apprentice_id == apprentice_id)
    if status is not None:
        query = query.filter(models.LogbookEntry.status == status)
    return query.order_by(models.LogbookEntry.entry_date.desc(), models.LogbookEntry.created_at.desc()).all()


def entries_for_apprentices(
    db: Session,
    apprentice_ids: Iterable[str],
    *,
    status: Optional[models.LogbookEntryStatus] = None,
) -> List[models.LogbookEntry]:
    """All entries of a set of apprentices in one query, newest entry_date first."""
    ids = list(dict.fromkeys(apprentice_ids))
    if not ids:
        return []
    query = db.query(models.LogbookEntry).filter(models.LogbookEntry.apprentice_id.in_(ids))
    if status is not None:
        query = query.filter(models.LogbookEntry.status == status)
    return query.order_by(models.LogbookEntry.entry_date.desc(), models.LogbookEntry.created_at.desc()).all()


def entry_history(db: Session, entry_id: str, identity: Optional[Identity]):
    entry = get_entry(db, entry_id)
    apprentice = apprentice_services.get_apprentice(db, entry.apprentice_id)
    apprentice_services.ensure_can_view(db, apprentice, identity)
    return audit_services.list_audit_events(db, entity_type=ENTITY_TYPE, entity_id=entry.id)


# ---------------------------------------------------------------------------
# APPRENTICE ACTIONS
# ---------------------------------------------------------------------------


def create_entry(
    db: Session,
    *,
    identity: Optional[Identity],
    payload: schemas.LogbookEntryInput,
) -> models.LogbookEntry:
    """
    New entry for the caller's own apprenticeship.

    certified=False starts as DRAFT, certified=True goes straight to
    SUBMITTED.
    """
    profile = apprentice_services.require_profile(db, identity)
    apprentice = apprentice_services.get_apprentice_for_user(db, profile.id)

    entry = models.LogbookEntry(apprentice_id=apprentice.id)
    _apply_fields(entry, payload)
    entry.status = _target_status(payload)
    db.add(entry)
    db.flush()

    audit_services.log_event(
        db,
        actor_user_id=profile.id,
        entity_type=ENTITY_TYPE,
        entity_id=entry.id,
        action="create",
        after=jsonable_encoder(_snapshot(entry)),
    )
    db.commit()
    db.refresh(entry)

    logger.info(
        "Logbook entry created",
        extra={"entry_id": entry.id, "apprentice_id": apprentice.id, "status": _status_value(entry.status)},
    )
    return entry


def update_entry(
    db: Session,
    *,
    entry_id: str,
    identity: Optional[Identity],
    payload: schemas.LogbookEntryInput,
) -> models.LogbookEntry:
    """
    Edit a DRAFT entry; certified=True submits it.

    Ownership is checked before state, so a stranger learns nothing about
    the entry's status. Non-draft entries fail in the workflow engine and
    the row is left untouched.
    """
    profile = apprentice_services.require_profile(db, identity)
    apprentice = apprentice_services.get_apprentice_for_user(db, profile.id)
    entry = get_entry(db, entry_id)

    if entry.apprentice_id != apprentice.id:
        raise PermissionDenied("You don't have permission to update this entry.")

    before = _snapshot(entry)
    from_state = before["status"]
    target = _target_status(payload)

    after = dict(before)
    after.update(
        {
            "entry_date": payload.entry_date,
            "start_time": payload.start_time,
            "end_time": payload.end_time,
            "hours_worked": compute_hours_worked(payload.start_time, payload.end_time),
            "description": payload.description,
            "ata_chapter_code": payload.ata_chapter,
            "status": target.value,
        }
    )

    apply_transition(
        db,
        actor_user_id=profile.id,
        entity_type=ENTITY_TYPE,
        entity_id=entry.id,
        from_state=from_state,
        to_state=target.value,
        before_obj=before,
        after_obj=after,
        critical=False,
    )

    _apply_fields(entry, payload)
    entry.status = target
    db.commit()
    db.refresh(entry)
    return entry


# ---------------------------------------------------------------------------
# MENTOR REVIEW
# ---------------------------------------------------------------------------


def _review(
    db: Session,
    *,
    entry_id: str,
    identity: Optional[Identity],
    target: models.LogbookEntryStatus,
) -> models.LogbookEntry:
    profile = apprentice_services.require_profile(db, identity)
    entry = get_entry(db, entry_id)

    apprentice = (
        db.query(apprentice_models.Apprentice)
        .filter(apprentice_models.Apprentice.id == entry.apprentice_id)
        .populate_existing()
        .first()
    )
    if apprentice is None:
        raise NotFound("Entry not found.")

    action = "approve" if target == models.LogbookEntryStatus.APPROVED else "reject"
    apprentice_services.ensure_assigned_mentor(apprentice, profile.id, action=action)

    now = _utcnow()
    before = _snapshot(entry)
    if target == models.LogbookEntryStatus.APPROVED:
        stamp = {"approved_by": profile.id, "approved_at": now}
    else:
        stamp = {"rejected_by": profile.id, "rejected_at": now}
    after = dict(before, status=target.value, **stamp)

    apply_transition(
        db,
        actor_user_id=profile.id,
        entity_type=ENTITY_TYPE,
        entity_id=entry.id,
        from_state=before["status"],
        to_state=target.value,
        before_obj=before,
        after_obj=after,
        critical=True,
    )

    entry.status = target
    for key, value in stamp.items():
        setattr(entry, key, value)
    db.commit()
    db.refresh(entry)

    logger.info(
        "Logbook entry reviewed",
        extra={"entry_id": entry.id, "apprentice_id": apprentice.id, "status": target.value, "mentor_id": profile.id},
    )
    return entry


def approve_entry(db: Session, *, entry_id: str, identity: Optional[Identity]) -> models.LogbookEntry:
    return _review(db, entry_id=entry_id, identity=identity, target=models.LogbookEntryStatus.APPROVED)


def reject_entry(db: Session, *, entry_id: str, identity: Optional[Identity]) -> models.LogbookEntry:
    return _review(db, entry_id=entry_id, identity=identity, target=models.LogbookEntryStatus.REJECTED)
