from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from apprenticedb.apps.accounts import models as account_models
from apprenticedb.apps.apprentices import models as apprentice_models
from apprenticedb.apps.apprentices import services as apprentice_services
from apprenticedb.apps.logbook import models as logbook_models
from apprenticedb.apps.logbook import services as logbook_services
from apprenticedb.apps.progress import services as progress_services
from apprenticedb.errors import PermissionDenied
from apprenticedb.security import Identity

from . import schemas

logger = logging.getLogger(__name__)


def _profiles_by_id(db: Session, user_ids: Iterable[str]) -> Dict[str, account_models.Profile]:
    ids = [user_id for user_id in dict.fromkeys(user_ids) if user_id]
    if not ids:
        return {}
    rows = db.query(account_models.Profile).filter(account_models.Profile.id.in_(ids)).all()
    return {row.id: row for row in rows}


def _sort_roster(
    rows: List[schemas.ApprenticeSummary],
    order: schemas.RosterOrder,
) -> List[schemas.ApprenticeSummary]:
    # rows arrive newest enrolment first
    if order == schemas.RosterOrder.CREATED_ASC:
        return list(reversed(rows))
    if order == schemas.RosterOrder.NAME:
        return sorted(rows, key=lambda r: (r.full_name or r.email or "").lower())
    if order == schemas.RosterOrder.PROGRESS:
        return sorted(rows, key=lambda r: (-r.hours_progress, (r.full_name or r.email or "").lower()))
    return rows


# ---------------------------------------------------------------------------
# ROSTER
# ---------------------------------------------------------------------------


def get_mentor_roster(
    db: Session,
    *,
    identity: Optional[Identity],
    order: schemas.RosterOrder = schemas.RosterOrder.CREATED_DESC,
    today: Optional[date] = None,
) -> List[schemas.ApprenticeSummary]:
    """
    Progress, pace and pending-review count for every active mentee.

    Entries, curriculum progress and profiles are each fetched once for the
    whole roster and grouped in memory.
    """
    profile = apprentice_services.require_profile(db, identity)
    mentees = apprentice_services.list_active_mentees(db, profile.id)
    if not mentees:
        return []

    summaries, entries_by_apprentice = progress_services.build_summaries(db, mentees, today=today)
    profiles = _profiles_by_id(db, (a.user_id for a in mentees))

    rows: List[schemas.ApprenticeSummary] = []
    for apprentice in mentees:
        summary = summaries[apprentice.id]
        person = profiles.get(apprentice.user_id)
        pending = sum(
            1
            for entry in entries_by_apprentice.get(apprentice.id, [])
            if entry.status == logbook_models.LogbookEntryStatus.SUBMITTED
        )
        rows.append(
            schemas.ApprenticeSummary(
                apprentice_id=apprentice.id,
                user_id=apprentice.user_id,
                full_name=person.full_name if person else None,
                email=person.email if person else None,
                avatar_url=person.avatar_url if person else None,
                start_date=apprentice.start_date,
                created_at=apprentice.created_at,
                current_week=summary.current_week,
                total_hours=summary.total_hours,
                target_hours=summary.target_hours,
                hours_progress=summary.hours_progress,
                pace_status=summary.pace_status,
                overall_curriculum_progress=summary.overall_curriculum_progress,
                curriculum_completed=summary.curriculum_completed,
                curriculum_total=summary.curriculum_total,
                pending_entries=pending,
            )
        )
    return _sort_roster(rows, order)


# ---------------------------------------------------------------------------
# REVIEW QUEUE / MENTEE ENTRIES
# ---------------------------------------------------------------------------


def _with_apprentice(
    db: Session,
    entries: List[logbook_models.LogbookEntry],
    apprentices: Dict[str, apprentice_models.Apprentice],
) -> List[schemas.ReviewQueueItem]:
    profiles = _profiles_by_id(db, (a.user_id for a in apprentices.values()))
    items: List[schemas.ReviewQueueItem] = []
    for entry in entries:
        item = schemas.ReviewQueueItem.from_entry(entry)
        apprentice = apprentices.get(entry.apprentice_id)
        person = profiles.get(apprentice.user_id) if apprentice else None
        if person is not None:
            item.apprentice_name = person.full_name
            item.apprentice_email = person.email
        items.append(item)
    return items


def get_review_queue(
    db: Session,
    *,
    identity: Optional[Identity],
) -> List[schemas.ReviewQueueItem]:
    """Submitted entries of every active mentee, newest entry date first."""
    profile = apprentice_services.require_profile(db, identity)
    mentees = {a.id: a for a in apprentice_services.list_active_mentees(db, profile.id)}
    entries = logbook_services.entries_for_apprentices(
        db,
        mentees.keys(),
        status=logbook_models.LogbookEntryStatus.SUBMITTED,
    )
    return _with_apprentice(db, entries, mentees)


def list_mentee_entries(
    db: Session,
    *,
    identity: Optional[Identity],
    apprentice_id: str,
    status: Optional[logbook_models.LogbookEntryStatus] = None,
) -> List[schemas.ReviewQueueItem]:
    profile = apprentice_services.require_profile(db, identity)
    apprentice = apprentice_services.get_apprentice(db, apprentice_id)
    if apprentice.mentor_id != profile.id and profile.role not in account_models.OVERSIGHT_ROLES:
        raise PermissionDenied("You are not the mentor of this apprentice.")
    entries = logbook_services.list_entries(db, apprentice.id, status=status)
    return _with_apprentice(db, entries, {apprentice.id: apprentice})


# ---------------------------------------------------------------------------
# ASSIGNMENT
# ---------------------------------------------------------------------------


def list_claimable_apprentices(
    db: Session,
    *,
    identity: Optional[Identity],
) -> List[schemas.ClaimableApprentice]:
    profile = apprentice_services.require_profile(db, identity)
    if profile.role not in account_models.SUPERVISOR_ROLES:
        raise PermissionDenied("Only mentors and managers can take on apprentices.")

    # Only apprentice-role profiles other than the caller can be taken on.
    candidates = [a for a in apprentice_services.list_active_apprentices(db) if a.user_id != profile.id]
    profiles = _profiles_by_id(db, (a.user_id for a in candidates))
    apprentices = [
        a
        for a in candidates
        if a.user_id in profiles and profiles[a.user_id].role == account_models.ProfileRole.APPRENTICE
    ]
    totals: Dict[str, float] = {a.id: 0.0 for a in apprentices}
    for entry in logbook_services.entries_for_apprentices(db, totals.keys()):
        totals[entry.apprentice_id] += float(entry.hours_worked or 0)

    rows = []
    for apprentice in apprentices:
        person = profiles[apprentice.user_id]
        rows.append(
            schemas.ClaimableApprentice(
                apprentice_id=apprentice.id,
                user_id=apprentice.user_id,
                full_name=person.full_name,
                email=person.email,
                mentor_id=apprentice.mentor_id,
                total_hours=round(totals[apprentice.id], 2),
                is_assigned=apprentice.mentor_id == profile.id,
            )
        )
    return rows


def claim_apprentice(
    db: Session,
    *,
    identity: Optional[Identity],
    apprentice_id: str,
) -> apprentice_models.Apprentice:
    """
    Make the caller the apprentice's mentor.

    The previous mentor loses review rights immediately; reviews always
    re-read mentor_id.
    """
    profile = apprentice_services.require_profile(db, identity)
    apprentice = apprentice_services.get_apprentice(db, apprentice_id)
    apprentice_services.assign_mentor(db, apprentice=apprentice, mentor=profile)
    db.commit()
    db.refresh(apprentice)
    return apprentice
