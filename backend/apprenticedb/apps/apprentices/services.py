from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from apprenticedb.apps.accounts import models as account_models
from apprenticedb.errors import AuthenticationRequired, NotFound, PermissionDenied
from apprenticedb.security import Identity, get_profile_by_id

from . import models

logger = logging.getLogger(__name__)


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None or not identity.user_id:
        raise AuthenticationRequired()
    return identity


def require_profile(db: Session, identity: Optional[Identity]) -> account_models.Profile:
    """
    Fresh profile for the caller.

    A token whose profile has since been removed or deactivated counts as
    no identity at all.
    """
    identity = require_identity(identity)
    profile = get_profile_by_id(db, identity.user_id)
    if profile is None or not profile.is_active:
        raise AuthenticationRequired()
    return profile


def get_apprentice(db: Session, apprentice_id: str) -> models.Apprentice:
    apprentice = db.query(models.Apprentice).filter(models.Apprentice.id == apprentice_id).first()
    if apprentice is None:
        raise NotFound("Apprentice not found.")
    return apprentice


def get_apprentice_for_user(db: Session, user_id: str) -> models.Apprentice:
    apprentice = db.query(models.Apprentice).filter(models.Apprentice.user_id == user_id).first()
    if apprentice is None:
        raise NotFound("Apprentice record not found. Please contact your administrator.")
    return apprentice


def ensure_can_view(
    db: Session,
    apprentice: models.Apprentice,
    identity: Optional[Identity],
) -> account_models.Profile:
    """
    Owner, currently assigned mentor, or manager/god.
    """
    profile = require_profile(db, identity)
    if apprentice.user_id == profile.id or apprentice.mentor_id == profile.id:
        return profile
    if profile.role in account_models.OVERSIGHT_ROLES:
        return profile
    raise PermissionDenied("You don't have permission to view this apprentice.")


def ensure_assigned_mentor(
    apprentice: models.Apprentice,
    mentor_user_id: str,
    *,
    action: str,
) -> None:
    # mentor_id is read from the row loaded for this request, so a
    # reassignment takes effect on the very next review.
    if apprentice.mentor_id != mentor_user_id:
        raise PermissionDenied(f"You don't have permission to {action} this entry.")
    if apprentice.user_id == mentor_user_id:
        raise PermissionDenied(f"You cannot {action} your own entry.")


def list_active_mentees(db: Session, mentor_user_id: str) -> List[models.Apprentice]:
    return (
        db.query(models.Apprentice)
        .filter(
            models.Apprentice.mentor_id == mentor_user_id,
            models.Apprentice.status == models.ApprenticeStatus.ACTIVE,
        )
        .order_by(models.Apprentice.created_at.desc())
        .all()
    )


def list_active_apprentices(db: Session) -> List[models.Apprentice]:
    return (
        db.query(models.Apprentice)
        .filter(models.Apprentice.status == models.ApprenticeStatus.ACTIVE)
        .order_by(models.Apprentice.created_at.desc())
        .all()
    )


def assign_mentor(
    db: Session,
    *,
    apprentice: models.Apprentice,
    mentor: account_models.Profile,
) -> models.Apprentice:
    if mentor.role not in account_models.SUPERVISOR_ROLES:
        raise PermissionDenied("Only mentors and managers can take on apprentices.")
    if apprentice.status != models.ApprenticeStatus.ACTIVE:
        raise PermissionDenied("Only active apprentices can be assigned a mentor.")
    if apprentice.user_id == mentor.id:
        raise PermissionDenied("You cannot mentor your own apprenticeship.")

    previous = apprentice.mentor_id
    apprentice.mentor_id = mentor.id
    db.flush()
    logger.info(
        "Mentor assigned",
        extra={"apprentice_id": apprentice.id, "mentor_id": mentor.id, "previous_mentor_id": previous},
    )
    return apprentice
