from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from apprenticedb.apps.apprentices import services as apprentice_services
from apprenticedb.apps.curriculum import services as curriculum_services
from apprenticedb.errors import ValidationFailed
from apprenticedb.security import Identity

from . import models, schemas

logger = logging.getLogger(__name__)

ATTACHMENTS_NOT_SAVED = "attachments_not_saved"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _find_submission(db: Session, apprentice_id: str, week_number: int) -> Optional[models.WeeklySubmission]:
    return (
        db.query(models.WeeklySubmission)
        .filter(
            models.WeeklySubmission.apprentice_id == apprentice_id,
            models.WeeklySubmission.week_number == week_number,
        )
        .first()
    )


def _apply_reflection(submission: models.WeeklySubmission, payload: schemas.WeeklyReflectionInput) -> None:
    submission.curriculum_item_id = payload.curriculum_item_id or None
    submission.reflection_text = payload.reflection_text
    submission.status = models.WeeklySubmissionStatus.SUBMITTED
    submission.submitted_at = _utcnow()


def _upsert_submission(
    db: Session,
    *,
    apprentice_id: str,
    week_number: int,
    payload: schemas.WeeklyReflectionInput,
) -> models.WeeklySubmission:
    """Insert or overwrite the (apprentice, week) row; latest write wins."""
    submission = _find_submission(db, apprentice_id, week_number)
    if submission is None:
        submission = models.WeeklySubmission(apprentice_id=apprentice_id, week_number=week_number)
        _apply_reflection(submission, payload)
        db.add(submission)
        try:
            db.flush()
            return submission
        except IntegrityError:
            # Another request created the row first; overwrite it instead.
            db.rollback()
            submission = _find_submission(db, apprentice_id, week_number)
            if submission is None:
                raise

    _apply_reflection(submission, payload)
    db.flush()
    return submission


def _write_attachment_rows(
    db: Session,
    submission_id: str,
    attachments: Sequence[schemas.AttachmentIn],
) -> None:
    db.query(models.WeeklySubmissionFile).filter(
        models.WeeklySubmissionFile.submission_id == submission_id
    ).delete(synchronize_session=False)
    for attachment in attachments:
        db.add(
            models.WeeklySubmissionFile(
                submission_id=submission_id,
                file_url=attachment.url,
                file_name=attachment.file_name,
                file_size=attachment.file_size,
                file_type=attachment.file_type,
            )
        )
    db.flush()


def _replace_attachments(
    db: Session,
    submission: models.WeeklySubmission,
    attachments: Sequence[schemas.AttachmentIn],
) -> bool:
    """
    Swap the attachment rows of an already committed submission.

    Dependent write: the files are already in blob storage and the
    submission is saved, so a failure here is logged and reported as False
    but never undoes the submission.
    """
    try:
        with db.begin_nested():
            _write_attachment_rows(db, submission.id, attachments)
        db.commit()
        return True
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning(
            "Failed to save submission file records",
            extra={
                "submission_id": submission.id,
                "file_count": len(attachments),
                "error": str(exc),
            },
        )
        return False


def submit_weekly_reflection(
    db: Session,
    *,
    identity: Optional[Identity],
    week_number: int,
    payload: schemas.WeeklyReflectionInput,
) -> Tuple[models.WeeklySubmission, List[str]]:
    """
    Create or replace the caller's reflection for one programme week.

    Returns the saved submission and any warnings (dependent writes that
    did not go through).
    """
    profile = apprentice_services.require_profile(db, identity)
    if week_number is None or week_number < 1:
        raise ValidationFailed.for_field("week_number", "Week number must be a positive integer.")
    apprentice = apprentice_services.get_apprentice_for_user(db, profile.id)
    if payload.curriculum_item_id and curriculum_services.find_item(db, payload.curriculum_item_id) is None:
        raise ValidationFailed.for_field("curriculum_item_id", "Unknown curriculum item.")

    submission = _upsert_submission(
        db,
        apprentice_id=apprentice.id,
        week_number=week_number,
        payload=payload,
    )
    db.commit()

    warnings: List[str] = []
    if not _replace_attachments(db, submission, payload.attachments):
        warnings.append(ATTACHMENTS_NOT_SAVED)

    db.expire(submission, ["files"])
    db.refresh(submission)
    logger.info(
        "Weekly reflection submitted",
        extra={"submission_id": submission.id, "apprentice_id": apprentice.id, "week_number": week_number},
    )
    return submission, warnings


def get_weekly_submission(
    db: Session,
    *,
    identity: Optional[Identity],
    week_number: int,
) -> Optional[models.WeeklySubmission]:
    profile = apprentice_services.require_profile(db, identity)
    apprentice = apprentice_services.get_apprentice_for_user(db, profile.id)
    return _find_submission(db, apprentice.id, week_number)
