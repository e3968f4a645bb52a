# backend/apprenticedb/actions.py
"""
Exposed operations.

Every function here takes an explicit `Identity` (or None), runs one
service call, and always returns an `ActionResult`. Portal errors,
payload validation failures and data-store failures are reported through
`result.error`; none of them escape as exceptions.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

from fastapi import HTTPException
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .apps.apprentices import schemas as apprentice_schemas
from .apps.apprentices import services as apprentice_services
from .apps.audit import schemas as audit_schemas
from .apps.logbook import models as logbook_models
from .apps.logbook import schemas as logbook_schemas
from .apps.logbook import services as logbook_services
from .apps.mentoring import schemas as mentoring_schemas
from .apps.mentoring import services as mentoring_services
from .apps.progress import services as progress_services
from .apps.submissions import schemas as submission_schemas
from .apps.submissions import services as submission_services
from .errors import DataStoreError, FieldErrors, PortalError
from .security import Identity

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class ErrorInfo(BaseModel):
    code: str
    message: str
    detail: FieldErrors = Field(default_factory=list)


class ActionResult(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorInfo] = None
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: Any = None, warnings: Optional[List[str]] = None) -> "ActionResult":
        return cls(success=True, data=data, warnings=list(warnings or []))

    @classmethod
    def fail(cls, code: str, message: str, detail: Optional[FieldErrors] = None) -> "ActionResult":
        return cls(success=False, error=ErrorInfo(code=code, message=message, detail=list(detail or [])))


def validation_detail(exc: ValidationError) -> FieldErrors:
    """pydantic errors as [{"field", "reason"}]."""
    detail: FieldErrors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "payload"
        reason = err.get("msg", "Invalid value")
        if reason.startswith("Value error, "):
            reason = reason[len("Value error, "):]
        detail.append({"field": field, "reason": reason})
    return detail


def _coerce(schema: Type[PayloadT], payload: Union[PayloadT, Dict[str, Any]]) -> PayloadT:
    if isinstance(payload, schema):
        return payload
    return schema.model_validate(payload)


def _run(db: Session, operation: str, call: Callable[[], ActionResult]) -> ActionResult:
    try:
        return call()
    except PortalError as exc:
        db.rollback()
        logger.info(
            "Operation refused",
            extra={"operation": operation, "code": exc.code, "reason": exc.message},
        )
        return ActionResult.fail(exc.code, exc.message, exc.detail)
    except ValidationError as exc:
        detail = validation_detail(exc)
        message = detail[0]["reason"] if detail else "Invalid input."
        return ActionResult.fail("validation_error", message, detail)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Data store failure", extra={"operation": operation})
        return ActionResult.fail(DataStoreError.code, "The data store could not complete the request.")


# ---------------------------------------------------------------------------
# LOGBOOK
# ---------------------------------------------------------------------------


def create_entry(
    db: Session,
    identity: Optional[Identity],
    payload: Union[logbook_schemas.LogbookEntryInput, Dict[str, Any]],
) -> ActionResult:
    def call() -> ActionResult:
        data = _coerce(logbook_schemas.LogbookEntryInput, payload)
        entry = logbook_services.create_entry(db, identity=identity, payload=data)
        return ActionResult.ok(logbook_schemas.LogbookEntryRead.from_entry(entry))

    return _run(db, "create_entry", call)


def update_entry(
    db: Session,
    identity: Optional[Identity],
    entry_id: str,
    payload: Union[logbook_schemas.LogbookEntryInput, Dict[str, Any]],
) -> ActionResult:
    def call() -> ActionResult:
        data = _coerce(logbook_schemas.LogbookEntryInput, payload)
        entry = logbook_services.update_entry(db, entry_id=entry_id, identity=identity, payload=data)
        return ActionResult.ok(logbook_schemas.LogbookEntryRead.from_entry(entry))

    return _run(db, "update_entry", call)


def approve_entry(db: Session, identity: Optional[Identity], entry_id: str) -> ActionResult:
    def call() -> ActionResult:
        entry = logbook_services.approve_entry(db, entry_id=entry_id, identity=identity)
        return ActionResult.ok(logbook_schemas.LogbookEntryRead.from_entry(entry))

    return _run(db, "approve_entry", call)


def reject_entry(db: Session, identity: Optional[Identity], entry_id: str) -> ActionResult:
    def call() -> ActionResult:
        entry = logbook_services.reject_entry(db, entry_id=entry_id, identity=identity)
        return ActionResult.ok(logbook_schemas.LogbookEntryRead.from_entry(entry))

    return _run(db, "reject_entry", call)


def list_my_entries(
    db: Session,
    identity: Optional[Identity],
    status: Optional[logbook_models.LogbookEntryStatus] = None,
) -> ActionResult:
    def call() -> ActionResult:
        profile = apprentice_services.require_profile(db, identity)
        apprentice = apprentice_services.get_apprentice_for_user(db, profile.id)
        entries = logbook_services.list_entries(db, apprentice.id, status=status)
        return ActionResult.ok([logbook_schemas.LogbookEntryRead.from_entry(e) for e in entries])

    return _run(db, "list_my_entries", call)


def entry_history(db: Session, identity: Optional[Identity], entry_id: str) -> ActionResult:
    def call() -> ActionResult:
        events = logbook_services.entry_history(db, entry_id, identity)
        return ActionResult.ok([audit_schemas.AuditEventRead.model_validate(e) for e in events])

    return _run(db, "entry_history", call)


# ---------------------------------------------------------------------------
# WEEKLY REFLECTIONS
# ---------------------------------------------------------------------------


def submit_weekly_reflection(
    db: Session,
    identity: Optional[Identity],
    week_number: int,
    payload: Union[submission_schemas.WeeklyReflectionInput, Dict[str, Any]],
) -> ActionResult:
    def call() -> ActionResult:
        data = _coerce(submission_schemas.WeeklyReflectionInput, payload)
        submission, warnings = submission_services.submit_weekly_reflection(
            db,
            identity=identity,
            week_number=week_number,
            payload=data,
        )
        return ActionResult.ok(submission_schemas.WeeklySubmissionRead.model_validate(submission), warnings)

    return _run(db, "submit_weekly_reflection", call)


def get_weekly_submission(db: Session, identity: Optional[Identity], week_number: int) -> ActionResult:
    def call() -> ActionResult:
        submission = submission_services.get_weekly_submission(db, identity=identity, week_number=week_number)
        if submission is None:
            return ActionResult.ok(None)
        return ActionResult.ok(submission_schemas.WeeklySubmissionRead.model_validate(submission))

    return _run(db, "get_weekly_submission", call)


# ---------------------------------------------------------------------------
# PROGRESS
# ---------------------------------------------------------------------------


def get_apprentice_progress(
    db: Session,
    identity: Optional[Identity],
    apprentice_id: str,
    today: Optional[date] = None,
) -> ActionResult:
    return _run(
        db,
        "get_apprentice_progress",
        lambda: ActionResult.ok(
            progress_services.get_apprentice_progress(
                db, apprentice_id=apprentice_id, identity=identity, today=today
            )
        ),
    )


def get_my_progress(db: Session, identity: Optional[Identity], today: Optional[date] = None) -> ActionResult:
    return _run(
        db,
        "get_my_progress",
        lambda: ActionResult.ok(progress_services.get_my_progress(db, identity=identity, today=today)),
    )


# ---------------------------------------------------------------------------
# MENTORING
# ---------------------------------------------------------------------------


def get_mentor_roster(
    db: Session,
    identity: Optional[Identity],
    order: mentoring_schemas.RosterOrder = mentoring_schemas.RosterOrder.CREATED_DESC,
    today: Optional[date] = None,
) -> ActionResult:
    return _run(
        db,
        "get_mentor_roster",
        lambda: ActionResult.ok(
            mentoring_services.get_mentor_roster(db, identity=identity, order=order, today=today)
        ),
    )


def get_review_queue(db: Session, identity: Optional[Identity]) -> ActionResult:
    return _run(
        db,
        "get_review_queue",
        lambda: ActionResult.ok(mentoring_services.get_review_queue(db, identity=identity)),
    )


def list_mentee_entries(
    db: Session,
    identity: Optional[Identity],
    apprentice_id: str,
    status: Optional[logbook_models.LogbookEntryStatus] = None,
) -> ActionResult:
    return _run(
        db,
        "list_mentee_entries",
        lambda: ActionResult.ok(
            mentoring_services.list_mentee_entries(
                db, identity=identity, apprentice_id=apprentice_id, status=status
            )
        ),
    )


def list_claimable_apprentices(db: Session, identity: Optional[Identity]) -> ActionResult:
    return _run(
        db,
        "list_claimable_apprentices",
        lambda: ActionResult.ok(mentoring_services.list_claimable_apprentices(db, identity=identity)),
    )


def claim_apprentice(db: Session, identity: Optional[Identity], apprentice_id: str) -> ActionResult:
    def call() -> ActionResult:
        apprentice = mentoring_services.claim_apprentice(db, identity=identity, apprentice_id=apprentice_id)
        return ActionResult.ok(apprentice_schemas.ApprenticeRead.model_validate(apprentice))

    return _run(db, "claim_apprentice", call)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

HTTP_STATUS_BY_CODE = {
    "authentication_required": 401,
    "not_found": 404,
    "permission_denied": 403,
    "validation_error": 422,
    "invalid_transition": 409,
    "missing_requirements": 409,
    DataStoreError.code: 503,
}


def unwrap(result: ActionResult) -> ActionResult:
    """Raise the HTTPException matching a failed result; pass successes through."""
    if result.success:
        return result
    error = result.error
    raise HTTPException(
        status_code=HTTP_STATUS_BY_CODE.get(error.code, 400),
        detail={"code": error.code, "message": error.message, "detail": error.detail},
    )
