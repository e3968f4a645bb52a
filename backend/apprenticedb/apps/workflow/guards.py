from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from sqlalchemy.orm import Session

GuardResult = List[Dict[str, str]]


def _get_value(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def guard_entry_submission(
    db: Session,
    *,
    before_obj: Any,
    after_obj: Any,
    from_state: str,
    to_state: str,
) -> GuardResult:
    description = _get_value(after_obj, "description")
    chapter = _get_value(after_obj, "ata_chapter_code")
    hours = _get_value(after_obj, "hours_worked")

    missing = []
    if not description:
        missing.append({"field": "description", "reason": "task description required"})
    if not chapter:
        missing.append({"field": "ata_chapter_code", "reason": "ATA chapter required"})
    try:
        if hours is None or Decimal(str(hours)) <= 0:
            missing.append({"field": "hours_worked", "reason": "hours worked must be positive"})
    except InvalidOperation:
        missing.append({"field": "hours_worked", "reason": "hours worked must be a number"})
    return missing


def guard_entry_approval(
    db: Session,
    *,
    before_obj: Any,
    after_obj: Any,
    from_state: str,
    to_state: str,
) -> GuardResult:
    missing = []
    if not _get_value(after_obj, "approved_by"):
        missing.append({"field": "approved_by", "reason": "approver required"})
    if not _get_value(after_obj, "approved_at"):
        missing.append({"field": "approved_at", "reason": "approval timestamp required"})
    return missing


def guard_entry_rejection(
    db: Session,
    *,
    before_obj: Any,
    after_obj: Any,
    from_state: str,
    to_state: str,
) -> GuardResult:
    missing = []
    if not _get_value(after_obj, "rejected_by"):
        missing.append({"field": "rejected_by", "reason": "reviewer required"})
    if not _get_value(after_obj, "rejected_at"):
        missing.append({"field": "rejected_at", "reason": "rejection timestamp required"})
    return missing
