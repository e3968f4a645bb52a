from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from . import models, schemas

logger = logging.getLogger(__name__)


def create_audit_event(
    db: Session,
    *,
    data: schemas.AuditEventCreate,
) -> models.AuditEvent:
    event = models.AuditEvent(
        entity_type=data.entity_type,
        entity_id=data.entity_id,
        action=data.action,
        actor_user_id=data.actor_user_id,
        before=data.before,
        after=data.after,
        correlation_id=data.correlation_id,
        metadata_json=data.metadata,
    )
    if data.occurred_at is not None:
        event.occurred_at = data.occurred_at
    db.add(event)
    db.flush()
    return event


def log_event(
    db: Session,
    *,
    actor_user_id: Optional[str],
    entity_type: str,
    entity_id: str,
    action: str,
    before: Optional[dict] = None,
    after: Optional[dict] = None,
    correlation_id: Optional[str] = None,
    metadata: Optional[dict] = None,
    critical: bool = False,
) -> Optional[models.AuditEvent]:
    """
    Best-effort audit event logger.
    - For critical actions (approve/reject), raise on failure.
    - For non-critical actions, log warning and continue.

    The insert runs in a savepoint so a failed audit row never poisons the
    caller's transaction.
    """
    try:
        with db.begin_nested():
            return create_audit_event(
                db,
                data=schemas.AuditEventCreate(
                    entity_type=entity_type,
                    entity_id=entity_id,
                    action=action,
                    actor_user_id=actor_user_id,
                    before=before,
                    after=after,
                    correlation_id=correlation_id,
                    metadata=metadata,
                ),
            )
    except Exception:
        logger.warning(
            "Failed to log audit event",
            extra={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "critical": critical,
            },
        )
        if critical:
            raise
        return None


def list_audit_events(
    db: Session,
    *,
    entity_type: str,
    entity_id: str,
) -> List[models.AuditEvent]:
    return (
        db.query(models.AuditEvent)
        .filter(
            models.AuditEvent.entity_type == entity_type,
            models.AuditEvent.entity_id == entity_id,
        )
        .order_by(models.AuditEvent.occurred_at.asc())
        .all()
    )
