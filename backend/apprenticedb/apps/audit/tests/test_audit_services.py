from __future__ import annotations

import pytest
from sqlalchemy.exc import SQLAlchemyError

from apprenticedb.apps.audit import services as audit_services
from conftest import make_profile


def test_log_event_writes_record(db_session):
    actor = make_profile(db_session, email="audit@example.com")

    event = audit_services.log_event(
        db_session,
        actor_user_id=actor.id,
        entity_type="logbook_entry",
        entity_id="entry-1",
        action="create",
        after={"status": "draft"},
        metadata={"module": "logbook"},
    )

    db_session.commit()
    assert event is not None
    assert event.entity_type == "logbook_entry"
    assert event.actor_user_id == actor.id


def test_list_audit_events_is_scoped_to_entity(db_session):
    for entity_id, action in [("entry-1", "create"), ("entry-2", "create"), ("entry-1", "transition")]:
        audit_services.log_event(
            db_session,
            actor_user_id=None,
            entity_type="logbook_entry",
            entity_id=entity_id,
            action=action,
        )
    db_session.commit()

    events = audit_services.list_audit_events(db_session, entity_type="logbook_entry", entity_id="entry-1")

    assert [event.action for event in events] == ["create", "transition"]


def _broken_create(db, *, data):
    raise SQLAlchemyError("audit table unavailable")


def test_non_critical_failure_is_swallowed(db_session, monkeypatch):
    monkeypatch.setattr(audit_services, "create_audit_event", _broken_create)

    event = audit_services.log_event(
        db_session,
        actor_user_id=None,
        entity_type="logbook_entry",
        entity_id="entry-1",
        action="transition",
        critical=False,
    )

    assert event is None


def test_critical_failure_is_raised(db_session, monkeypatch):
    monkeypatch.setattr(audit_services, "create_audit_event", _broken_create)

    with pytest.raises(SQLAlchemyError):
        audit_services.log_event(
            db_session,
            actor_user_id=None,
            entity_type="logbook_entry",
            entity_id="entry-1",
            action="transition",
            critical=True,
        )
