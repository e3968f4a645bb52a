from __future__ import annotations

from datetime import time

from apprenticedb import actions
from apprenticedb.apps.audit import models as audit_models
from apprenticedb.apps.logbook import models as logbook_models
from conftest import identity_for, make_apprentice, make_entry, make_profile


def _entry(db_session, entry_id):
    return db_session.query(logbook_models.LogbookEntry).filter_by(id=entry_id).one()


def test_create_entry_starts_as_draft(db_session, people, entry_payload):
    result = actions.create_entry(db_session, identity_for(people["apprentice_profile"]), entry_payload())

    assert result.success is True
    assert result.error is None
    data = result.data
    assert data.status == logbook_models.LogbookEntryStatus.DRAFT
    assert data.hours_worked == 8.5
    assert data.ata_chapter_code == "32"
    assert data.ata_chapter_label == "32 - Landing Gear"
    assert data.skills_practiced == ["ATA: 32 - Landing Gear"]
    assert data.apprentice_id == people["apprentice"].id


def test_certified_entry_is_submitted_immediately(db_session, people, entry_payload):
    result = actions.create_entry(
        db_session, identity_for(people["apprentice_profile"]), entry_payload(certified=True)
    )

    assert result.success is True
    assert result.data.status == logbook_models.LogbookEntryStatus.SUBMITTED


def test_create_entry_requires_identity(db_session, people, entry_payload):
    result = actions.create_entry(db_session, None, entry_payload())

    assert result.success is False
    assert result.error.code == "authentication_required"
    assert db_session.query(logbook_models.LogbookEntry).count() == 0


def test_create_entry_without_apprentice_record(db_session, entry_payload):
    stranger = make_profile(db_session, email="nobody@example.com")

    result = actions.create_entry(db_session, identity_for(stranger), entry_payload())

    assert result.success is False
    assert result.error.code == "not_found"
    assert "contact your administrator" in result.error.message


def test_create_entry_rejects_bad_payload_with_field_detail(db_session, people, entry_payload):
    result = actions.create_entry(
        db_session,
        identity_for(people["apprentice_profile"]),
        entry_payload(start_time=time(10, 0), end_time=time(9, 0), description="short", ata_chapter="  "),
    )

    assert result.success is False
    assert result.error.code == "validation_error"
    fields = {item["field"] for item in result.error.detail}
    assert {"end_time", "description", "ata_chapter"} <= fields
    reasons = {item["field"]: item["reason"] for item in result.error.detail}
    assert reasons["end_time"] == "End time must be after start time"
    assert db_session.query(logbook_models.LogbookEntry).count() == 0


def test_create_entry_refuses_chapter_outside_table(db_session, people, entry_payload):
    me = identity_for(people["apprentice_profile"])

    free_text = actions.create_entry(db_session, me, entry_payload(ata_chapter="Landing gear overhaul work"))
    unknown = actions.create_entry(db_session, me, entry_payload(ata_chapter="99"))

    for result in (free_text, unknown):
        assert result.success is False
        assert result.error.code == "validation_error"
        assert {item["field"] for item in result.error.detail} == {"ata_chapter"}
    assert db_session.query(logbook_models.LogbookEntry).count() == 0


def test_update_draft_recomputes_hours_and_submits(db_session, people, entry_payload):
    me = identity_for(people["apprentice_profile"])
    created = actions.create_entry(db_session, me, entry_payload()).data

    result = actions.update_entry(
        db_session,
        me,
        created.id,
        entry_payload(start_time=time(7, 0), end_time=time(12, 0), ata_chapter="21", certified=True),
    )

    assert result.success is True
    assert result.data.status == logbook_models.LogbookEntryStatus.SUBMITTED
    assert result.data.hours_worked == 5.0
    assert result.data.skills_practiced == ["ATA: 21 - Air Conditioning"]


def test_update_by_another_apprentice_is_refused(db_session, people, entry_payload):
    created = actions.create_entry(db_session, identity_for(people["apprentice_profile"]), entry_payload()).data
    other_profile = make_profile(db_session, email="second@example.com")
    make_apprentice(db_session, other_profile, mentor=people["mentor"])

    result = actions.update_entry(
        db_session, identity_for(other_profile), created.id, entry_payload(description="Tampered with the entry text")
    )

    assert result.success is False
    assert result.error.code == "permission_denied"
    assert result.error.message == "You don't have permission to update this entry."
    assert _entry(db_session, created.id).description == "Inspected and serviced nose landing gear strut"


def test_update_of_submitted_entry_is_an_invalid_transition(db_session, people, entry_payload):
    me = identity_for(people["apprentice_profile"])
    created = actions.create_entry(db_session, me, entry_payload(certified=True)).data

    result = actions.update_entry(db_session, me, created.id, entry_payload(description="Changed after submission"))

    assert result.success is False
    assert result.error.code == "invalid_transition"
    assert _entry(db_session, created.id).status == logbook_models.LogbookEntryStatus.SUBMITTED


def test_mentor_approves_submitted_entry(db_session, people, entry_payload):
    created = actions.create_entry(
        db_session, identity_for(people["apprentice_profile"]), entry_payload(certified=True)
    ).data

    result = actions.approve_entry(db_session, identity_for(people["mentor"]), created.id)

    assert result.success is True
    assert result.data.status == logbook_models.LogbookEntryStatus.APPROVED
    assert result.data.approved_by == people["mentor"].id
    assert result.data.approved_at is not None
    assert result.data.rejected_by is None

    transitions = (
        db_session.query(audit_models.AuditEvent)
        .filter_by(entity_id=created.id, action="transition")
        .all()
    )
    assert [event.after["status"] for event in transitions] == ["approved"]


def test_mentor_rejects_submitted_entry(db_session, people, entry_payload):
    created = actions.create_entry(
        db_session, identity_for(people["apprentice_profile"]), entry_payload(certified=True)
    ).data

    result = actions.reject_entry(db_session, identity_for(people["mentor"]), created.id)

    assert result.success is True
    assert result.data.status == logbook_models.LogbookEntryStatus.REJECTED
    assert result.data.rejected_by == people["mentor"].id
    assert result.data.rejected_at is not None
    assert result.data.approved_by is None


def test_only_assigned_mentor_can_review(db_session, people, entry_payload):
    created = actions.create_entry(
        db_session, identity_for(people["apprentice_profile"]), entry_payload(certified=True)
    ).data

    result = actions.approve_entry(db_session, identity_for(people["other_mentor"]), created.id)

    assert result.success is False
    assert result.error.code == "permission_denied"
    assert result.error.message == "You don't have permission to approve this entry."
    assert _entry(db_session, created.id).status == logbook_models.LogbookEntryStatus.SUBMITTED


def test_mentor_cannot_review_their_own_entry(db_session, people):
    mentor = people["mentor"]
    own_row = make_apprentice(db_session, mentor, mentor=mentor)
    entry = make_entry(db_session, own_row, status=logbook_models.LogbookEntryStatus.SUBMITTED)

    approve = actions.approve_entry(db_session, identity_for(mentor), entry.id)
    reject = actions.reject_entry(db_session, identity_for(mentor), entry.id)

    assert approve.error.code == "permission_denied"
    assert reject.error.code == "permission_denied"
    stored = _entry(db_session, entry.id)
    assert stored.status == logbook_models.LogbookEntryStatus.SUBMITTED
    assert stored.approved_by is None


def test_reassignment_moves_review_rights(db_session, people, entry_payload):
    created = actions.create_entry(
        db_session, identity_for(people["apprentice_profile"]), entry_payload(certified=True)
    ).data
    claimed = actions.claim_apprentice(db_session, identity_for(people["other_mentor"]), people["apprentice"].id)
    assert claimed.success is True

    old = actions.approve_entry(db_session, identity_for(people["mentor"]), created.id)
    assert old.success is False
    assert old.error.code == "permission_denied"

    new = actions.approve_entry(db_session, identity_for(people["other_mentor"]), created.id)
    assert new.success is True


def test_draft_cannot_be_approved(db_session, people, entry_payload):
    created = actions.create_entry(db_session, identity_for(people["apprentice_profile"]), entry_payload()).data

    result = actions.approve_entry(db_session, identity_for(people["mentor"]), created.id)

    assert result.success is False
    assert result.error.code == "invalid_transition"
    assert _entry(db_session, created.id).approved_by is None


def test_terminal_entries_are_read_only(db_session, people, entry_payload):
    me = identity_for(people["apprentice_profile"])
    mentor = identity_for(people["mentor"])
    created = actions.create_entry(db_session, me, entry_payload(certified=True)).data
    actions.approve_entry(db_session, mentor, created.id)

    edit = actions.update_entry(db_session, me, created.id, entry_payload(description="Trying to edit approved work"))
    reject = actions.reject_entry(db_session, mentor, created.id)

    assert edit.error.code == "invalid_transition"
    assert reject.error.code == "invalid_transition"
    row = _entry(db_session, created.id)
    assert row.status == logbook_models.LogbookEntryStatus.APPROVED
    assert row.rejected_by is None
    assert row.description == "Inspected and serviced nose landing gear strut"


def test_unknown_entry_is_not_found(db_session, people):
    result = actions.approve_entry(db_session, identity_for(people["mentor"]), "missing-id")

    assert result.success is False
    assert result.error.code == "not_found"
    assert result.error.message == "Entry not found."


def test_list_my_entries_newest_first_with_filter(db_session, people):
    apprentice = people["apprentice"]
    make_entry(db_session, apprentice, entry_date=people["apprentice"].start_date)
    newest = make_entry(
        db_session,
        apprentice,
        entry_date=people["apprentice"].start_date.replace(day=20),
        status=logbook_models.LogbookEntryStatus.SUBMITTED,
    )
    me = identity_for(people["apprentice_profile"])

    everything = actions.list_my_entries(db_session, me)
    submitted = actions.list_my_entries(db_session, me, status=logbook_models.LogbookEntryStatus.SUBMITTED)

    assert [e.id for e in everything.data][0] == newest.id
    assert len(everything.data) == 2
    assert [e.id for e in submitted.data] == [newest.id]


def test_history_lists_create_then_transitions(db_session, people, entry_payload):
    me = identity_for(people["apprentice_profile"])
    created = actions.create_entry(db_session, me, entry_payload(certified=True)).data
    actions.approve_entry(db_session, identity_for(people["mentor"]), created.id)

    history = actions.entry_history(db_session, me, created.id)
    stranger = make_profile(db_session, email="curious@example.com")
    refused = actions.entry_history(db_session, identity_for(stranger), created.id)

    assert history.success is True
    assert [event.action for event in history.data] == ["create", "transition"]
    assert refused.error.code == "permission_denied"
