from __future__ import annotations

from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from apprenticedb import actions
from apprenticedb.apps.curriculum import models as curriculum_models
from apprenticedb.apps.logbook.models import LogbookEntryStatus
from apprenticedb.apps.progress import services as progress_services
from conftest import identity_for, make_entry, make_profile

START = date(2025, 1, 6)


def _apprentice(start=START):
    return SimpleNamespace(id="app-1", start_date=start)


def _entry(entry_id, entry_date, hours, *, status=LogbookEntryStatus.APPROVED, code="32", skills=None):
    return SimpleNamespace(
        id=entry_id,
        apprentice_id="app-1",
        entry_date=entry_date,
        start_time=None,
        end_time=None,
        hours_worked=hours,
        description="Routine servicing task",
        ata_chapter_code=code,
        skills_practiced=skills,
        status=status,
        approved_by=None,
        approved_at=None,
        rejected_by=None,
        rejected_at=None,
        created_at=None,
    )


def _summary(entries=(), *, today, items=(), statuses=None, start=START):
    return progress_services.compute_progress(
        _apprentice(start),
        list(entries),
        list(items),
        statuses or {},
        today=today,
    )


# ---------------------------------------------------------------------------
# PURE HELPERS
# ---------------------------------------------------------------------------


def test_current_week_is_one_based_and_never_below_one():
    assert progress_services.current_week(START, START) == 1
    assert progress_services.current_week(START, START + timedelta(days=6)) == 1
    assert progress_services.current_week(START, START + timedelta(days=7)) == 2
    assert progress_services.current_week(START, START - timedelta(days=30)) == 1


def test_round_percent_rounds_halves_up_and_handles_zero():
    assert progress_services.round_percent(1, 8) == 13
    assert progress_services.round_percent(1, 3) == 33
    assert progress_services.round_percent(5, 0) == 0


def test_calendar_week_starts_on_sunday():
    wednesday = date(2025, 3, 12)
    assert progress_services.start_of_calendar_week(wednesday) == date(2025, 3, 9)
    assert progress_services.start_of_calendar_week(date(2025, 3, 9)) == date(2025, 3, 9)


@pytest.mark.parametrize(
    "total,expected,status",
    [
        (150, 400, progress_services.PACE_ON_TRACK),
        (0, 4000, progress_services.PACE_BEHIND),
        (700, 40, progress_services.PACE_AHEAD),
        (0, 40, progress_services.PACE_ON_TRACK),
    ],
)
def test_classify_pace(total, expected, status):
    assert progress_services.classify_pace(total, expected) == status


# ---------------------------------------------------------------------------
# SUMMARY
# ---------------------------------------------------------------------------


def test_week_ten_with_150_hours_is_on_track():
    today = START + timedelta(days=63)
    summary = _summary([_entry("e1", START, 150)], today=today)

    assert summary.current_week == 10
    assert summary.expected_hours == 400
    assert summary.hours_difference == -250.0
    assert summary.pace_status == "on_track"
    assert summary.hours_progress == 3


def test_week_hundred_with_no_hours_is_behind():
    summary = _summary(today=START + timedelta(days=99 * 7))

    assert summary.current_week == 100
    assert summary.pace_status == "behind_pace"


def test_empty_apprentice_gets_zero_defaults():
    summary = _summary(today=START)

    assert summary.total_hours == 0.0
    assert summary.approved_hours == 0.0
    assert summary.hours_progress == 0
    assert summary.target_hours == 5200
    assert summary.total_weeks == 130
    assert summary.chapters == []
    assert summary.chapter_hours == {}
    assert summary.chapter_coverage_count == 0
    assert summary.chapter_total == 46
    assert summary.curriculum_total == 0
    assert summary.overall_curriculum_progress == 0
    assert summary.current_training.topic == "Safety, Ground Operations & Servicing"
    assert summary.current_training.due_date == START + timedelta(days=6)
    assert summary.recent_entries == []


def test_unapproved_hours_count_toward_totals():
    entries = [
        _entry("e1", START, 8, status=LogbookEntryStatus.APPROVED),
        _entry("e2", START + timedelta(days=1), 4, status=LogbookEntryStatus.DRAFT),
        _entry("e3", START + timedelta(days=2), 2.5, status=LogbookEntryStatus.REJECTED),
    ]
    summary = _summary(entries, today=START + timedelta(days=3))

    assert summary.total_hours == 14.5
    assert summary.approved_hours == 8.0
    assert summary.approved_count == 1


def test_chapter_status_precedence():
    entries = [
        # 32: approved then draft -> draft
        _entry("a1", START, 2, status=LogbookEntryStatus.APPROVED, code="32"),
        _entry("a2", START + timedelta(days=1), 3, status=LogbookEntryStatus.DRAFT, code="32"),
        # 21: submitted anywhere wins over draft
        _entry("b1", START, 1, status=LogbookEntryStatus.DRAFT, code="21"),
        _entry("b2", START + timedelta(days=2), 1, status=LogbookEntryStatus.SUBMITTED, code="21"),
        _entry("b3", START + timedelta(days=3), 1, status=LogbookEntryStatus.DRAFT, code="21"),
        # 29: only reviewed entries -> first one seen chronologically
        _entry("c2", START + timedelta(days=5), 1, status=LogbookEntryStatus.APPROVED, code="29"),
        _entry("c1", START + timedelta(days=4), 1, status=LogbookEntryStatus.REJECTED, code="29"),
    ]
    summary = _summary(entries, today=START + timedelta(days=10))
    by_code = {chapter.code: chapter for chapter in summary.chapters}

    assert by_code["32"].status == "draft"
    assert by_code["32"].hours == 5.0
    assert by_code["21"].status == "submitted"
    assert by_code["29"].status == "rejected"
    assert by_code["29"].label == "29 - Hydraulic Power"
    assert summary.chapter_coverage_count == 3
    assert [chapter.code for chapter in summary.chapters] == sorted(by_code)


def test_chapter_points_at_its_latest_entry():
    entries = [
        _entry("x2", START + timedelta(days=6), 1, code="32"),
        _entry("x1", START + timedelta(days=1), 1, code="32"),
        _entry("y1", START + timedelta(days=3), 1, code="21"),
    ]
    summary = _summary(entries, today=START + timedelta(days=10))
    latest = {chapter.code: chapter.latest_entry_id for chapter in summary.chapters}

    assert latest == {"21": "y1", "32": "x2"}


def test_legacy_only_entries_are_attributed_and_unreadable_ones_skipped():
    entries = [
        _entry("l1", START, 3, code=None, skills=["ATA: 36 - Pneumatic"]),
        _entry("l2", START, 2, code=None, skills=["ATA: 99"]),
        _entry("l3", START, 1, code=None, skills=None),
    ]
    summary = _summary(entries, today=START)

    assert summary.chapter_hours == {"36": 3.0}
    assert summary.total_hours == 6.0


def test_this_week_counts_from_sunday():
    today = date(2025, 3, 12)
    entries = [
        _entry("w1", date(2025, 3, 8), 5),  # Saturday before
        _entry("w2", date(2025, 3, 9), 6),  # Sunday
        _entry("w3", date(2025, 3, 11), 7),
    ]
    summary = _summary(entries, today=today)

    assert summary.this_week_hours == 13.0


def test_recent_entries_are_the_five_newest():
    entries = [_entry(f"r{i}", START + timedelta(days=i), 1) for i in range(8)]
    summary = _summary(entries, today=START + timedelta(days=8))

    assert [entry.id for entry in summary.recent_entries] == ["r7", "r6", "r5", "r4", "r3"]


def test_curriculum_progress_and_current_training():
    items = [
        SimpleNamespace(id="c1", title="Hand Tools"),
        SimpleNamespace(id="c2", title="Torque Procedures"),
        SimpleNamespace(id="c3", title="Safety Wiring"),
    ]
    statuses = {
        "c1": curriculum_models.CurriculumProgressStatus.REVIEWED,
        "c2": curriculum_models.CurriculumProgressStatus.IN_PROGRESS,
    }
    summary = _summary(today=START, items=items, statuses=statuses)

    assert summary.curriculum_completed == 1
    assert summary.curriculum_total == 3
    assert summary.overall_curriculum_progress == 33
    assert summary.current_training.topic == "Torque Procedures"
    assert summary.current_training.curriculum_item_id == "c2"


def test_milestones_follow_current_week():
    summary = _summary(today=START + timedelta(days=13 * 7))  # week 14

    flags = {m.week: (m.completed, m.upcoming) for m in summary.milestones}
    assert flags[13] == (True, False)
    assert flags[26] == (False, True)
    assert flags[130] == (False, False)
    assert summary.milestones[0].label == "First Quarter Week 13"


def test_adding_hours_never_lowers_progress():
    today = START + timedelta(days=40)
    entries = []
    previous = _summary(entries, today=today)
    for i in range(6):
        entries.append(_entry(f"m{i}", START + timedelta(days=i), 7.25))
        current = _summary(entries, today=today)
        assert current.total_hours >= previous.total_hours
        assert current.hours_progress >= previous.hours_progress
        previous = current


# ---------------------------------------------------------------------------
# OPERATIONS
# ---------------------------------------------------------------------------


def test_get_my_progress_reads_from_store(db_session, people):
    make_entry(db_session, people["apprentice"], entry_date=START, status=LogbookEntryStatus.SUBMITTED)
    item = curriculum_models.CurriculumItem(title="Aircraft Familiarisation", order_index=1)
    db_session.add(item)
    db_session.commit()

    result = actions.get_my_progress(
        db_session, identity_for(people["apprentice_profile"]), today=START + timedelta(days=1)
    )

    assert result.success is True
    assert result.data.total_hours == 8.0
    assert result.data.chapters[0].status == "submitted"
    assert result.data.current_training.topic == "Aircraft Familiarisation"


def test_apprentice_progress_visibility(db_session, people):
    apprentice_id = people["apprentice"].id
    stranger = make_profile(db_session, email="stranger@example.com")

    assert actions.get_apprentice_progress(db_session, identity_for(people["mentor"]), apprentice_id).success
    assert actions.get_apprentice_progress(db_session, identity_for(people["manager"]), apprentice_id).success
    assert actions.get_apprentice_progress(
        db_session, identity_for(people["apprentice_profile"]), apprentice_id
    ).success

    refused = actions.get_apprentice_progress(db_session, identity_for(stranger), apprentice_id)
    assert refused.error.code == "permission_denied"

    missing = actions.get_apprentice_progress(db_session, identity_for(people["manager"]), "nope")
    assert missing.error.code == "not_found"
