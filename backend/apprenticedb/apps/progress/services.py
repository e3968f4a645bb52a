from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from apprenticedb.apps.apprentices import models as apprentice_models
from apprenticedb.apps.apprentices import services as apprentice_services
from apprenticedb.apps.curriculum import models as curriculum_models
from apprenticedb.apps.curriculum import services as curriculum_services
from apprenticedb.apps.logbook import ata
from apprenticedb.apps.logbook import models as logbook_models
from apprenticedb.apps.logbook import services as logbook_services
from apprenticedb.apps.logbook.schemas import LogbookEntryRead
from apprenticedb.security import Identity

from . import schemas

# ---------------------------------------------------------------------------
# PROGRAMME CONSTANTS
# ---------------------------------------------------------------------------

PROGRAM_WEEKS = 130
WEEKLY_TARGET_HOURS = 40
TARGET_HOURS = PROGRAM_WEEKS * WEEKLY_TARGET_HOURS  # 5200
PACE_TOLERANCE_POINTS = 10  # percentage points either side of expected

PACE_BEHIND = "behind_pace"
PACE_ON_TRACK = "on_track"
PACE_AHEAD = "ahead"

RECENT_ENTRY_LIMIT = 5
DEFAULT_TRAINING_TOPIC = "Safety, Ground Operations & Servicing"

MILESTONES: Tuple[Tuple[int, str], ...] = (
    (13, "First Quarter"),
    (26, "6 Months"),
    (52, "1 Year"),
    (78, "18 Months"),
    (104, "2 Years"),
    (130, "Completion"),
)

_STATUS_NONE = "none"
_SUBMITTED = logbook_models.LogbookEntryStatus.SUBMITTED.value
_DRAFT = logbook_models.LogbookEntryStatus.DRAFT.value
_APPROVED = logbook_models.LogbookEntryStatus.APPROVED.value


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


# ---------------------------------------------------------------------------
# PURE HELPERS
# ---------------------------------------------------------------------------


def round_percent(numerator, denominator) -> int:
    """numerator / denominator as a whole percent, halves rounded up; 0 for an empty denominator."""
    if not denominator:
        return 0
    value = Decimal(str(numerator)) * 100 / Decimal(str(denominator))
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _hours(entry) -> Decimal:
    value = getattr(entry, "hours_worked", None)
    return Decimal(str(value)) if value is not None else Decimal("0")


def _as_float(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _status_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def current_week(start_date: date, today: date) -> int:
    """
    Programme week, 1-based. Never below 1, even before the start date.
    """
    days_since_start = (today - start_date).days
    return max(1, days_since_start // 7 + 1)


def due_date_for(start_date: date, week: int) -> date:
    """Last day of the given programme week."""
    return start_date + timedelta(days=week * 7 - 1)


def start_of_calendar_week(today: date) -> date:
    """The Sunday on or before `today`."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def classify_pace(total_hours, expected_hours) -> str:
    actual_pct = float(total_hours) / TARGET_HOURS * 100
    expected_pct = float(expected_hours) / TARGET_HOURS * 100
    if actual_pct < expected_pct - PACE_TOLERANCE_POINTS:
        return PACE_BEHIND
    if actual_pct > expected_pct + PACE_TOLERANCE_POINTS:
        return PACE_AHEAD
    return PACE_ON_TRACK


def chapter_breakdown(entries: Iterable) -> Dict[str, Dict[str, object]]:
    """
    Hours and review status per ATA chapter.

    Status precedence: any submitted entry makes the chapter "submitted";
    otherwise any draft makes it "draft"; otherwise the chapter keeps the
    status of the first entry seen. Entries without a readable chapter are
    skipped.

    Entries are expected in chronological order; latest_entry_id is the
    last one seen for each chapter.
    """
    data: Dict[str, Dict[str, object]] = {}
    for entry in entries:
        code = ata.entry_chapter_code(entry)
        if not code:
            continue
        current = data.setdefault(code, {"hours": Decimal("0"), "status": _STATUS_NONE})
        current["hours"] = current["hours"] + _hours(entry)
        current["latest_entry_id"] = getattr(entry, "id", None)

        status = _status_value(entry.status)
        if _SUBMITTED in (status, current["status"]):
            current["status"] = _SUBMITTED
        elif status == _DRAFT:
            current["status"] = _DRAFT
        elif current["status"] == _STATUS_NONE:
            current["status"] = status
    return data


def milestones_for(week: int) -> List[schemas.Milestone]:
    upcoming_week = next((m_week for m_week, _ in MILESTONES if m_week > week), None)
    return [
        schemas.Milestone(
            week=m_week,
            label=f"{label} Week {m_week}",
            completed=week >= m_week,
            upcoming=m_week == upcoming_week,
        )
        for m_week, label in MILESTONES
    ]


def _chronological(entries: Iterable) -> List:
    # ids are time-ordered, so they break ties within one entry_date
    return sorted(entries, key=lambda e: (e.entry_date, getattr(e, "id", None) or ""))


# ---------------------------------------------------------------------------
# AGGREGATOR
# ---------------------------------------------------------------------------


def compute_progress(
    apprentice,
    entries: Sequence,
    curriculum_items: Sequence[curriculum_models.CurriculumItem],
    curriculum_statuses: Dict[str, curriculum_models.CurriculumProgressStatus],
    *,
    today: date,
) -> schemas.ProgressSummary:
    """
    Pure computation of every derived metric for one apprentice.

    `entries` is the full set regardless of status; unapproved hours count
    toward progress and only the approved_* fields separate confirmed hours.
    """
    ordered = _chronological(entries)

    total = sum((_hours(e) for e in ordered), Decimal("0"))
    approved = [e for e in ordered if _status_value(e.status) == _APPROVED]
    approved_total = sum((_hours(e) for e in approved), Decimal("0"))

    week_start = start_of_calendar_week(today)
    this_week = sum((_hours(e) for e in ordered if e.entry_date >= week_start), Decimal("0"))

    week = current_week(apprentice.start_date, today)
    expected = week * WEEKLY_TARGET_HOURS
    due = due_date_for(apprentice.start_date, week)

    breakdown = chapter_breakdown(ordered)
    chapters = [
        schemas.ChapterSummary(
            code=code,
            label=ata.label_for(code),
            hours=_as_float(values["hours"]),
            status=values["status"],
            latest_entry_id=values["latest_entry_id"],
        )
        for code, values in sorted(breakdown.items())
    ]

    completed_items = 0
    current_item: Optional[curriculum_models.CurriculumItem] = None
    for item in curriculum_items:
        status = curriculum_services.status_for(item, curriculum_statuses)
        if status in curriculum_models.DONE_STATUSES:
            completed_items += 1
        elif current_item is None:
            current_item = item

    recent = list(reversed(ordered))[:RECENT_ENTRY_LIMIT]

    return schemas.ProgressSummary(
        apprentice_id=apprentice.id,
        start_date=apprentice.start_date,
        total_hours=_as_float(total),
        approved_hours=_as_float(approved_total),
        approved_count=len(approved),
        this_week_hours=_as_float(this_week),
        target_hours=TARGET_HOURS,
        hours_progress=round_percent(total, TARGET_HOURS),
        current_week=week,
        total_weeks=PROGRAM_WEEKS,
        program_progress=round_percent(week, PROGRAM_WEEKS),
        expected_hours=expected,
        hours_difference=_as_float(total - expected),
        pace_status=classify_pace(total, expected),
        due_date=due,
        chapter_hours={chapter.code: chapter.hours for chapter in chapters},
        chapters=chapters,
        chapter_coverage_count=len(chapters),
        chapter_total=ata.TOTAL_ATA_CHAPTERS,
        curriculum_completed=completed_items,
        curriculum_total=len(curriculum_items),
        overall_curriculum_progress=round_percent(completed_items, len(curriculum_items)),
        current_training=schemas.CurrentTraining(
            topic=current_item.title if current_item is not None else DEFAULT_TRAINING_TOPIC,
            curriculum_item_id=current_item.id if current_item is not None else None,
            due_date=due,
        ),
        milestones=milestones_for(week),
        recent_entries=[LogbookEntryRead.from_entry(e) for e in recent],
    )


# ---------------------------------------------------------------------------
# LOADERS
# ---------------------------------------------------------------------------


def build_summaries(
    db: Session,
    apprentices: Sequence[apprentice_models.Apprentice],
    *,
    today: Optional[date] = None,
) -> Tuple[Dict[str, schemas.ProgressSummary], Dict[str, List[logbook_models.LogbookEntry]]]:
    """
    Progress for many apprentices with one query per table.

    Returns the summaries and the grouped entries (callers derive counts
    such as pending reviews from the same rows).
    """
    today = today or today_utc()
    ids = [a.id for a in apprentices]

    grouped: Dict[str, List[logbook_models.LogbookEntry]] = defaultdict(list)
    for entry in logbook_services.entries_for_apprentices(db, ids):
        grouped[entry.apprentice_id].append(entry)

    items = curriculum_services.list_active_items(db)
    statuses = curriculum_services.progress_index(db, ids)

    summaries = {
        a.id: compute_progress(a, grouped.get(a.id, []), items, statuses.get(a.id, {}), today=today)
        for a in apprentices
    }
    return summaries, dict(grouped)


def get_apprentice_progress(
    db: Session,
    *,
    apprentice_id: str,
    identity: Optional[Identity],
    today: Optional[date] = None,
) -> schemas.ProgressSummary:
    apprentice = apprentice_services.get_apprentice(db, apprentice_id)
    apprentice_services.ensure_can_view(db, apprentice, identity)
    summaries, _ = build_summaries(db, [apprentice], today=today)
    return summaries[apprentice.id]


def get_my_progress(
    db: Session,
    *,
    identity: Optional[Identity],
    today: Optional[date] = None,
) -> schemas.ProgressSummary:
    profile = apprentice_services.require_profile(db, identity)
    apprentice = apprentice_services.get_apprentice_for_user(db, profile.id)
    summaries, _ = build_summaries(db, [apprentice], today=today)
    return summaries[apprentice.id]
