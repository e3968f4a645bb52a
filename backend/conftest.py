from __future__ import annotations

import os
import sys
from datetime import date, time
from pathlib import Path

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"

from apprenticedb.database import Base  # noqa: E402
from apprenticedb.apps.accounts import models as account_models  # noqa: E402
from apprenticedb.apps.apprentices import models as apprentice_models  # noqa: E402
from apprenticedb.apps.audit import models as audit_models  # noqa: E402
from apprenticedb.apps.curriculum import models as curriculum_models  # noqa: E402
from apprenticedb.apps.logbook import models as logbook_models  # noqa: E402
from apprenticedb.apps.logbook.hours import compute_hours_worked  # noqa: E402
from apprenticedb.apps.submissions import models as submission_models  # noqa: E402
from apprenticedb.security import Identity  # noqa: E402


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite does not emit BEGIN itself, which breaks SAVEPOINT; let
    # SQLAlchemy control the transaction instead.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(
        bind=engine,
        tables=[
            account_models.Profile.__table__,
            apprentice_models.Apprentice.__table__,
            curriculum_models.CurriculumItem.__table__,
            curriculum_models.ApprenticeProgress.__table__,
            logbook_models.LogbookEntry.__table__,
            submission_models.WeeklySubmission.__table__,
            submission_models.WeeklySubmissionFile.__table__,
            audit_models.AuditEvent.__table__,
        ],
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# ---------------------------------------------------------------------------
# FACTORIES
# ---------------------------------------------------------------------------


def make_profile(db, *, email, role=account_models.ProfileRole.APPRENTICE, full_name=None, is_active=True):
    profile = account_models.Profile(email=email, full_name=full_name, role=role, is_active=is_active)
    db.add(profile)
    db.commit()
    return profile


def make_apprentice(db, profile, *, mentor=None, start_date=date(2025, 1, 6), status=None):
    apprentice = apprentice_models.Apprentice(
        user_id=profile.id,
        mentor_id=mentor.id if mentor is not None else None,
        start_date=start_date,
        status=status or apprentice_models.ApprenticeStatus.ACTIVE,
    )
    db.add(apprentice)
    db.commit()
    return apprentice


def make_entry(
    db,
    apprentice,
    *,
    entry_date=date(2025, 2, 3),
    start=time(8, 0),
    end=time(16, 0),
    ata_chapter_code="32",
    status=logbook_models.LogbookEntryStatus.DRAFT,
    description="Replaced main landing gear brake assembly",
):
    entry = logbook_models.LogbookEntry(
        apprentice_id=apprentice.id,
        entry_date=entry_date,
        start_time=start,
        end_time=end,
        hours_worked=compute_hours_worked(start, end),
        description=description,
        ata_chapter_code=ata_chapter_code,
        skills_practiced=None,
        status=status,
    )
    db.add(entry)
    db.commit()
    return entry


def identity_for(profile) -> Identity:
    return Identity(user_id=profile.id, email=profile.email)


@pytest.fixture()
def people(db_session):
    """A mentor with one apprentice, plus a second mentor and a manager."""
    mentor = make_profile(db_session, email="mentor@example.com", role=account_models.ProfileRole.MENTOR, full_name="Mia Mentor")
    other_mentor = make_profile(
        db_session, email="other@example.com", role=account_models.ProfileRole.MENTOR, full_name="Otto Other"
    )
    manager = make_profile(db_session, email="boss@example.com", role=account_models.ProfileRole.MANAGER)
    apprentice_profile = make_profile(db_session, email="app@example.com", full_name="Alex Apprentice")
    apprentice = make_apprentice(db_session, apprentice_profile, mentor=mentor)
    return {
        "mentor": mentor,
        "other_mentor": other_mentor,
        "manager": manager,
        "apprentice_profile": apprentice_profile,
        "apprentice": apprentice,
    }


@pytest.fixture()
def entry_payload():
    def _payload(**overrides):
        data = {
            "entry_date": date(2025, 2, 3),
            "start_time": time(8, 0),
            "end_time": time(16, 30),
            "description": "Inspected and serviced nose landing gear strut",
            "ata_chapter": "32",
            "certified": False,
        }
        data.update(overrides)
        return data

    return _payload
