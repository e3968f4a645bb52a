# backend/apprenticedb/apps/submissions/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.enums import enum_values
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WeeklySubmissionStatus(str, enum.Enum):
    SUBMITTED = "submitted"


class WeeklySubmission(Base):
    """
    Weekly reflection; one per (apprentice, week_number).

    Re-submitting the same week overwrites the text and replaces the whole
    attachment set.
    """

    __tablename__ = "weekly_submissions"
    __table_args__ = (
        UniqueConstraint("apprentice_id", "week_number", name="uq_weekly_submissions_apprentice_week"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    apprentice_id = Column(
        String(36),
        ForeignKey("apprentices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    week_number = Column(Integer, nullable=False)
    curriculum_item_id = Column(
        String(36),
        ForeignKey("curriculum_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    reflection_text = Column(Text, nullable=False, default="")
    status = Column(
        Enum(WeeklySubmissionStatus, name="weekly_submission_status_enum", values_callable=enum_values),
        nullable=False,
        default=WeeklySubmissionStatus.SUBMITTED,
    )
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    files = relationship(
        "WeeklySubmissionFile",
        back_populates="submission",
        order_by="WeeklySubmissionFile.file_name",
    )


class WeeklySubmissionFile(Base):
    """Metadata of an uploaded attachment; the bytes live in blob storage."""

    __tablename__ = "weekly_submission_files"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    submission_id = Column(
        String(36),
        ForeignKey("weekly_submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_url = Column(String(2048), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    file_type = Column(String(128), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    submission = relationship("WeeklySubmission", back_populates="files")
