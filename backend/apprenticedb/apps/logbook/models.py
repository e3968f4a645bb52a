# backend/apprenticedb/apps/logbook/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.enums import enum_values
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LogbookEntryStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class LogbookEntry(Base):
    """
    One dated record of OJT work.

    - hours_worked is derived from start_time/end_time on every save
    - ata_chapter_code is the chapter reference; skills_practiced keeps the
      legacy ["ATA: <label>"] encoding in step for older readers
    - the apprentice edits only while DRAFT; the assigned mentor moves
      SUBMITTED to APPROVED or REJECTED
    """

    __tablename__ = "logbook_entries"
    __table_args__ = (
        Index("idx_logbook_entries_apprentice_date", "apprentice_id", "entry_date"),
        Index("idx_logbook_entries_apprentice_status", "apprentice_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    apprentice_id = Column(
        String(36),
        ForeignKey("apprentices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    entry_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    hours_worked = Column(Numeric(5, 2), nullable=False, default=0)

    description = Column(Text, nullable=False)
    ata_chapter_code = Column(String(8), nullable=True, index=True)
    skills_practiced = Column(JSON, nullable=True)

    status = Column(
        Enum(LogbookEntryStatus, name="logbook_entry_status_enum", values_callable=enum_values),
        nullable=False,
        default=LogbookEntryStatus.DRAFT,
        index=True,
    )

    approved_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    apprentice = relationship("Apprentice")

    def __repr__(self) -> str:
        return f"<LogbookEntry id={self.id} apprentice_id={self.apprentice_id} status={self.status}>"
