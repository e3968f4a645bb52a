# backend/apprenticedb/apps/apprentices/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.enums import enum_values
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprenticeStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class Apprentice(Base):
    """
    Enrolment of one person in the apprenticeship programme.

    - user_id   = the apprentice's profile
    - mentor_id = profile of the mentor who reviews the logbook (nullable)

    Rows are never deleted; leaving the programme is a status change.
    Approval rights follow `mentor_id` as it is at review time.
    """

    __tablename__ = "apprentices"
    __table_args__ = (
        Index("idx_apprentices_mentor_status", "mentor_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    user_id = Column(
        String(36),
        ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
        index=True,
    )
    mentor_id = Column(
        String(36),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)

    status = Column(
        Enum(ApprenticeStatus, name="apprentice_status_enum", values_callable=enum_values),
        nullable=False,
        default=ApprenticeStatus.ACTIVE,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    profile = relationship("Profile", foreign_keys=[user_id], lazy="joined")
    mentor = relationship("Profile", foreign_keys=[mentor_id])

    def __repr__(self) -> str:
        return f"<Apprentice id={self.id} user_id={self.user_id} mentor_id={self.mentor_id}>"
