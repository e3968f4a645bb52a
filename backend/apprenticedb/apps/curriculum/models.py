# backend/apprenticedb/apps/curriculum/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)

from ...database import Base
from ...utils.enums import enum_values
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CurriculumProgressStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REVIEWED = "reviewed"


# Statuses that count an item as done for curriculum completion.
DONE_STATUSES = frozenset({CurriculumProgressStatus.COMPLETED, CurriculumProgressStatus.REVIEWED})


class CurriculumItem(Base):
    """
    Programme-wide catalogue entry (not apprentice scoped).

    `order_index` drives the order in which the dashboard picks the
    "current training" topic.
    """

    __tablename__ = "curriculum_items"
    __table_args__ = (
        Index("idx_curriculum_items_active_order", "is_active", "order_index"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(128), nullable=True, index=True)
    difficulty = Column(String(32), nullable=True)
    estimated_hours = Column(Numeric(6, 2), nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<CurriculumItem id={self.id} title={self.title!r}>"


class ApprenticeProgress(Base):
    """
    Join row between an apprentice and a curriculum item.

    Only touched items have a row; a missing row means NOT_STARTED.
    """

    __tablename__ = "apprentice_progress"
    __table_args__ = (
        UniqueConstraint("apprentice_id", "curriculum_item_id", name="uq_apprentice_progress_item"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    apprentice_id = Column(
        String(36),
        ForeignKey("apprentices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    curriculum_item_id = Column(
        String(36),
        ForeignKey("curriculum_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(
        Enum(CurriculumProgressStatus, name="curriculum_progress_status_enum", values_callable=enum_values),
        nullable=False,
        default=CurriculumProgressStatus.NOT_STARTED,
    )
    hours_spent = Column(Numeric(7, 2), nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
