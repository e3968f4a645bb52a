# backend/apprenticedb/apps/accounts/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, Index, String

from ...database import Base
from ...utils.enums import enum_values
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileRole(str, enum.Enum):
    """Portal roles.

    Roles are always read from the `profiles` row, never from token claims.
    """

    APPRENTICE = "apprentice"
    MENTOR = "mentor"
    MANAGER = "manager"
    GOD = "god"  # platform owner


# Roles allowed to take apprentices on and look at any apprentice's progress.
SUPERVISOR_ROLES = frozenset({ProfileRole.MENTOR, ProfileRole.MANAGER, ProfileRole.GOD})
OVERSIGHT_ROLES = frozenset({ProfileRole.MANAGER, ProfileRole.GOD})


class Profile(Base):
    """
    Person using the portal (apprentice, mentor or manager).

    `id` is the identity subject issued by the authentication provider; the
    portal never creates credentials itself.
    """

    __tablename__ = "profiles"
    __table_args__ = (
        Index("idx_profiles_role_active", "role", "is_active"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)

    role = Column(
        Enum(ProfileRole, name="profile_role_enum", values_callable=enum_values),
        nullable=False,
        default=ProfileRole.APPRENTICE,
        index=True,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<Profile id={self.id} email={self.email} role={self.role}>"
