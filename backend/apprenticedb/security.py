# backend/apprenticedb/security.py

"""
Security helpers for the apprentice portal.

Responsibilities:
- JWT access token creation and decoding
- FastAPI dependency resolving the caller into an explicit `Identity`

Credentials are issued by the external authentication provider; this module
only verifies the bearer token and checks the subject against `profiles`.
Roles are never read from the token; services re-read them from the
database before every permission decision.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from .apps.accounts import models as account_models
from .utils.identifiers import normalise_id

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

# In production, ALWAYS override these via environment variables.
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

try:
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )
except ValueError:
    ACCESS_TOKEN_EXPIRE_MINUTES = 60

# auto_error=False: a missing token resolves to "no identity" and the
# operation reports authentication_required itself.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The acting user, passed explicitly into every operation."""

    user_id: str
    email: Optional[str] = None


# ---------------------------------------------------------------------------
# JWT TOKENS
# ---------------------------------------------------------------------------


def create_access_token(
    *,
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT.

    The `data` dict should already include the subject, e.g.:
        {"sub": profile.id, "email": profile.email}
    """
    to_encode = data.copy()

    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_subject(token: str) -> Optional[str]:
    """Return the `sub` claim of a valid token, or None."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    return normalise_id(payload.get("sub"))


# ---------------------------------------------------------------------------
# PROFILE LOOKUP
# ---------------------------------------------------------------------------


def get_profile_by_id(
    db: Session,
    user_id: Optional[str],
) -> Optional[account_models.Profile]:
    normalised_id = normalise_id(user_id)
    if normalised_id is None:
        return None
    return (
        db.query(account_models.Profile)
        .filter(account_models.Profile.id == normalised_id)
        .first()
    )


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[Identity]:
    """
    Resolve the bearer token into an Identity.

    Returns None (never raises) when the token is missing, invalid, or names
    an unknown or deactivated profile.
    """
    if not token:
        return None

    subject = decode_subject(token)
    if subject is None:
        logger.info("Rejected bearer token", extra={"reason": "invalid_token"})
        return None

    profile = get_profile_by_id(db, subject)
    if profile is None or not profile.is_active:
        logger.info("Rejected bearer token", extra={"reason": "unknown_or_inactive", "sub": subject})
        return None

    return Identity(user_id=profile.id, email=profile.email)
