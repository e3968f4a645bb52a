# backend/apprenticedb/apps/accounts/__init__.py
"""
Accounts app

Responsible for:
- User profiles mirrored from the external authentication provider
- Portal roles (apprentice, mentor, manager, god)

Other apps should depend on these models for anything related to
"who is allowed to do what".
"""

from . import models  # noqa: F401

__all__ = ["models"]
