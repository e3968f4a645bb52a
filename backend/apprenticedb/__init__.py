# backend/apprenticedb/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- The package exposes a clear surface.

The actual model classes are kept in apprenticedb/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models          # profiles / roles
from .apps.apprentices import models as apprentices_models    # apprenticeships + mentor link
from .apps.curriculum import models as curriculum_models      # curriculum items + per-apprentice status
from .apps.logbook import models as logbook_models            # daily logbook entries
from .apps.submissions import models as submissions_models    # weekly reflections + attachments
from .apps.audit import models as audit_models                # audit trail

__all__ = [
    "accounts_models",
    "apprentices_models",
    "curriculum_models",
    "logbook_models",
    "submissions_models",
    "audit_models",
]
