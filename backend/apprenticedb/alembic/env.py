# backend/apprenticedb/alembic/env.py

from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context

# backend/ on sys.path so `apprenticedb` imports when alembic runs from
# backend/apprenticedb/.
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from apprenticedb.database import Base, WRITE_DB_URL, write_engine  # noqa: E402

# Every table must be registered on Base.metadata for autogenerate.
from apprenticedb.apps.accounts import models as accounts_models  # noqa: F401, E402
from apprenticedb.apps.apprentices import models as apprentices_models  # noqa: F401, E402
from apprenticedb.apps.curriculum import models as curriculum_models  # noqa: F401, E402
from apprenticedb.apps.logbook import models as logbook_models  # noqa: F401, E402
from apprenticedb.apps.submissions import models as submissions_models  # noqa: F401, E402
from apprenticedb.apps.audit import models as audit_models  # noqa: F401, E402

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Render SQL without a connection, against the URL the app would use."""
    context.configure(
        url=WRITE_DB_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Migrate through the application's write engine."""
    with write_engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
