"""
Alembic environment for the realtor schema.

The target database is always DATABASE_URL, read through realtor.config so
migrations and the app agree on `postgres://` rewriting and the local sqlite
fallback. sqlite has no ALTER COLUMN, so its migrations run in batch mode.
"""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import make_url

# Run from backend/ without installing the package.
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from realtor.config import database_url  # noqa: E402
from realtor.models import Base  # noqa: E402

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        **kwargs,
    )


def main() -> None:
    url = database_url()
    if context.is_offline_mode():
        # Emit SQL to stdout instead of touching a database.
        _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(url, connection=connection)
        with context.begin_transaction():
            context.run_migrations()


main()
