import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config
from sqlalchemy import pool

# Add the project root to sys.path so "backend.app" is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from backend.app.db.base import SQLModel
from backend.app.config import get_settings

# Alembic Config object, gives access to the values in alembic.ini
config = context.config

# Database URL: -x sqlalchemy.url="..." wins over settings
db_url = context.get_x_argument(as_dictionary=True).get("sqlalchemy.url")

if db_url:
    print(f"[Alembic env.py] Using DATABASE_URL from -x parameter: {db_url}")
else:
    db_url = get_settings().DATABASE_URL
    print(f"[Alembic env.py] Using DATABASE_URL from config: {db_url}")
config.set_main_option("sqlalchemy.url", db_url)

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Model metadata for autogenerate
target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without a DBAPI connection)."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,  # Batch mode for SQLite ALTERs
        )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
            )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
