from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine

from nexus.config import DATABASE_USER, DATABASE_PASS, DATABASE_HOST, DATABASE_NAME, DATABASE_URL
from nexus.database import Base
from nexus.database.handler import Database
from nexus.elections.model import models  # noqa: F401
from nexus.nexus_auth.model import models as auth_models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)
target_metadata = Base.metadata


def get_url():
    url = Database.build_url(DATABASE_USER, DATABASE_PASS, DATABASE_HOST, DATABASE_NAME, DATABASE_URL)
    return Database.sync_url(url)


def run_migrations_offline():
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_engine(get_url())
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
