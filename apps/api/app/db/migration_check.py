from __future__ import annotations

from pathlib import Path

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Engine

from app.config import settings
from app.db.base import Base

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


class SchemaOutOfDateError(RuntimeError):
    def __init__(self, current: str | None, head: str) -> None:
        self.current = current
        self.head = head
        super().__init__(
            f"Database schema at revision {current or 'none'}, expected {head}. "
            "Run: alembic upgrade head"
        )


def head_revision() -> str:
    script = ScriptDirectory.from_config(Config(str(ALEMBIC_INI)))
    return script.get_current_head()


def database_revision(engine: Engine) -> str | None:
    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()


def verify_schema_revision(engine: Engine) -> None:
    current = database_revision(engine)
    head = head_revision()
    if current != head:
        raise SchemaOutOfDateError(current, head)


def prepare_schema(engine: Engine) -> None:
    """Verify migrations when required, otherwise create missing tables if allowed."""
    import app.models  # noqa: F401

    if settings.require_migrations:
        verify_schema_revision(engine)
    elif settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
