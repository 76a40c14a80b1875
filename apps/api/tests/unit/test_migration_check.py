from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text

from app.config import settings
from app.db.migration_check import (
    SchemaOutOfDateError,
    database_revision,
    head_revision,
    prepare_schema,
    verify_schema_revision,
)


@pytest.fixture
def file_engine(tmp_path: Path):
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'schema.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def schema_flags():
    saved = (settings.auto_create_schema, settings.require_migrations)
    yield settings
    settings.auto_create_schema, settings.require_migrations = saved


def stamp(engine, revision: str) -> None:
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE alembic_version (version_num VARCHAR(32) NOT NULL)"))
        connection.execute(
            text("INSERT INTO alembic_version (version_num) VALUES (:rev)"), {"rev": revision}
        )


def test_orders_migration_is_head():
    assert head_revision() == "20261017_0001"


def test_unmigrated_database_has_no_revision(file_engine):
    assert database_revision(file_engine) is None

    with pytest.raises(SchemaOutOfDateError) as excinfo:
        verify_schema_revision(file_engine)

    assert excinfo.value.current is None
    assert excinfo.value.head == "20261017_0001"
    assert "alembic upgrade head" in str(excinfo.value)


def test_stale_revision_is_reported(file_engine):
    stamp(file_engine, "19990101_0000")

    with pytest.raises(SchemaOutOfDateError, match="19990101_0000"):
        verify_schema_revision(file_engine)


def test_database_at_head_passes(file_engine):
    stamp(file_engine, head_revision())

    assert database_revision(file_engine) == head_revision()
    verify_schema_revision(file_engine)


def test_prepare_schema_creates_orders_table(file_engine, schema_flags):
    schema_flags.auto_create_schema = True
    schema_flags.require_migrations = False

    prepare_schema(file_engine)

    assert inspect(file_engine).has_table("orders")


def test_prepare_schema_leaves_database_alone_when_creation_disabled(file_engine, schema_flags):
    schema_flags.auto_create_schema = False
    schema_flags.require_migrations = False

    prepare_schema(file_engine)

    assert not inspect(file_engine).has_table("orders")


def test_prepare_schema_enforces_migrations(file_engine, schema_flags):
    schema_flags.require_migrations = True

    with pytest.raises(SchemaOutOfDateError):
        prepare_schema(file_engine)
    assert not inspect(file_engine).has_table("orders")

    stamp(file_engine, head_revision())
    prepare_schema(file_engine)
