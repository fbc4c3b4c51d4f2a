import importlib.util
import io
from pathlib import Path

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

VERSIONS = Path(__file__).resolve().parent.parent / "alembic" / "versions"


def load_revision(name):
    path = next(VERSIONS.glob(f"*_{name}.py"))
    spec = importlib.util.spec_from_file_location(path.stem, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_mirror_slots_migration_round_trip(tmp_path):
    revision = load_revision("create_mirror_slots_table")
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.upgrade()
        columns = {c["name"] for c in sa.inspect(conn).get_columns("mirror_slots")}
        assert columns == {"key", "value", "updated_at"}

        with Operations.context(MigrationContext.configure(conn)):
            revision.downgrade()
        assert not sa.inspect(conn).has_table("mirror_slots")


def test_mirror_slots_timestamp_is_timezone_aware_on_postgres():
    revision = load_revision("create_mirror_slots_table")
    buffer = io.StringIO()
    context = MigrationContext.configure(dialect_name="postgresql", opts={"as_sql": True, "output_buffer": buffer})

    with Operations.context(context):
        revision.upgrade()

    assert "updated_at TIMESTAMP WITH TIME ZONE NOT NULL" in buffer.getvalue()
