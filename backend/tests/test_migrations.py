import importlib.util
from pathlib import Path

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from lanshare.models import Base

VERSIONS = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def load_migration(name: str):
    spec = importlib.util.spec_from_file_location(f"migration_{name}", VERSIONS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_initial_migration_matches_models(tmp_path):
    migration = load_migration("001_initial")
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()

        inspector = sa.inspect(conn)
        assert set(inspector.get_table_names()) == set(Base.metadata.tables)
        for table in Base.metadata.tables.values():
            columns = {c["name"] for c in inspector.get_columns(table.name)}
            assert columns == set(table.columns.keys())

        with Operations.context(MigrationContext.configure(conn)):
            migration.downgrade()

        assert sa.inspect(conn).get_table_names() == []
    engine.dispose()
