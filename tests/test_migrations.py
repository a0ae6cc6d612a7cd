"""The schema migration creates the same tables the models declare."""

import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from restopos.db.base import Base

MIGRATION = Path(__file__).resolve().parent.parent / "alembic" / "versions" / "0001_restopos_schema.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("restopos_schema_0001", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_upgrade_matches_model_metadata(tmp_path: Path) -> None:
    migration = _load_migration()
    engine = create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")

    with engine.begin() as connection:
        context = MigrationContext.configure(connection)
        with Operations.context(context):
            migration.upgrade()

    inspector = inspect(engine)
    assert set(inspector.get_table_names()) == set(Base.metadata.tables)
    for table_name, table in Base.metadata.tables.items():
        migrated_columns = {column["name"] for column in inspector.get_columns(table_name)}
        assert migrated_columns == set(table.columns.keys()), table_name


def test_downgrade_drops_everything(tmp_path: Path) -> None:
    migration = _load_migration()
    engine = create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")

    with engine.begin() as connection:
        context = MigrationContext.configure(connection)
        with Operations.context(context):
            migration.upgrade()
            migration.downgrade()

    assert inspect(engine).get_table_names() == []
