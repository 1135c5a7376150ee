from __future__ import annotations
import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from extensions import db
import models  # noqa: F401  таблицы в metadata

REVISION = Path(__file__).resolve().parents[1] / "migrations" / "versions" / "0001_classboard_initial.py"

def _load_revision():
    spec = importlib.util.spec_from_file_location("rev_0001_classboard", REVISION)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod

def test_revision_matches_models():
    rev = _load_revision()
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        ctx = MigrationContext.configure(conn)
        with Operations.context(ctx):
            rev.upgrade()
        insp = inspect(conn)
        assert set(insp.get_table_names()) == set(db.metadata.tables)
        for name, table in db.metadata.tables.items():
            cols = {c["name"] for c in insp.get_columns(name)}
            assert cols == set(table.columns.keys()), name

        with Operations.context(ctx):
            rev.downgrade()
        assert inspect(conn).get_table_names() == []
