import pytest
from sqlalchemy import create_engine

from app.db import bootstrap
from app.db.base import Base


def _raise_error(message: str):
    raise RuntimeError(message)


def test_schema_bootstrap_raises_on_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: _raise_error("database offline"))

    with pytest.raises(RuntimeError, match="Schema bootstrap failed"):
        bootstrap.ensure_schema()


def test_missing_schema_items_reports_tables_and_columns():
    engine = create_engine("sqlite+pysqlite://")
    with engine.connect() as connection:
        missing_tables, missing_columns = bootstrap.missing_schema_items(connection)
    assert sorted(missing_tables) == sorted(bootstrap.REQUIRED_COLUMNS)
    assert missing_columns == {}

    Base.metadata.create_all(bind=engine)
    with engine.connect() as connection:
        assert bootstrap.missing_schema_items(connection) == ([], {})
    engine.dispose()
