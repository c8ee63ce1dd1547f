import pytest

from rds_postgres.connection import ensure_tables, reset_engine


@pytest.fixture
def sqlite_db(tmp_path, monkeypatch):
    """Point DATABASE_URL at a fresh SQLite file with all tables created."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    reset_engine()
    ensure_tables()
    yield
    reset_engine()
