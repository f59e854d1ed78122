"""Tests for database engine options and session dependency."""
import pytest
from unittest.mock import Mock, patch

from app.core.config import settings
from app.db import session as db_session_module
from app.db.session import engine_options, get_db


@pytest.mark.unit
class TestEngineOptions:

    def test_sqlite_uses_busy_timeout(self):
        options = engine_options("sqlite:///./rollcall.db")

        assert options["connect_args"] == {
            "check_same_thread": False,
            "timeout": settings.DB_TIMEOUT_SECONDS,
        }
        assert "pool_size" not in options

    def test_postgres_uses_pool_and_statement_timeout(self):
        options = engine_options("postgresql://u:p@db:5432/rollcall")

        assert options["pool_size"] == settings.DB_POOL_SIZE
        assert options["max_overflow"] == settings.DB_MAX_OVERFLOW
        assert options["pool_timeout"] == settings.DB_POOL_TIMEOUT
        assert options["connect_args"]["options"] == (
            f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
        )


@pytest.mark.unit
class TestGetDb:

    def test_session_closed_after_request(self):
        fake_session = Mock()
        with patch.object(db_session_module, "SessionLocal", return_value=fake_session):
            dependency = get_db()
            assert next(dependency) is fake_session
            with pytest.raises(StopIteration):
                next(dependency)

        fake_session.close.assert_called_once()

    def test_database_package_exports(self):
        import app.db

        assert sorted(app.db.__all__) == ["Base", "SessionLocal", "engine", "get_db", "init_db"]
