"""Tests for the CLI retention script (scripts/prune.py)."""

from unittest.mock import patch

from sqlalchemy.orm import sessionmaker

from scripts.prune import main
from trafficstore.database import _build_engine
from trafficstore.exceptions import PersistenceError
from trafficstore.models import Year
from trafficstore.services.bootstrap import initialize_database
from trafficstore.services.registry import get_interface
from trafficstore.services.traffic import record_traffic


def _seed(db_url):
    """Create a database with one very old sample for eth0."""
    engine = _build_engine(db_url)
    session = sessionmaker(bind=engine)()
    try:
        initialize_database(session)
        record_traffic(session, "eth0", 100, 50, 0)
    finally:
        session.close()
        engine.dispose()


class TestPruneScript:
    """Tests for the main() entry point of the prune script."""

    def test_prunes_old_buckets(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'test.db'}"
        _seed(db_url)

        assert main(["--database-url", db_url]) == 0

        engine = _build_engine(db_url)
        session = sessionmaker(bind=engine)()
        try:
            assert session.query(Year).count() == 0
            assert get_interface(session, "eth0").rxtotal == 100
        finally:
            session.close()
            engine.dispose()

    def test_vacuum_flag(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'test.db'}"
        _seed(db_url)
        with patch("scripts.prune.vacuum_database") as mock_vacuum:
            assert main(["--database-url", db_url, "--vacuum"]) == 0
        mock_vacuum.assert_called_once()

    def test_without_vacuum_flag(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'test.db'}"
        with patch("scripts.prune.vacuum_database") as mock_vacuum:
            assert main(["--database-url", db_url]) == 0
        mock_vacuum.assert_not_called()

    def test_default_database_url_from_settings(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "trafficstore.config.settings.DATABASE_URL", f"sqlite:///{tmp_path / 'default.db'}"
        )
        assert main([]) == 0
        assert (tmp_path / "default.db").exists()

    def test_storage_error_returns_1(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'test.db'}"
        with patch(
            "scripts.prune.prune_old_entries",
            side_effect=PersistenceError("database is locked"),
        ):
            assert main(["--database-url", db_url]) == 1

    def test_vacuum_error_returns_1(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'test.db'}"
        with patch(
            "scripts.prune.vacuum_database",
            side_effect=PersistenceError("VACUUM failed: database is locked"),
        ):
            assert main(["--database-url", db_url, "--vacuum"]) == 1
