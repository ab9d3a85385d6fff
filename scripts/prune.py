"""CLI script that applies the retention policy to the traffic database.

Usage:
    python scripts/prune.py [--database-url sqlite:///./traffic.db] [--vacuum]

Meant to be run from cron or a systemd timer. Deletes five-minute buckets
older than 48 hours, hourly older than 7 days, daily older than 30 days,
monthly older than 12 months and yearly older than 10 years.
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is in the Python path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.orm import sessionmaker

from trafficstore.database import _build_engine
from trafficstore.exceptions import TrafficStoreError
from trafficstore.services.bootstrap import initialize_database, vacuum_database
from trafficstore.services.traffic import prune_old_entries

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main(args=None):
    """Main entry point for the prune CLI script.

    Args:
        args: Command-line arguments (defaults to sys.argv if None).

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = argparse.ArgumentParser(
        description="Delete traffic buckets older than their retention horizon"
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: uses DATABASE_URL env var or sqlite:///./traffic.db)",
    )
    parser.add_argument(
        "--vacuum",
        action="store_true",
        help="Reclaim freed space after pruning (SQLite only)",
    )

    parsed_args = parser.parse_args(args)

    if parsed_args.database_url:
        database_url = parsed_args.database_url
    else:
        from trafficstore.config import settings
        database_url = settings.DATABASE_URL

    db_engine = _build_engine(database_url)
    Session = sessionmaker(bind=db_engine)
    session = Session()

    try:
        initialize_database(session)
        deleted = prune_old_entries(session)
        logger.info("Deleted %d buckets in total", sum(deleted.values()))
        if parsed_args.vacuum:
            vacuum_database(session)
        return 0

    except TrafficStoreError as e:
        logger.error("Pruning failed: %s", e)
        return 1
    finally:
        session.close()
        db_engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
