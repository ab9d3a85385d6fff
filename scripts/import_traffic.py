"""CLI script to import traffic deltas from a CSV file into the database.

Usage:
    python scripts/import_traffic.py --csv traffic.csv [--database-url sqlite:///./traffic.db]

The CSV must have interface, timestamp, rx and tx columns. The script creates
the schema if it doesn't exist, then records every row in file order.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Ensure project root is in the Python path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.orm import sessionmaker

from trafficstore.database import _build_engine
from trafficstore.exceptions import TrafficStoreError
from trafficstore.services.bootstrap import initialize_database
from trafficstore.services.ingestion import import_traffic

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main(args=None):
    """Main entry point for the import CLI script.

    Args:
        args: Command-line arguments (defaults to sys.argv if None).

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = argparse.ArgumentParser(
        description="Import traffic deltas from CSV into the database"
    )
    parser.add_argument(
        "--csv",
        type=str,
        required=True,
        help="Path to the CSV file to import",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: uses DATABASE_URL env var or sqlite:///./traffic.db)",
    )

    parsed_args = parser.parse_args(args)

    csv_path = Path(parsed_args.csv)
    if not csv_path.exists():
        logger.error("CSV file not found: %s", csv_path)
        return 1

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

        logger.info("Starting traffic import from: %s", csv_path)
        start_time = time.time()

        count = import_traffic(csv_path=str(csv_path), session=session)

        elapsed = time.time() - start_time
        logger.info("Successfully recorded %d rows in %.2f seconds", count, elapsed)
        return 0

    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        return 1
    except ValueError as e:
        logger.error("Data validation error: %s", e)
        return 1
    except TrafficStoreError as e:
        logger.error("Storage error during import: %s", e)
        return 1
    finally:
        session.close()
        db_engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
