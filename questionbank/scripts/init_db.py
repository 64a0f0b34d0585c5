#!/usr/bin/env python3
"""
Database initialization script.

This script upgrades the database schema to the latest migration.

Usage:
    python -m questionbank.scripts.init_db [DATABASE_URL]
"""

import sys

from questionbank.common.logger import configure_logger, get_logger
from questionbank.config import settings
from questionbank.database.init_db import run_migrations

logger = get_logger("questionbank.scripts.init_db")


def main() -> int:
    """Run migrations against the given URL or the configured one."""
    configure_logger(level=settings.LOG_LEVEL, use_json=settings.LOG_JSON, log_file=settings.LOG_FILE or None)
    database_url = sys.argv[1] if len(sys.argv) > 1 else settings.DATABASE_URL

    try:
        run_migrations(database_url)
    except Exception as e:
        logger.error(f"Error initializing database: {e}", exc_info=True)
        return 1

    logger.info("Database initialized successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
