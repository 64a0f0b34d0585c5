#!/usr/bin/env python3
"""
Server runner script.

This script starts the FastAPI server with the configured host, port and
reload settings.

Usage:
    python -m questionbank.scripts.run_server
"""

import sys

import uvicorn

from questionbank.common.logger import configure_logger, get_logger
from questionbank.config import settings

logger = get_logger("questionbank.scripts.run_server")


def main() -> int:
    """Run the API server."""
    configure_logger(level=settings.LOG_LEVEL, use_json=settings.LOG_JSON, log_file=settings.LOG_FILE or None)
    logger.info(f"Starting server on {settings.HOST}:{settings.PORT} (reload: {settings.RELOAD})")

    uvicorn.run(
        "questionbank.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
