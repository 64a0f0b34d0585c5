"""
Main application entry point for the question bank.

This module builds the FastAPI application: it wires the persistence handle
during the lifespan, registers the question router and exception handlers,
and exposes the health probe.

Usage:
    - Direct: python -m questionbank.main
    - ASGI server: uvicorn questionbank.main:app
"""

import asyncio
import os
import signal
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from questionbank import __version__
from questionbank.api import register_exception_handlers
from questionbank.common.logger import app_logger, configure_logger, with_context
from questionbank.config import Settings, settings as default_settings
from questionbank.database.init_db import close_database, get_session_factory, initialize_database
from questionbank.domain.questions.memory_repository import MemoryQuestionRepository
from questionbank.domain.questions.repository import QuestionRepository
from questionbank.domain.questions.service import QuestionService
from questionbank.domain.questions.sql_repository import SqlQuestionRepository
from questionbank.questions.router import router as questions_router

# Setup module logger
logger = app_logger.getChild("main")


def _request_shutdown(reason: str) -> None:
    logger.critical(f"{reason}; requesting graceful shutdown")
    os.kill(os.getpid(), signal.SIGTERM)


def _handle_uncaught_exception(exc_type, exc_value, exc_traceback) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
    _request_shutdown("Uncaught exception")


def _handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    exception = context.get("exception")
    logger.critical(f"Unhandled error in event loop: {context.get('message')}", exc_info=exception)
    _request_shutdown("Unhandled error in event loop")


def install_crash_handlers() -> Callable[[], None]:
    """
    Log process-level failures and stop the server instead of limping on.

    Returns:
        A callable that puts back the previous ``sys.excepthook`` and event
        loop exception handler
    """
    loop = asyncio.get_running_loop()
    previous_hook = sys.excepthook
    previous_loop_handler = loop.get_exception_handler()

    sys.excepthook = _handle_uncaught_exception
    loop.set_exception_handler(_handle_loop_exception)

    def uninstall() -> None:
        sys.excepthook = previous_hook
        loop.set_exception_handler(previous_loop_handler)

    return uninstall


def create_app(
    repository: Optional[QuestionRepository] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        repository: Repository to use; when None one is built at startup
            from ``settings.STORAGE_BACKEND``
        settings: Settings to use instead of the environment-derived ones

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Build the persistence handle on startup and release it on shutdown.
        """
        logger.info("Application startup sequence initiated.")
        uninstall_crash_handlers = install_crash_handlers() if settings.EXIT_ON_CRASH else None

        owns_database = False
        question_repository = repository
        if question_repository is None:
            if settings.STORAGE_BACKEND == "memory":
                question_repository = MemoryQuestionRepository()
            else:
                await initialize_database(
                    database_url=settings.DATABASE_URL,
                    echo=settings.SQL_ECHO,
                    pool_size=settings.DB_POOL_SIZE,
                    max_overflow=settings.DB_MAX_OVERFLOW,
                    pool_timeout=settings.DB_POOL_TIMEOUT,
                    create_tables=settings.DB_CREATE_TABLES
                )
                owns_database = True
                question_repository = SqlQuestionRepository(get_session_factory())

        app.state.question_service = QuestionService(question_repository)
        with_context(logger.name, repository=type(question_repository).__name__).info("Question service ready")

        try:
            yield
        finally:
            logger.info("Application shutdown sequence initiated.")
            app.state.question_service = None
            if owns_database:
                await close_database()
            if uninstall_crash_handlers is not None:
                uninstall_crash_handlers()
            logger.info("Application shutdown sequence complete.")

    configure_logger(
        level=settings.LOG_LEVEL,
        use_json=settings.LOG_JSON,
        log_file=settings.LOG_FILE or None
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="CRUD API for MCQ, programming, descriptive and image-based questions",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(questions_router, prefix=f"{settings.API_V1_STR}/questions", tags=["questions"])
    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def health():
        """Liveness probe."""
        return {
            "success": True,
            "message": "API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    logger.info(f"Application created with {len(app.routes)} routes (environment: {settings.ENV})")
    return app


app = create_app()

# Entry point for running the application directly
if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {default_settings.HOST}:{default_settings.PORT} (reload: {default_settings.RELOAD})")

    uvicorn.run(
        "questionbank.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.RELOAD,
        log_level="info"
    )
