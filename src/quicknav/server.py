"""Server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Open the index and content databases inside the Starlette lifespan
- Start the HTTP transport
"""

from __future__ import annotations

import logging
import sys
from contextlib import AsyncExitStack, asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from quicknav import __version__
from quicknav.api import create_app
from quicknav.config import Settings
from quicknav.source import SqliteContentSource
from quicknav.state import build_app_state
from quicknav.store import TimestampStore
from quicknav.transport import run_http_server

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.applications import Starlette

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def _make_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        """Open and close both databases for the server's lifetime."""
        log.info("server_starting", version=__version__)

        async with AsyncExitStack() as stack:
            db_path = Path(settings.store.db_path).expanduser()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            index_db = await stack.enter_async_context(aiosqlite.connect(str(db_path)))
            store = TimestampStore(index_db)
            await store.init_db()

            # The host owns the content database; open it read-only.
            source_path = Path(settings.source.db_path).expanduser()
            content_db = await stack.enter_async_context(
                aiosqlite.connect(f"file:{source_path}?mode=ro", uri=True)
            )
            source = SqliteContentSource(content_db, settings.source.edit_url_template)

            app.state.quicknav = build_app_state(settings, store, source)

            log.info(
                "server_started",
                version=__version__,
                host=settings.server.host,
                port=settings.server.port,
                api_prefix=settings.server.api_prefix,
            )

            try:
                yield
            finally:
                log.info("server_stopping")

    return lifespan


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()
    _setup_logging(settings)

    app = create_app(
        api_prefix=settings.server.api_prefix,
        lifespan=_make_lifespan(settings),
    )
    run_http_server(app, settings)


if __name__ == "__main__":
    main()
