"""zipreview -- FastAPI application entry point."""

import logging
import sys
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zipreview.api.routers.health import router as health_router
from zipreview.api.routers.review import router as review_router
from zipreview.clients import llm_client
from zipreview.clients.llm_client import TextGenerator
from zipreview.config import VERSION, Settings, settings
from zipreview.middleware import RequestIDFilter, RequestIDMiddleware
from zipreview.middleware.access_log import AccessLogMiddleware
from zipreview.middleware.exception_handler import setup_exception_handlers

logger = logging.getLogger(__name__)


class _ColorFormatter(logging.Formatter):
    """ANSI-colored log formatter for terminal output."""

    _COLORS = {
        logging.DEBUG:    "\033[36m",     # cyan
        logging.INFO:     "\033[32m",     # green
        logging.WARNING:  "\033[33m",     # yellow
        logging.ERROR:    "\033[31m",     # red
        logging.CRITICAL: "\033[1;31m",   # bold red
    }
    _RESET = "\033[0m"
    _DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self._COLORS.get(record.levelno, "")
        ts = self.formatTime(record, "%H:%M:%S")
        name = record.name.split(".")[-1][:18]
        req = getattr(record, "request_id", "-")
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return (
            f"{self._DIM}{ts}{self._RESET} "
            f"{color}{record.levelname:<8s}{self._RESET} "
            f"{self._DIM}[{name:>18s}] {req:>12s}{self._RESET} "
            f"{color}{msg}{self._RESET}"
        )


class _PlainFormatter(logging.Formatter):
    """Plain-text formatter for file logs (no ANSI codes)."""

    def format(self, record: logging.LogRecord) -> str:
        ts = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        name = record.name.split(".")[-1][:18]
        req = getattr(record, "request_id", "-")
        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return f"{ts} {record.levelname:<8s} [{name:>18s}] {req} {msg}"


def configure_logging(current: Settings) -> None:
    """Install the console (and optional rotating file) handlers."""
    level = getattr(logging, current.LOG_LEVEL.upper(), logging.INFO)
    request_filter = RequestIDFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_ColorFormatter())
    console.addFilter(request_filter)
    handlers: list[logging.Handler] = [console]

    if current.LOG_FILE:
        log_path = Path(current.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_path),
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(_PlainFormatter())
        file_handler.addFilter(request_filter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # Quiet noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Application lifespan: logging, storage dirs, LLM handle."""
    configure_logging(settings)

    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    Path(settings.EXTRACT_DIR).mkdir(parents=True, exist_ok=True)

    application.state.text_generator = TextGenerator.from_settings(settings)
    if application.state.text_generator.enabled:
        logger.info(
            "[Init] %s model %s initialised.",
            settings.LLM_PROVIDER, settings.LLM_MODEL,
        )
    else:
        logger.warning("[Init] No LLM API key configured -- /review is disabled.")
    yield
    await llm_client.close_client()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="zipreview",
        version=VERSION,
        description="Upload a zipped Node.js project, get a quality report",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    setup_exception_handlers(application)

    # Last added runs first: request IDs must exist before access logging.
    application.add_middleware(AccessLogMiddleware)
    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    application.include_router(health_router)
    application.include_router(review_router)
    return application


app = create_app()
