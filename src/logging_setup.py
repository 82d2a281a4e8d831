"""Unified logging configuration used by the API and the CLI.

Provides ``setup_logging``: idempotent configuration with rotating info/debug
files and a console stream, plus a custom ``TRACE`` level.

Library modules only call ``logging.getLogger(__name__)``; entry points
decide where records go.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

# ----- Custom TRACE level -------------------------------------------------
TRACE_LEVEL = 5
if not hasattr(logging, "TRACE"):
    logging.addLevelName(TRACE_LEVEL, "TRACE")

# ----- Formatter -----------------------------------------------------------
DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(module)s | %(funcName)s | %(message)s"


def resolve_level(level_name: str | None) -> int:
    """Map a level name (``TRACE`` included) to its numeric value; INFO if unknown."""
    name = (level_name or "INFO").upper()
    if name == "TRACE":
        return TRACE_LEVEL
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(force: bool = False, level_name: str | None = None, log_dir: Path | None = None) -> None:
    """Configure root logging for the application.

    Creates two daily rotating file handlers (info & debug) keeping 7 backups
    and a console stream handler. Idempotent unless ``force`` is set. The
    level comes from ``level_name`` or the ``LOG_LEVEL`` environment variable.
    """
    if getattr(setup_logging, "_configured", False) and not force:
        return

    log_dir = log_dir or Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    # Clear existing handlers only if forcing
    if force:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()

    level = resolve_level(level_name or os.getenv("LOG_LEVEL"))
    root.setLevel(level)

    fmt = logging.Formatter(DEFAULT_FORMAT)

    info_handler = TimedRotatingFileHandler(
        log_dir / "app.log",
        when="midnight",
        backupCount=7,
        encoding="utf-8",
    )
    info_handler.setFormatter(fmt)
    info_handler.setLevel(logging.INFO)

    debug_handler = TimedRotatingFileHandler(
        log_dir / "app-debug.log",
        when="midnight",
        backupCount=7,
        encoding="utf-8",
    )
    debug_handler.setFormatter(fmt)
    debug_handler.setLevel(TRACE_LEVEL)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.setLevel(level)

    root.addHandler(info_handler)
    root.addHandler(debug_handler)
    root.addHandler(console)

    setup_logging._configured = True  # type: ignore[attr-defined]
