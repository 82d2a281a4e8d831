"""Player settings schema and loader."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from db.session import DEFAULT_DATABASE_URL

__all__ = ["CONFIG_ENV", "Settings", "load_settings"]

# Names the settings file when no path is passed explicitly.
CONFIG_ENV = "ABP_CONFIG"


@dataclass(slots=True)
class Settings:
    """Runtime settings of the library.

    Attributes:
        database_url: SQLAlchemy URL of the book database.
        log_level: Root log level name (``TRACE`` is accepted).
    """

    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"


def load_settings(path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Load :class:`Settings` from an optional YAML file plus environment.

    Without ``path`` the file named by ``ABP_CONFIG`` is read, if set.
    Environment variables (``DATABASE_URL``, ``LOG_LEVEL``) override values
    read from the file. A missing file yields defaults.

    Raises:
        ValueError: If the file holds unknown keys or is not a mapping.
    """

    env = os.environ if environ is None else environ
    if path is None:
        path = env.get(CONFIG_ENV) or None
    data: dict[str, object] = {}
    if path is not None and Path(path).exists():
        loaded = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"settings file must contain a mapping: {path}")
        known = {f.name for f in fields(Settings)}
        unknown = sorted(set(loaded) - known)
        if unknown:
            raise ValueError(f"unknown settings: {', '.join(unknown)}")
        data.update(loaded)

    if env.get("DATABASE_URL"):
        data["database_url"] = env["DATABASE_URL"]
    if env.get("LOG_LEVEL"):
        data["log_level"] = env["LOG_LEVEL"]

    return Settings(
        database_url=str(data.get("database_url", DEFAULT_DATABASE_URL)),
        log_level=str(data.get("log_level", "INFO")).upper(),
    )
