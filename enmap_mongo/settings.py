from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .options import DEFAULT_DB_NAME, DEFAULT_HOST, DEFAULT_PORT, ProviderOptions


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    # Connection
    url: Optional[str]
    host: str
    port: int
    db_name: str
    user: Optional[str]
    password: Optional[str]
    server_selection_timeout_ms: Optional[int]

    # Behaviour
    fetch_all: bool

    # Logging
    log_level: str


def get_settings() -> Settings:
    return Settings(
        url=os.getenv("ENMAP_MONGO_URL") or None,
        host=os.getenv("ENMAP_MONGO_HOST", DEFAULT_HOST),
        port=_env_int("ENMAP_MONGO_PORT", DEFAULT_PORT) or DEFAULT_PORT,
        db_name=os.getenv("ENMAP_MONGO_DB", DEFAULT_DB_NAME),
        user=os.getenv("ENMAP_MONGO_USER") or None,
        password=os.getenv("ENMAP_MONGO_PASSWORD") or None,
        server_selection_timeout_ms=_env_int("ENMAP_MONGO_TIMEOUT_MS", None),
        fetch_all=_env_bool("ENMAP_MONGO_FETCH_ALL", False),
        log_level=os.getenv("ENMAP_MONGO_LOG_LEVEL", "WARNING").upper(),
    )


def options_from_env(name: str, env_file: str | Path | None = None, **overrides: Any) -> ProviderOptions:
    """
    Build provider options from ENMAP_MONGO_* variables.

    `env_file` is loaded first without overriding variables already set.
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    s = get_settings()
    raw: dict[str, Any] = {
        "name": name,
        "url": s.url,
        "host": s.host,
        "port": s.port,
        "db_name": s.db_name,
        "user": s.user,
        "password": s.password,
        "server_selection_timeout_ms": s.server_selection_timeout_ms,
        "fetch_all": s.fetch_all,
    }
    raw.update(overrides)
    return ProviderOptions.build(raw)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
