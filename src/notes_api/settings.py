from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

DEFAULT_STATIC_DIR = str(Path(__file__).resolve().parent / "public")


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PORT: listen port (default: 3000)
    - HOST: listen interface (default: 0.0.0.0)
    - PERSISTENCE_BACKEND: 'sqlite' (default) or 'memory'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data.db'
    - STATIC_DIR: directory holding index.html and other assets (default: packaged 'public')
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name (default: INFO)
    """

    port: int = 3000
    host: str = "0.0.0.0"
    persistence_backend: str = "sqlite"
    sqlite_db_path: str = "./data.db"
    static_dir: str = DEFAULT_STATIC_DIR
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_port(value: str, default: int = 3000) -> int:
    try:
        port = int(value.strip())
    except ValueError:
        return default
    if not (0 < port < 65536):
        return default
    return port


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "sqlite").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to the durable store if unsupported
        backend = "sqlite"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        port=_parse_port(_get_env("PORT", "3000")),
        host=_get_env("HOST", "0.0.0.0").strip(),
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data.db").strip(),
        static_dir=_get_env("STATIC_DIR", DEFAULT_STATIC_DIR).strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
    )
