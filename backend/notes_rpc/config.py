"""
Notes RPC Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a module-level `settings` object.
Who:   Imported by the app factory; tests build their own `Settings` instances.
When:  Loaded once at module import time; validated before the app starts.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development.
    Attributes are grouped by concern.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # What: Async SQLite connection string using the aiosqlite driver
    # Format: sqlite+aiosqlite:///<path> (relative to the backend CWD)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/notes.db",
        description="Async SQLAlchemy URL of the embedded note store",
    )

    # What: Echo every SQL statement to the log
    # Also switched on implicitly when log_level is DEBUG
    database_echo: bool = Field(default=False)

    # ── RPC Surface ───────────────────────────────────────────────────────
    # api_prefix:  everything below it is "API"; unknown paths get a plain 404
    # rpc_prefix:  operation endpoints live at <rpc_prefix>/<operationName>
    api_prefix: str = Field(default="/api")
    rpc_prefix: str = Field(default="/api/trpc")

    @field_validator("api_prefix", "rpc_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Normalizes prefixes to a leading slash and no trailing slash."""
        v = "/" + v.strip().strip("/")
        if v == "/":
            raise ValueError("Prefix must not be the site root")
        return v

    # ── CORS ──────────────────────────────────────────────────────────────
    # Sent on every response; preflight responses also carry Max-Age
    cors_allow_origin: str = Field(default="*")
    cors_allow_methods: str = Field(default="GET, POST, OPTIONS")
    cors_allow_headers: str = Field(default="Content-Type")
    cors_max_age: int = Field(default=86400, ge=0, le=604800)

    # ── Static Assets ─────────────────────────────────────────────────────
    # What: Optional directory served for every path outside api_prefix
    # Unset: non-API paths fall through to a plain 404
    static_root: Optional[str] = Field(default=None)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
    }

    @property
    def cors_headers(self) -> dict:
        """Headers attached to every response by the CORS middleware."""
        return {
            "Access-Control-Allow-Origin": self.cors_allow_origin,
            "Access-Control-Allow-Methods": self.cors_allow_methods,
            "Access-Control-Allow-Headers": self.cors_allow_headers,
        }

    @property
    def sql_echo(self) -> bool:
        return self.database_echo or self.log_level == "DEBUG"


# Module-level instance used by `notes_rpc.main:app`
settings = Settings()
