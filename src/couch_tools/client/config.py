"""Configuration for the CouchDB client."""

import re

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# CouchDB database names: lowercase letter first, then a restricted set.
DATABASE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_$()+/-]*$")


class CouchConfig(BaseSettings):
    """Connection settings for a CouchDB server.

    All settings can be configured via environment variables with the
    COUCHDB_ prefix (e.g. COUCHDB_HOST, COUCHDB_PORT, COUCHDB_USERNAME).

    The configuration is frozen: a client reads it once at construction and
    keeps it for its whole lifetime.
    """

    model_config = SettingsConfigDict(
        env_prefix="COUCHDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    host: str = Field(default="http://127.0.0.1")
    port: int = Field(default=5984, ge=1, le=65535)

    username: str | None = Field(default=None)
    password: str | None = Field(default=None)

    log_requests: bool = Field(
        default=False,
        validation_alias=AliasChoices("log_requests", "COUCHDB_LOG_REQUESTS", "COUCHDB_LOGGING"),
        description="Log every successful request with status, body and timing",
    )
    default_database: str | None = Field(
        default=None,
        validation_alias=AliasChoices("default_database", "COUCHDB_DEFAULT_DATABASE", "COUCHDB_DATABASE"),
        description="Database used when an operation is called without one",
    )

    timeout: float = Field(default=30.0, ge=1.0, le=300.0)
    user_agent: str = Field(default="couch-tools")

    log_level: str = Field(default="INFO")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Validate host format and strip trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Host must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("default_database")
    @classmethod
    def validate_default_database(cls, v: str | None) -> str | None:
        """Reject default database names CouchDB would refuse."""
        if v is not None and not DATABASE_NAME_PATTERN.fullmatch(v):
            raise ValueError(f"Invalid database name: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @property
    def base_url(self) -> str:
        """Server root, e.g. http://127.0.0.1:5984."""
        return f"{self.host}:{self.port}"

    @property
    def credentials(self) -> tuple[str, str] | None:
        """Basic auth pair, or None when credentials are incomplete."""
        if self.username and self.password is not None:
            return (self.username, self.password)
        return None
