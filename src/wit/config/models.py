"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (WIT__SECTION__KEY)
3. Repo YAML (.wit/config.yaml, .wit/state.yaml)
4. Global YAML (~/.config/wit/config.yaml)
5. Built-in defaults (this file)

Examples:
    WIT__LOGGING__LEVEL=DEBUG
    WIT__SERVER__PORT=8080
    WIT__DATABASE__URL=postgresql+psycopg://wit@localhost/wit
    WIT__PRODUCT__NAME=my-repo
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from wit.config.constants import DEFAULT_DESCRIPTION, PORT_MAX, PORT_MIN

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        WIT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every query with its duration.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """Daemon server configuration.

    Env vars:
        WIT__SERVER__HOST: Bind address (default: 127.0.0.1)
        WIT__SERVER__PORT: Port number (default: 7655)
    """

    host: str = Field(
        default="127.0.0.1",
        description="Bind address. Use 0.0.0.0 for network access (security risk).",
    )
    port: int = Field(default=7655, description="Server port.")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (PORT_MIN <= v <= PORT_MAX):
            raise ValueError(f"Port must be {PORT_MIN}-{PORT_MAX}, got {v}")
        return v


class DatabaseConfig(BaseModel):
    """Description store connection configuration.

    Either ``url`` (any SQLAlchemy URL, e.g. PostgreSQL) or ``path`` (a SQLite
    file) must be set. When both are missing the store is disabled.

    Env vars:
        WIT__DATABASE__URL: SQLAlchemy connection URL
        WIT__DATABASE__PATH: SQLite database file
        WIT__DATABASE__SCHEMA_NAME: search_path for server databases
    """

    url: str | None = Field(default=None, description="SQLAlchemy connection URL.")
    path: str | None = Field(default=None, description="SQLite database file path.")
    schema_name: str | None = Field(
        default=None,
        description="Schema used as search_path on PostgreSQL connections. "
        "Characters outside [A-Za-z0-9_] are stripped.",
    )
    connect_timeout_sec: int = Field(
        default=10,
        description="Connection attempt timeout for server databases.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.url or self.path)


class ProductConfig(BaseModel):
    """Product identity configuration.

    Env vars:
        WIT__PRODUCT__NAME: Override the name derived from the git remote
    """

    name: str | None = Field(
        default=None,
        description="Product name override. Defaults to the origin remote's repository name.",
    )


class DescriptionsConfig(BaseModel):
    """Description presentation configuration.

    Env vars:
        WIT__DESCRIPTIONS__DEFAULT_TEXT: Placeholder for items without a description
    """

    default_text: str = Field(
        default=DEFAULT_DESCRIPTION,
        description="Placeholder shown for items that have no stored description.",
    )

    @field_validator("default_text")
    @classmethod
    def validate_default_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Default description must not be empty")
        return v


class TimeoutsConfig(BaseModel):
    """Timeout configuration for daemon components."""

    server_stop_sec: float = Field(default=5.0, description="Server shutdown timeout.")
    force_exit_sec: float = Field(
        default=3.0,
        description="Force exit timeout after graceful shutdown fails.",
    )


class WitConfig(BaseModel):
    """Root configuration for wit.

    All settings can be configured via:
    1. Environment variables: WIT__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    product: ProductConfig = Field(default_factory=ProductConfig)
    descriptions: DescriptionsConfig = Field(default_factory=DescriptionsConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
