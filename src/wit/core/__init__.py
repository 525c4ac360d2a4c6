"""Core module exports."""

from wit.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    MessageError,
    ProductError,
    StoreError,
    WitError,
)
from wit.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from wit.core.progress import get_console, status

__all__ = [
    # Errors
    "WitError",
    "ErrorCode",
    "ConfigError",
    "StoreError",
    "ProductError",
    "MessageError",
    "InternalError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
    # Console
    "get_console",
    "status",
]
