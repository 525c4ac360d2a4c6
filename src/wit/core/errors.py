"""wit error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Store
- 4xxx: Product
- 5xxx: Sync / surface messages
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Store (3xxx)
    STORE_NOT_CONFIGURED = 3001
    STORE_UNAVAILABLE = 3002
    STORE_QUERY_FAILED = 3003

    # Product (4xxx)
    PRODUCT_NOT_FOUND = 4001

    # Sync (5xxx)
    MESSAGE_UNKNOWN_COMMAND = 5001
    MESSAGE_INVALID = 5002
    PATH_NOT_IN_CONTEXT = 5003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class WitError(Exception):
    """Base error with structured context for JSON responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'STORE_QUERY_FAILED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(WitError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class StoreError(WitError):
    """Description store errors."""

    @classmethod
    def not_configured(cls) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_NOT_CONFIGURED,
            message="Database connection is not configured. Set database.url or database.path.",
        )

    @classmethod
    def unavailable(cls, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_UNAVAILABLE,
            message=f"Database unavailable: {reason}",
            retryable=True,
            details={"reason": reason},
        )

    @classmethod
    def query_failed(cls, operation: str, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_QUERY_FAILED,
            message=f"{operation} failed: {reason}",
            retryable=True,
            details={"operation": operation, "reason": reason},
        )


class ProductError(WitError):
    """Product identity errors."""

    @classmethod
    def not_found(cls, location: str) -> "ProductError":
        return cls(
            code=ErrorCode.PRODUCT_NOT_FOUND,
            message=(
                f"Could not determine the product for {location}. "
                "Configure a git remote or set product.name."
            ),
            details={"location": location},
        )


class MessageError(WitError):
    """Malformed or unsupported surface messages."""

    @classmethod
    def unknown_command(cls, command: Any) -> "MessageError":
        return cls(
            code=ErrorCode.MESSAGE_UNKNOWN_COMMAND,
            message=f"Unknown command: {command!r}",
            details={"command": str(command)},
        )

    @classmethod
    def invalid(cls, reason: str) -> "MessageError":
        return cls(
            code=ErrorCode.MESSAGE_INVALID,
            message=f"Invalid message: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def path_not_in_context(cls, path: str) -> "MessageError":
        return cls(
            code=ErrorCode.PATH_NOT_IN_CONTEXT,
            message=f"Path is not part of the current context: {path}",
            details={"path": path},
        )


class InternalError(WitError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
