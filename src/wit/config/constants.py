"""Configuration constants.

Values that are NOT user-configurable: path identity delimiters, protocol
constraints and implementation limits. For configurable values see
models.py.
"""

# =============================================================================
# Path Identity
# =============================================================================

PATH_SEPARATOR = "/"
"""Separator between filesystem segments of a path identity."""

SYMBOL_SEPARATOR = "#"
"""Separator introducing each symbol segment of a path identity."""

# =============================================================================
# Resolution Limits
# =============================================================================

MAX_SYMBOL_DEPTH = 64
"""Deepest symbol nesting followed when resolving a cursor position."""

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_DESCRIPTION = "No description yet. Click to add one."
"""Placeholder for items that have never been annotated."""

WIT_DIR = ".wit"
"""Per-repository state directory."""

DEFAULT_DB_FILENAME = "wit.db"
"""SQLite file created by `wit init` inside WIT_DIR."""

# =============================================================================
# Protocol/Validation Constants
# =============================================================================

PORT_MIN = 0
PORT_MAX = 65535
"""Valid port range."""

WORKSPACE_HEADER = "X-Wit-Workspace"
"""Header carrying the workspace root on daemon HTTP requests."""
