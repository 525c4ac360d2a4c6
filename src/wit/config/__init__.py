"""Config module exports."""

from wit.config.loader import WitSettings, load_config
from wit.config.models import (
    DatabaseConfig,
    DescriptionsConfig,
    LoggingConfig,
    ProductConfig,
    ServerConfig,
    WitConfig,
)

__all__ = [
    "load_config",
    "WitConfig",
    "WitSettings",
    "ServerConfig",
    "DatabaseConfig",
    "ProductConfig",
    "DescriptionsConfig",
    "LoggingConfig",
]
