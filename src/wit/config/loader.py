"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (WIT__SECTION__KEY)
3. User config (.wit/config.yaml) - minimal user-facing options
4. Runtime state (.wit/state.yaml) - auto-generated, not user-editable
5. Global config (~/.config/wit/config.yaml)
6. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from wit.config.constants import WIT_DIR
from wit.config.models import (
    DatabaseConfig,
    DescriptionsConfig,
    LoggingConfig,
    ProductConfig,
    ServerConfig,
    TimeoutsConfig,
    WitConfig,
)
from wit.config.user_config import load_runtime_state, load_user_config
from wit.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/wit/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class WitSettings(BaseSettings):
        """Root config. Env vars: WIT__LOGGING__LEVEL, WIT__DATABASE__URL, etc."""

        model_config = SettingsConfigDict(
            env_prefix="WIT__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        server: ServerConfig = ServerConfig()
        database: DatabaseConfig = DatabaseConfig()
        product: ProductConfig = ProductConfig()
        descriptions: DescriptionsConfig = DescriptionsConfig()
        timeouts: TimeoutsConfig = TimeoutsConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return WitSettings


WitSettings = _make_settings_class({})


def load_config(repo_root: Path | None = None, **kwargs: Any) -> WitConfig:
    """Load config: defaults < global < user config + state < env vars < kwargs.

    Args:
        repo_root: Repository root to load config from.
                   Defaults to current working directory.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    repo_root = repo_root or Path.cwd()
    wit_dir = repo_root / WIT_DIR

    user_config = load_user_config(wit_dir / "config.yaml")
    state = load_runtime_state(wit_dir / "state.yaml")

    yaml_config: dict[str, Any] = {
        "server": {"port": user_config.port},
        "logging": {"level": user_config.log_level},
        "database": {},
        "product": {},
    }
    if user_config.product_name:
        yaml_config["product"]["name"] = user_config.product_name
    if user_config.database_url:
        yaml_config["database"]["url"] = user_config.database_url
    if state:
        yaml_config["database"]["path"] = state.database_path

    global_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if global_config:
        yaml_config = _deep_merge(global_config, yaml_config)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return WitConfig.model_validate(settings.model_dump())
