"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (IMPORT_LCOV__SECTION__KEY)
3. Repo config (.import-lcov.yaml at the repository root)
4. Global config (~/.config/import-lcov/config.yaml)
5. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from importlcov.config.models import ImportLcovConfig
from importlcov.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/import-lcov/config.yaml").expanduser()
REPO_CONFIG_NAME = ".import-lcov.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


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

    class ImportLcovSettings(BaseSettings, ImportLcovConfig):
        """Root config. Env vars: IMPORT_LCOV__LOGGING__LEVEL, IMPORT_LCOV__LCOV_FILES, etc."""

        model_config = SettingsConfigDict(
            env_prefix="IMPORT_LCOV__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

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

    return ImportLcovSettings


def config_path(repo_root: Path) -> Path:
    """Location of the repository config file."""
    return repo_root / REPO_CONFIG_NAME


def load_config(repo_root: Path | None = None, **kwargs: Any) -> ImportLcovConfig:
    """Load config: defaults < global yaml < repo yaml < env vars < kwargs.

    Relative workspace roots are resolved against ``repo_root``; when none are
    configured the repository root itself is the only workspace root.

    Args:
        repo_root: Repository root to load config from.
                   Defaults to current working directory.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    repo_root = (repo_root or Path.cwd()).resolve()

    yaml_config = _load_yaml(config_path(repo_root))
    global_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if global_config:
        yaml_config = _deep_merge(global_config, yaml_config)

    settings_cls = _make_settings_class(yaml_config)
    try:
        config: ImportLcovConfig = settings_cls(**kwargs)  # type: ignore[assignment]
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    roots = config.workspace_roots or [str(repo_root)]
    config.workspace_roots = [str((repo_root / root).resolve()) for root in roots]
    return config
