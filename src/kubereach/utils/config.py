"""Configuration loading."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from kubereach.core.models import ConfigurationError, PortSpec

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/kubereach/config.yaml")
DEFAULT_PORTS = ["TCP/80", "TCP/443"]

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Runtime settings for the CLI and TUI.

    Values come from the YAML config file, and ``KUBEREACH_*`` environment
    variables take precedence over the file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KUBEREACH_",
        env_ignore_empty=True,
        extra="forbid",
        validate_assignment=True,
    )

    kubeconfig: str | None = None
    context: str | None = None

    # Restrict pods and policies to these namespaces (all when empty)
    namespaces: list[str] = Field(default_factory=list)

    # Ports evaluated by matrix views when none are given
    ports: list[str] = Field(default_factory=lambda: list(DEFAULT_PORTS))

    log_level: str = "WARNING"
    log_file: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment first so it overrides values read from the config file
        return env_settings, init_settings

    @field_validator("namespaces", "ports", mode="before")
    @classmethod
    def stringify_items(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(item) for item in value]
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}'")
        return level

    @field_validator("ports")
    @classmethod
    def validate_ports(cls, value: list[str]) -> list[str]:
        for port in value:
            try:
                PortSpec.parse(port)
            except ValueError as e:
                raise ValueError(f"invalid port: {e}") from e
        return value

    def port_specs(self) -> list[PortSpec]:
        """Parse the configured ports."""
        return [PortSpec.parse(port) for port in self.ports]


def _describe(error: ValidationError) -> str:
    """Turn pydantic's report into one line per problem."""
    issues = error.errors()
    unknown = sorted(str(issue["loc"][0]) for issue in issues if issue["type"] == "extra_forbidden")
    if unknown:
        return f"unknown setting(s): {', '.join(unknown)}"
    return "; ".join(
        f"{'.'.join(str(part) for part in issue['loc'])}: {issue['msg'].removeprefix('Value error, ')}"
        for issue in issues
    )


def load_config(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and the environment.

    Without an explicit path the default location is read when it exists.

    Raises:
        ConfigurationError: if the file is unreadable, malformed or has unknown keys.
    """
    data: dict[str, Any] = {}

    config_path = Path(path).expanduser() if path else DEFAULT_CONFIG_PATH.expanduser()
    source = str(config_path)
    if path or config_path.exists():
        try:
            with config_path.open(encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"{source}: cannot read configuration: {e}", subject=source) from e

        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(f"{source}: expected a mapping at the top level", subject=source)
        data = loaded or {}
        logger.debug("Loaded configuration from %s", source)

    try:
        return Settings(**{str(key): value for key, value in data.items()})
    except ValidationError as e:
        raise ConfigurationError(f"{source}: {_describe(e)}", subject=source) from e
