"""Configuration management for Deckhand."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from deckhand.exceptions import ConfigurationError


# Paths
DEFAULT_CONFIG_PATH = Path("~/.deckhand/config.yaml").expanduser()
LOCAL_CONFIG_FILENAME = "deckhand.yaml"


class ProcessConfig(BaseModel):
    """Process supervisor configuration."""

    timeout_ms: int = 120_000
    kill_grace_seconds: float = 5.0
    mirror_output: bool = True


class EditsConfig(BaseModel):
    """Edit safety pipeline configuration."""

    validate_syntax: bool = True
    preview_lines: int = 10
    require_approval: bool = True


class DiffConfig(BaseModel):
    """Diff rendering configuration."""

    context_lines: int = 3


class ProtocolConfig(BaseModel):
    """Tool-call protocol configuration."""

    content_tools: list[str] = [
        "propose_edit",
        "write_file",
    ]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["console", "json"] = "console"


class Config(BaseSettings):
    """Main configuration for Deckhand."""

    process: ProcessConfig = Field(default_factory=ProcessConfig)
    edits: EditsConfig = Field(default_factory=EditsConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
    protocol: ProtocolConfig = Field(default_factory=ProtocolConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="DECKHAND_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def resolve_default_config_path(cls) -> Path:
        """Resolve default config path with local-first precedence."""
        local_path = Path.cwd() / LOCAL_CONFIG_FILENAME
        if local_path.exists():
            return local_path
        return DEFAULT_CONFIG_PATH

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: if the file is not valid YAML or fails validation
        """
        config_path = Path(path).expanduser() if path else cls.resolve_default_config_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from YAML; env vars are layered by BaseSettings."""
        return cls.from_yaml()

    def save(self, path: Path | str | None = None) -> None:
        """Save configuration to YAML file."""
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
