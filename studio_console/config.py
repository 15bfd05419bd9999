"""Configuration management for Studio Console."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Paths
DEFAULT_CONFIG_PATH = Path("~/.studio-console/config.yaml").expanduser()
DEFAULT_STORAGE_PATH = Path("~/.studio-console/carts").expanduser()
LOCAL_CONFIG_FILENAME = "config.yaml"


class ConsoleConfig(BaseModel):
    """Text grid geometry and input timing."""

    width: int = Field(default=40, ge=8)
    height: int = Field(default=17, ge=2)
    screens: int = Field(default=64, ge=1)
    fps: int = Field(default=60, ge=1)
    prompt: str = ">"
    blink_period: int = 60
    keystroke_delay: int = 30
    wheel_step: int = 3
    default_script: str = "lua"


class ColorsConfig(BaseModel):
    """Palette indices used by the console."""

    background: int = 0
    back: int = 14
    front: int = 13
    input: int = 12
    error: int = 2
    cursor: int = 2
    wrap: int = 15
    command_header: int = 6
    api_header: int = 9
    api_definition: int = 10


class StorageConfig(BaseModel):
    """Virtual filesystem configuration."""

    path: str = str(DEFAULT_STORAGE_PATH)
    config_cart: str = "config.tic"
    public_dir: str = "public"


class NetConfig(BaseModel):
    """Network transport configuration."""

    base_url: str = ""
    timeout: float = 30.0
    user_agent: str = "Mozilla/5.0 (compatible; StudioConsole/0.1)"
    check_new_version: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    format: Literal["console", "json"] = "console"


class Config(BaseSettings):
    """Main configuration for Studio Console."""

    console: ConsoleConfig = Field(default_factory=ConsoleConfig)
    colors: ColorsConfig = Field(default_factory=ColorsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    net: NetConfig = Field(default_factory=NetConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="STUDIO_",
        env_file=".env",
        env_nested_delimiter="__",
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
        """Load configuration from YAML file."""
        config_path = Path(path).expanduser() if path else cls.resolve_default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def load(cls) -> "Config":
        """Load configuration, preferring env vars over YAML."""
        return cls.from_yaml()

    def save(self, path: Path | str | None = None) -> None:
        """Save configuration to YAML file."""
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        with open(config_path, "w") as f:
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
