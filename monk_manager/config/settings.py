"""Configuration management.

Loads settings from init kwargs, environment variables (MONK_ prefix, `__` for
nested keys), .env and a config file, in that order of precedence. The config
file may be TOML, JSON or YAML; the parser is picked by its extension.
"""

import json
import os
import tomllib
import warnings
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, PrivateAttr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from monk_manager.domain.exceptions import ConfigurationError
from monk_manager.domain.models import ModelConfig
from monk_manager.providers.registry import ANTHROPIC_CONFIG


CONFIG_ENV_VAR = "MONK_CONFIG"
API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"
LOG_LEVEL_ENV_VAR = "MONK_LOG_LEVEL"
PLACEHOLDER_API_KEY = "demo-api-key"
CONFIG_NAMES = ("monk.toml", "monk.json", "monk.yaml", "monk.yml")

_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".toml": tomllib.loads,
    ".json": json.loads,
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
}
_READ_ERRORS = (
    OSError,
    UnicodeDecodeError,
    tomllib.TOMLDecodeError,
    json.JSONDecodeError,
    yaml.YAMLError,
)


def _user_config_path() -> Path:
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "monk-manager" / "config.yaml"


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """Return the first existing config file.

    Search order: `explicit`, $MONK_CONFIG, ./monk.{toml,json,yaml,yml}, the
    user config dir.
    """

    candidates = []
    explicit = explicit or os.getenv(CONFIG_ENV_VAR)
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend(Path.cwd() / name for name in CONFIG_NAMES)
    candidates.append(_user_config_path())

    for path in candidates:
        if path.is_file():
            return path
    return None


def _load_config_file(path: Path) -> Dict[str, Any]:
    """Parse `path` with the loader matching its extension."""

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise ConfigurationError(f"Unsupported config file format: {path}")
    try:
        data = parser(path.read_text(encoding="utf-8")) or {}
    except _READ_ERRORS as exc:
        raise ConfigurationError(f"Failed to read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        warnings.warn(f"Config file {path} is not a mapping, ignored")
        return {}
    return data


def _write_config_file(path: Path, data: Dict[str, Any]) -> None:
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    elif suffix == ".json":
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    elif suffix == ".toml":
        # tomllib only reads
        raise ConfigurationError(f"Saving TOML config files is not supported, use YAML or JSON: {path}")
    else:
        raise ConfigurationError(f"Unsupported config file format for saving: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to write config file {path}: {exc}") from exc


class AISettings(BaseModel):
    provider: str = Field(default=ANTHROPIC_CONFIG.name, description="Provider tag, e.g. anthropic")
    model_name: str = Field(default=ANTHROPIC_CONFIG.default_model, description="Provider model ID")
    api_key: Optional[str] = Field(default=None, description="Provider API key")
    temperature: float = Field(default=0.7, ge=0.0, le=1.0, description="Sampling temperature")
    max_tokens: int = Field(default=1024, gt=0, description="Maximum output tokens")
    api_base_url: Optional[str] = Field(default=None, description="Alternate API base URL")


class LoggingSettings(BaseModel):
    level: str = Field(default="info", description="Log level name")
    format: Literal["pretty", "json"] = Field(default="pretty")
    output: Literal["stderr", "file"] = Field(default="stderr")
    file: str = Field(default="logs/monk.log", description="Log file when output is 'file'")


class ExplainSettings(BaseModel):
    max_context_lines: int = Field(default=10, ge=0)
    language_detection: bool = Field(default=True, description="Guess the language from the file extension")


class CommandsSettings(BaseModel):
    default_format: Literal["markdown", "plain"] = Field(default="markdown")
    default_language: str = Field(default="rust", description="Language used when none is detected")
    timeout: int = Field(default=30, gt=0, description="Command timeout in seconds")
    explain: ExplainSettings = Field(default_factory=ExplainSettings)


def _default_config_data() -> Dict[str, Any]:
    return {
        "ai": AISettings().model_dump(mode="json", exclude_none=True),
        "logging": LoggingSettings().model_dump(mode="json"),
        "commands": CommandsSettings().model_dump(mode="json"),
    }


def create_default_config(path: Optional[Path] = None) -> Path:
    """Write a config file holding the defaults (no API key) and return its path.

    Defaults to the user config dir, e.g. ~/.config/monk-manager/config.yaml.
    """

    target = path or _user_config_path()
    _write_config_file(target, _default_config_data())
    return target


class Settings(BaseSettings):
    """Application settings (pydantic)."""

    ai: AISettings = Field(default_factory=AISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    commands: CommandsSettings = Field(default_factory=CommandsSettings)

    model_config = SettingsConfigDict(
        env_prefix="MONK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Set by load_settings() for the duration of one build (--config flag)
    config_file: ClassVar[Optional[str]] = None

    _source_path: Optional[Path] = PrivateAttr(default=None)

    @classmethod
    def _config_source(cls) -> Dict[str, Any]:
        path = find_config_file(cls.config_file)
        if path is None:
            return {}
        return _load_config_file(path)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )

    @property
    def source_path(self) -> Optional[Path]:
        """The config file these settings were read from, if any."""

        return self._source_path

    def apply_env_overrides(self) -> "Settings":
        """Apply the well-known un-prefixed variables on top of everything else."""

        ai = self.ai
        log = self.logging
        api_key = os.getenv(API_KEY_ENV_VAR)
        if api_key:
            ai = ai.model_copy(update={"api_key": api_key})
        level = os.getenv(LOG_LEVEL_ENV_VAR)
        if level:
            log = log.model_copy(update={"level": level})
        return self.model_copy(update={"ai": ai, "logging": log})

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the settings to `path` (default: the file they came from).

        The API key is never written; keep it in $ANTHROPIC_API_KEY.
        """

        target = Path(path).expanduser() if path else self._source_path
        if target is None:
            raise ConfigurationError("Config file path not set, cannot save")
        data = self.model_dump(mode="json", exclude={"ai": {"api_key"}}, exclude_none=True)
        _write_config_file(target, data)
        return target


def load_settings(
    config_path: Optional[str] = None,
    *,
    create_default: bool = False,
    **overrides: Any,
) -> Settings:
    """Build Settings, turning validation failures into ConfigurationError.

    `config_path` takes precedence over $MONK_CONFIG. With `create_default`,
    a defaults file is written to the user config dir when no file is found.
    """

    if config_path:
        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"Config file not found: {path}")
    source = find_config_file(config_path)
    if source is None and create_default:
        try:
            source = create_default_config()
        except ConfigurationError as exc:
            warnings.warn(f"Could not create default config: {exc}")

    Settings.config_file = str(source) if source else None
    try:
        settings = Settings(**overrides).apply_env_overrides()
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
    finally:
        Settings.config_file = None
    settings._source_path = source
    return settings


def resolve_api_key(settings: Settings) -> tuple[str, bool]:
    """Return (api_key, is_placeholder); a missing key yields the placeholder."""

    if settings.ai.api_key:
        return settings.ai.api_key, False
    return PLACEHOLDER_API_KEY, True


def build_model_config(settings: Settings, api_key: str) -> ModelConfig:
    ai = settings.ai
    return ModelConfig(
        provider=ai.provider,
        model_name=ai.model_name,
        api_key=api_key,
        temperature=ai.temperature,
        max_tokens=ai.max_tokens,
        api_base_url=ai.api_base_url,
    )
