"""
Configuration Module - Load and validate application settings.
==============================================================

Loads configuration from:
1. config/settings.yaml (defaults)
2. Environment variables from .env file
3. Environment variables from system

Environment variables override YAML defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early
load_dotenv()


def _find_project_root() -> Path:
    """Find the project root directory by looking for pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.yaml"

SUPPORTED_BACKENDS = ("gemini", "ollama")


# ─────────────────────────────────────────────────────────────────────────────
# Nested Configuration Models
# ─────────────────────────────────────────────────────────────────────────────


class JudgeConfig(BaseModel):
    """LLM judge backend settings."""

    backend: str = "gemini"
    model_name: str = "gemini-1.5-pro"
    temperature: float = 0.0
    max_output_tokens: int = 2048
    ollama_base_url: str = "http://localhost:11434"
    max_concurrent_calls: int = 8
    prompts_file: str = ""

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Only hosted (gemini) and local (ollama) backends exist."""
        v = v.lower()
        if v not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unknown judge backend '{v}', expected one of {SUPPORTED_BACKENDS}")
        return v


class RetryConfig(BaseModel):
    """Judge call retry and timeout policy."""

    max_retries: int = 2
    delay_seconds: float = 40.0
    timeout_seconds: float = 120.0
    retry_status_codes: list[int] = Field(default_factory=lambda: [401, 429])


class EvaluationConfig(BaseModel):
    """Evaluation run settings."""

    ground_truth_path: str = "data/ground_truth.json"
    isolate_failures: bool = False


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    rich_console: bool = True
    file: str = ""


# ─────────────────────────────────────────────────────────────────────────────
# Main Settings Class
# ─────────────────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """
    Main application settings.

    Loads from:
    1. config/settings.yaml (defaults)
    2. Environment variables

    Environment variables override YAML settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # API Keys (from environment only)
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")

    # Top-level environment overrides
    judge_backend: Optional[str] = Field(default=None, validation_alias="JUDGE_BACKEND")
    judge_model: Optional[str] = Field(default=None, validation_alias="JUDGE_MODEL")
    log_level: Optional[str] = Field(default=None, validation_alias="LOG_LEVEL")

    # Nested configurations (from YAML)
    judge: JudgeConfig = Field(default_factory=JudgeConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def validate_api_key(cls, v: Any) -> str:
        """Allow empty API key; the hosted backend checks it when first used."""
        if v is None:
            return ""
        return str(v)

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return PROJECT_ROOT

    def get_effective_backend(self) -> str:
        """Get the effective judge backend (env override or config)."""
        if self.judge_backend:
            return self.judge_backend.lower()
        return self.judge.backend

    def get_effective_model(self) -> str:
        """Get the effective judge model name (env override or config)."""
        return self.judge_model or self.judge.model_name

    def get_effective_log_level(self) -> str:
        """Get the effective log level (env override or config)."""
        if self.log_level:
            return self.log_level.upper()
        return self.logging.level.upper()

    def resolve_path(self, path: str | Path) -> Path:
        """Resolve a configured path relative to the project root."""
        path = Path(path)
        if path.is_absolute():
            return path
        return PROJECT_ROOT / path


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def _create_settings(config_path: Optional[Path] = None) -> Settings:
    """Create settings instance by merging YAML defaults with environment."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    yaml_config = _load_yaml_config(config_path)
    return Settings(**yaml_config)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the singleton settings instance.

    Example:
        >>> settings = get_settings()
        >>> print(settings.retry.delay_seconds)
        40.0
    """
    return _create_settings()


def reload_settings() -> Settings:
    """Force reload of settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
