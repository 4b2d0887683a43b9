"""Configuration management for listkeeper.

Provides centralized configuration loading from config.toml with type-safe
access via Pydantic models. Secrets (store login, owner id, API keys) are
read from the environment so they never land in config.toml.
"""

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from listkeeper.core.errors import ConfigError


# =============================================================================
# Pydantic Configuration Models
# =============================================================================


class AppConfig(BaseModel):
    """Application-level configuration."""

    name: str = "listkeeper"
    data_dir: str = "./data"


class BrowserTimeoutConfig(BaseModel):
    """Per-step timeouts in milliseconds. A timeout is treated as a failure."""

    navigation_ms: int = 30000
    selector_ms: int = 10000
    settle_ms: int = 2000


class BrowserConfig(BaseModel):
    """Browser configuration for the shared Chromium session."""

    headless: bool = True
    state_dir: str = "./data/browser-state"
    viewport_width: int = 1280
    viewport_height: int = 720
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )
    launch_args: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--disable-gpu",
        ]
    )
    timeouts: BrowserTimeoutConfig = Field(default_factory=BrowserTimeoutConfig)


class StoreConfig(BaseModel):
    """Target site settings."""

    base_url: str = "https://www.wegmans.com"
    context_name: str = "store"


class LLMConfig(BaseModel):
    """LLM configuration."""

    chat_model: str = "gpt-4.1"
    chat_temperature: float = 0.0
    max_tool_iterations: int = 5
    history_limit: int = 40


class SelectionConfig(BaseModel):
    """Disambiguation settings."""

    ttl_seconds: float = 300.0
    max_results: int = 5


class StorageConfig(BaseModel):
    """Local grocery mirror and message log."""

    db_path: str = "./data/listkeeper.db"


class PromptsConfig(BaseModel):
    """Paths to prompt template files (markdown format)."""

    chat_system: str = "prompts/chat_system.md"


class Config(BaseModel):
    """Root configuration model."""

    app: AppConfig = Field(default_factory=AppConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    prompts: PromptsConfig = Field(default_factory=PromptsConfig)

    def load_prompt(self, name: str, **kwargs) -> str:
        """Load and format a prompt template.

        Args:
            name: Prompt name (e.g., "chat_system")
            **kwargs: Template variables for string formatting

        Returns:
            Formatted prompt string
        """
        prompt_path = getattr(self.prompts, name, None)
        if not prompt_path:
            raise ValueError(f"Unknown prompt: {name}")

        base_paths = [
            Path.cwd(),
            Path(__file__).resolve().parents[3],  # Project root (src/listkeeper/core/)
        ]

        for base in base_paths:
            full_path = base / prompt_path
            if full_path.exists():
                content = full_path.read_text()
                if kwargs:
                    content = content.format(**kwargs)
                return content

        raise FileNotFoundError(f"Prompt file not found: {prompt_path}")


# =============================================================================
# Configuration Loading
# =============================================================================


def _find_config_file() -> Optional[Path]:
    """Find config.toml in standard locations."""
    search_paths = [
        Path.cwd() / "config.toml",
        Path(__file__).resolve().parents[3] / "config.toml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_config_file(path: str | Path) -> Config:
    """Parse a specific config.toml into a Config."""
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return Config.model_validate(data)


@lru_cache(maxsize=1)
def load_config() -> Config:
    """Load configuration from config.toml.

    Uses lru_cache to ensure config is only loaded once per process.

    Returns:
        Config instance with all settings
    """
    config_path = _find_config_file()

    if config_path:
        return load_config_file(config_path)

    # Return defaults if no config file found
    return Config()


def _require_env(key: str) -> str:
    value = os.environ.get(key)
    if not value:
        raise ConfigError(f"Missing required environment variable: {key}")
    return value


def get_store_credentials():
    """Read the store login from STORE_EMAIL / STORE_PASSWORD.

    Raises:
        ConfigError: If either variable is unset
    """
    from listkeeper.site.auth import StoreCredentials

    return StoreCredentials(
        email=_require_env("STORE_EMAIL"),
        password=_require_env("STORE_PASSWORD"),
    )


def get_owner_id() -> str:
    """The single sender identity allowed to issue commands."""
    return _require_env("OWNER_ID")
