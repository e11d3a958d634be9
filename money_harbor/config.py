"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``MONEY_HARBOR_*`` prefix, plus the
                                    provider keys ``OPENAI_API_KEY`` and
                                    ``BREVO_API_KEY``

Entry point: ``load_config(config_path=None) -> AppConfig``

API keys belong in ``.env`` (or the gitignored ``config/local.toml``); blank
or placeholder values count as unset.  Keys are held as ``SecretStr`` so they
do not leak into logs or ``repr()`` output.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

# Value shipped in .env.example; treated the same as an unset key.
PLACEHOLDER_API_KEY = "your-api-key-here"


# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/money_harbor.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class CatalogConfig(BaseModel):
    """Location of the static investment catalog."""

    model_config = ConfigDict(frozen=True)

    catalog_file: str = "config/catalog/investments.json"


class RecommendationConfig(BaseModel):
    """Recommendation engine parameters."""

    model_config = ConfigDict(frozen=True)

    top_n: int = 3
    jitter_points: float = 5.0
    use_ai: bool = False

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"top_n must be >= 1, got {v}.")
        return v

    @field_validator("jitter_points")
    @classmethod
    def validate_jitter(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"jitter_points must be >= 0, got {v}.")
        return v


class LLMConfig(BaseModel):
    """OpenAI-compatible chat-completions settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_s: float = 60.0
    api_key: Optional[SecretStr] = None

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None


class EmailConfig(BaseModel):
    """Brevo transactional email settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.brevo.com/v3"
    sender_name: str = "MoneyHarbor"
    sender_email: str = "noreply@moneyharbor.online"
    max_attachment_mb: float = 25.0
    reminder_months: int = 6
    timeout_s: float = 30.0
    api_key: Optional[SecretStr] = None

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None


class HistoryConfig(BaseModel):
    """Where the "My Harbor" search history is kept."""

    model_config = ConfigDict(frozen=True)

    history_file: str = "data/history/search_history.json"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/money_harbor.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    CLI commands and the dashboard receive an ``AppConfig`` instance built by
    ``load_config()``, which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    catalog: CatalogConfig = CatalogConfig()
    recommendation: RecommendationConfig = RecommendationConfig()
    llm: LLMConfig = LLMConfig()
    email: EmailConfig = EmailConfig()
    history: HistoryConfig = HistoryConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply MONEY_HARBOR_* and provider-key environment overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _read_api_key(env_var: str) -> Optional[str]:
    """Return the env var value, or ``None`` when unset, blank or a placeholder."""
    value = os.environ.get(env_var, "").strip()
    if not value or value == PLACEHOLDER_API_KEY:
        return None
    return value


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variables to the raw config dict.

    Supported overrides:
      MONEY_HARBOR_DB_PATH       → raw["database"]["db_path"]
      MONEY_HARBOR_LOG_LEVEL     → raw["logging"]["level"]
      MONEY_HARBOR_DEBUG         → raw["debug"]
      MONEY_HARBOR_CATALOG_FILE  → raw["catalog"]["catalog_file"]
      MONEY_HARBOR_USE_AI        → raw["recommendation"]["use_ai"]
      OPENAI_API_KEY             → raw["llm"]["api_key"]
      BREVO_API_KEY              → raw["email"]["api_key"]
    """
    if db_path := os.environ.get("MONEY_HARBOR_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("MONEY_HARBOR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("MONEY_HARBOR_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if catalog_file := os.environ.get("MONEY_HARBOR_CATALOG_FILE"):
        raw.setdefault("catalog", {})["catalog_file"] = catalog_file

    if use_ai := os.environ.get("MONEY_HARBOR_USE_AI"):
        raw.setdefault("recommendation", {})["use_ai"] = use_ai.lower() in ("1", "true", "yes")

    if openai_key := _read_api_key("OPENAI_API_KEY"):
        raw.setdefault("llm", {})["api_key"] = openai_key

    if brevo_key := _read_api_key("BREVO_API_KEY"):
        raw.setdefault("email", {})["api_key"] = brevo_key

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    # Blank or placeholder keys count as unset.
    llm_raw = dict(raw.get("llm", {}))
    email_raw = dict(raw.get("email", {}))
    for section in (llm_raw, email_raw):
        if section.get("api_key") in ("", PLACEHOLDER_API_KEY):
            section.pop("api_key")

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        catalog=CatalogConfig(**raw.get("catalog", {})),
        recommendation=RecommendationConfig(**raw.get("recommendation", {})),
        llm=LLMConfig(**llm_raw),
        email=EmailConfig(**email_raw),
        history=HistoryConfig(**raw.get("history", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
