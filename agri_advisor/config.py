"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``AGRI_ADVISOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and the dashboard receive an ``AppConfig`` instance, never raw
dicts or individual env var lookups scattered through the codebase.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Paths to the static reference datasets."""

    model_config = ConfigDict(frozen=True)

    data_dir: str = "config/data"
    region_districts_file: str = "india_districts.json"
    district_crops_file: str = "district_crops.json"
    crop_catalog_file: str = "crop_library.json"
    crop_details_file: str = "crop_master.json"
    schemes_file: str = "schemes.json"

    def path_for(self, filename: str, root: Optional[Path] = None) -> Path:
        """Resolve ``filename`` inside ``data_dir`` (relative to ``root`` if given)."""
        base = Path(self.data_dir)
        if root is not None and not base.is_absolute():
            base = root / base
        return base / filename


class MarketConfig(BaseModel):
    """Remote market-price feed (data.gov.in) settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.data.gov.in/resource"
    resource_id: str = "9ef84268-d588-465a-a308-a864a43d0070"
    api_key: str = ""
    record_limit: int = 500
    timeout_seconds: float = 30.0
    default_sort: str = "price_desc"

    @field_validator("record_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"record_limit must be >= 1, got {v}.")
        return v

    @field_validator("default_sort")
    @classmethod
    def validate_sort(cls, v: str) -> str:
        valid = {"price_desc", "price_asc", "name_asc", "name_desc"}
        if v not in valid:
            raise ValueError(f"default_sort must be one of {sorted(valid)}, got '{v}'.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration: the single source of truth.

    It is constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    market: MarketConfig = MarketConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def find_project_root() -> Path:
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
    root = find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply AGRI_ADVISOR_* environment variable overrides
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


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply AGRI_ADVISOR_* env vars to the raw config dict.

    Supported overrides:
      AGRI_ADVISOR_DATA_DIR        → raw["data"]["data_dir"]
      AGRI_ADVISOR_MARKET_API_KEY  → raw["market"]["api_key"]
      AGRI_ADVISOR_LOG_LEVEL       → raw["logging"]["level"]
      AGRI_ADVISOR_DEBUG           → raw["debug"]
    """
    if data_dir := os.environ.get("AGRI_ADVISOR_DATA_DIR"):
        raw.setdefault("data", {})["data_dir"] = data_dir

    if api_key := os.environ.get("AGRI_ADVISOR_MARKET_API_KEY"):
        raw.setdefault("market", {})["api_key"] = api_key

    if log_level := os.environ.get("AGRI_ADVISOR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("AGRI_ADVISOR_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        market=MarketConfig(**raw.get("market", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
