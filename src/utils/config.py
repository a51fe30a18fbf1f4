"""Configuration management for the OCR post-processing engine.

Loads and validates YAML configuration with sensible defaults for
ending-balance detection and subcategory inference. Engine functions
receive these models as explicit arguments; only this module looks at
files and environment variables.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from src.classification.catalog import DEFAULT_SUBCATEGORY_MAPPINGS

logger = logging.getLogger(__name__)

DEFAULT_BALANCE_KEYWORDS: tuple[str, ...] = (
    "ending balance",
    "closing balance",
    "balance as of",
    "available balance",
    "current balance",
    "final balance",
    "account balance",
    "total balance",
    "balance forward",
    "new balance",
)

AUTO_POPULATE_ENV_VAR = "OCR_AUTO_POPULATE_SUBCATEGORY"

DEFAULT_PATTERN_TIMEOUT_SECONDS = 0.25


class BalanceDetectionConfig(BaseModel):
    """Configuration for amount-date association and ending-balance selection."""

    balance_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BALANCE_KEYWORDS)
    )
    max_line_distance: int = Field(default=2, ge=0)
    max_char_distance: int = Field(default=100, gt=0)
    balance_keyword_weight: float = 2.0
    # Not consulted by the selection cascade; kept so existing config files load.
    date_recency_weight: float = 1.5
    amount_magnitude_weight: float = 0.5
    prefer_currency_symbol: bool = True


class SubcategoryMapping(BaseModel):
    """Keywords and regex patterns that point to one subcategory."""

    subcategory: str
    keywords: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)
    weight: float = Field(default=1.0, ge=0.0)


def default_subcategory_mappings() -> list[SubcategoryMapping]:
    """Build validated models for the shipped mapping catalog."""
    return [SubcategoryMapping(**entry) for entry in DEFAULT_SUBCATEGORY_MAPPINGS]


class SubcategoryInferenceConfig(BaseModel):
    """Configuration for subcategory inference and auto-population."""

    auto_populate: bool = True
    min_confidence_for_auto_populate: float = Field(default=0.6, ge=0.0, le=1.0)
    max_candidates: int = Field(default=5, ge=0)
    # Budget per mapping pattern; slower patterns are skipped.
    pattern_timeout_seconds: float = Field(
        default=DEFAULT_PATTERN_TIMEOUT_SECONDS, gt=0.0
    )
    mappings: list[SubcategoryMapping] = Field(
        default_factory=default_subcategory_mappings
    )


class AppConfig(BaseModel):
    """Top-level application configuration."""

    balance: BalanceDetectionConfig = Field(default_factory=BalanceDetectionConfig)
    subcategory: SubcategoryInferenceConfig = Field(
        default_factory=SubcategoryInferenceConfig
    )
    mappings_path: str | None = None
    log_level: str = "INFO"


def load_subcategory_mappings(path: Path) -> list[SubcategoryMapping]:
    """Load a subcategory mapping catalog from a YAML file.

    The file holds a list of mapping entries, or a mapping with a
    ``mappings`` key holding that list.

    Args:
        path: Path to the YAML catalog.

    Returns:
        Validated mappings, or the default catalog if the file is
        missing or empty.
    """
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            data = data.get("mappings")
        if data:
            logger.info("Loaded %d subcategory mappings from %s", len(data), path)
            return [SubcategoryMapping(**entry) for entry in data]

    logger.debug("No subcategory mappings at %s, using defaults", path)
    return default_subcategory_mappings()


def apply_env_overrides(
    config: AppConfig, environ: Mapping[str, str] | None = None
) -> AppConfig:
    """Apply deployment-level environment overrides to a configuration.

    ``OCR_AUTO_POPULATE_SUBCATEGORY=false`` turns subcategory
    auto-population off; any other value (or absence) leaves the
    configured setting unchanged.

    Args:
        config: Configuration to start from. Not modified.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        A configuration with the overrides applied.
    """
    env = os.environ if environ is None else environ
    if env.get(AUTO_POPULATE_ENV_VAR, "").strip().lower() == "false":
        logger.info("%s=false, disabling subcategory auto-populate", AUTO_POPULATE_ENV_VAR)
        subcategory = config.subcategory.model_copy(update={"auto_populate": False})
        return config.model_copy(update={"subcategory": subcategory})
    return config


def load_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.
        environ: Environment used for deployment overrides.
            Defaults to ``os.environ``.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        config = AppConfig(**raw)
    else:
        logger.info("No config file found at %s, using defaults", path)
        config = AppConfig()

    if config.mappings_path:
        mappings = load_subcategory_mappings(Path(config.mappings_path))
        subcategory = config.subcategory.model_copy(update={"mappings": mappings})
        config = config.model_copy(update={"subcategory": subcategory})

    return apply_env_overrides(config, environ)
