"""Harness configuration with environment variable and YAML loading."""

import os
import logging
from pathlib import Path
from typing import Optional, Dict, Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from pageperf.exceptions import ConfigurationError
from pageperf.models.perf_models import BrowserType, Viewport

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "PAGEPERF_"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class HarnessConfig(BaseModel):
    """Configuration for a performance run."""

    # Target
    base_url: str = Field(
        default_factory=lambda: os.getenv("PAGEPERF_BASE_URL", "https://demoqa.com"),
        description="Base URL page object paths are resolved against",
    )

    # Browser
    browser: BrowserType = Field(
        default_factory=lambda: BrowserType(os.getenv("PAGEPERF_BROWSER", "chromium")),
        description="Browser engine to launch",
    )
    headless: bool = Field(
        default_factory=lambda: _env_bool("PAGEPERF_HEADLESS", "true"),
        description="Run the browser headless",
    )
    viewport_width: int = Field(
        default_factory=lambda: int(os.getenv("PAGEPERF_VIEWPORT_WIDTH", "1350")),
        gt=0,
    )
    viewport_height: int = Field(
        default_factory=lambda: int(os.getenv("PAGEPERF_VIEWPORT_HEIGHT", "940")),
        gt=0,
    )

    # Timing
    test_time_ms: int = Field(
        default_factory=lambda: int(os.getenv("PAGEPERF_TEST_TIME_MS", "60000")),
        gt=0,
        description="Default per-scenario timeout in milliseconds",
    )
    wait_until: str = Field(
        default_factory=lambda: os.getenv("PAGEPERF_WAIT_UNTIL", "load"),
        description="Load state a navigation waits for (load, domcontentloaded, networkidle)",
    )
    teardown_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("PAGEPERF_TEARDOWN_TIMEOUT_MS", "10000")),
        gt=0,
        description="Bounded wait for browser teardown",
    )
    settle_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("PAGEPERF_SETTLE_TIMEOUT_MS", "5000")),
        gt=0,
        description="Wait for the page to settle after an interaction",
    )

    # Reporting
    report_dir: str = Field(
        default_factory=lambda: os.getenv("PAGEPERF_REPORT_DIR", "perf-reports"),
        description="Directory samples and run reports are written to",
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("PAGEPERF_LOG_LEVEL", "INFO").upper(),
    )

    # Ordering
    strict_order: bool = Field(
        default_factory=lambda: _env_bool("PAGEPERF_STRICT_ORDER", "false"),
        description="Reject mis-ordered scenario declarations at run start",
    )

    @property
    def viewport(self) -> Viewport:
        return Viewport(width=self.viewport_width, height=self.viewport_height)

    def resolve_url(self, url_or_path: str) -> str:
        """Resolve a page path against base_url; absolute URLs pass through."""
        if "://" in url_or_path:
            return url_or_path
        return f"{self.base_url.rstrip('/')}/{url_or_path.lstrip('/')}"


def load_config(
    config_path: Optional[str] = None, **overrides: Any
) -> HarnessConfig:
    """
    Load harness configuration.

    Configuration is merged in this order (later overrides earlier):
    1. Defaults (from environment / .env)
    2. Explicit YAML config file, ``pageperf`` section or the whole file
    3. Environment variables (PAGEPERF_*)
    4. Keyword overrides (e.g. from the CLI), ``None`` values ignored

    Args:
        config_path: Optional YAML config file path
        **overrides: Explicit field overrides

    Returns:
        Merged HarnessConfig instance

    Raises:
        ConfigurationError: If the file is unreadable or a value is invalid
    """
    merged: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        if "pageperf" in file_config:
            merged.update(file_config["pageperf"] or {})
        else:
            merged.update(file_config)
        logger.debug(f"Loaded config from {path}")

    merged.update(_get_env_overrides())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return HarnessConfig(**merged)
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _get_env_overrides() -> Dict[str, Any]:
    """
    Get configuration overrides from PAGEPERF_* environment variables.

    Only variables naming a HarnessConfig field are taken, so the
    field defaults above and these overrides agree.

    Returns:
        Dictionary of overrides
    """
    overrides: Dict[str, Any] = {}
    fields = HarnessConfig.model_fields

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        config_key = key[len(ENV_PREFIX):].lower()
        if config_key not in fields:
            continue

        if value.lower() in ("true", "yes"):
            overrides[config_key] = True
        elif value.lower() in ("false", "no"):
            overrides[config_key] = False
        else:
            overrides[config_key] = value

    return overrides
