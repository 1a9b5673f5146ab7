"""
Decision Log - Configuration.

============================================================
CONFIGURABLE ENGINE SETTINGS
============================================================

- Page size
- Refresh cadence
- De-duplication window
- Records API endpoint, token and timeout
- Strict vs lenient record parsing

Configuration can be loaded from:
- Default values
- Environment variables (a .env file is honoured)
- YAML config file

============================================================
"""

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)


_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class DecisionLogConfig:
    """
    Main configuration for the decision log engine.

    Defaults mirror the web viewer: 20 records per page, a
    refresh every 30 seconds and a 20 second de-duplication
    window.
    """
    # Pagination
    page_size: int = 20

    # Refresh policy
    refresh_interval_seconds: float = 30.0
    dedup_window_seconds: float = 20.0

    # Records source
    api_base_url: str = "http://localhost:8080"
    api_token: Optional[str] = None
    request_timeout_seconds: float = 30.0

    # Parsing
    strict_parsing: bool = False

    def __post_init__(self) -> None:
        """Validate settings."""
        if not isinstance(self.page_size, int) or self.page_size <= 0:
            raise ConfigurationError(
                "page_size must be a positive integer",
                config_key="page_size",
                actual_value=self.page_size,
            )
        if self.refresh_interval_seconds <= 0:
            raise ConfigurationError(
                "refresh_interval_seconds must be > 0",
                config_key="refresh_interval_seconds",
                actual_value=self.refresh_interval_seconds,
            )
        if self.dedup_window_seconds < 0:
            raise ConfigurationError(
                "dedup_window_seconds must be >= 0",
                config_key="dedup_window_seconds",
                actual_value=self.dedup_window_seconds,
            )
        if self.request_timeout_seconds <= 0:
            raise ConfigurationError(
                "request_timeout_seconds must be > 0",
                config_key="request_timeout_seconds",
                actual_value=self.request_timeout_seconds,
            )
        if not self.api_base_url:
            raise ConfigurationError("api_base_url must not be empty", config_key="api_base_url")

    @classmethod
    def from_env(cls) -> "DecisionLogConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - DECISION_LOG_PAGE_SIZE
        - DECISION_LOG_REFRESH_INTERVAL
        - DECISION_LOG_DEDUP_WINDOW
        - DECISION_LOG_API_URL
        - DECISION_LOG_API_TOKEN
        - DECISION_LOG_REQUEST_TIMEOUT
        - DECISION_LOG_STRICT_PARSING
        """
        from dotenv import load_dotenv

        load_dotenv()

        kwargs: Dict[str, Any] = {}
        try:
            if os.getenv("DECISION_LOG_PAGE_SIZE"):
                kwargs["page_size"] = int(os.getenv("DECISION_LOG_PAGE_SIZE"))
            if os.getenv("DECISION_LOG_REFRESH_INTERVAL"):
                kwargs["refresh_interval_seconds"] = float(os.getenv("DECISION_LOG_REFRESH_INTERVAL"))
            if os.getenv("DECISION_LOG_DEDUP_WINDOW"):
                kwargs["dedup_window_seconds"] = float(os.getenv("DECISION_LOG_DEDUP_WINDOW"))
            if os.getenv("DECISION_LOG_REQUEST_TIMEOUT"):
                kwargs["request_timeout_seconds"] = float(os.getenv("DECISION_LOG_REQUEST_TIMEOUT"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric environment setting: {e}")

        if os.getenv("DECISION_LOG_API_URL"):
            kwargs["api_base_url"] = os.getenv("DECISION_LOG_API_URL")
        if os.getenv("DECISION_LOG_API_TOKEN"):
            kwargs["api_token"] = os.getenv("DECISION_LOG_API_TOKEN")
        if os.getenv("DECISION_LOG_STRICT_PARSING"):
            kwargs["strict_parsing"] = os.getenv("DECISION_LOG_STRICT_PARSING").strip().lower() in _TRUE_VALUES

        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: Path) -> "DecisionLogConfig":
        """
        Load configuration from a YAML file.

        Unknown keys are ignored with a warning. A missing file or
        invalid values raise ConfigurationError.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        # Allow the settings to live under a "decision_log" section
        data = data.get("decision_log", data)

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown decision log settings in {path}: {unknown}")

        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, masking the API token."""
        data = asdict(self)
        if data.get("api_token"):
            data["api_token"] = "***"
        return data


# =============================================================
# GLOBAL CONFIG SINGLETON
# =============================================================


_default_config: Optional[DecisionLogConfig] = None


def get_config() -> DecisionLogConfig:
    """Get the global decision log configuration."""
    global _default_config
    if _default_config is None:
        _default_config = DecisionLogConfig.from_env()
    return _default_config


def set_config(config: Optional[DecisionLogConfig]) -> None:
    """Set (or clear) the global decision log configuration."""
    global _default_config
    _default_config = config
