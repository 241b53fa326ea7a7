"""
Static configuration management for Step Scientists.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. Values are set
once at application startup; game balance numbers are NOT configured here
(see stepscientists.modules.shared.constants).

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to static configuration values
- Validate critical settings on startup
- Create required directories (logs, data)
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Game balance (conversion rates, tier tables)
- Secrets management (use environment variables)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Loaded on module import via Config.load(); Config.validate() is called by
  the application entry point and also creates directories
- Directory paths relative to project root for portability

Environment Variables
---------------------
- ENVIRONMENT: development | testing | staging | production (default: development)
- DEBUG: Debug mode flag (default: False)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON console logs (default: on in production only)
- DATABASE_URL: SQLAlchemy async URL (default: local sqlite+aiosqlite file)
- DATABASE_ECHO: Echo SQL statements (default: False)
- DATABASE_POOL_SIZE / DATABASE_MAX_OVERFLOW / DATABASE_POOL_RECYCLE:
  QueuePool tuning for server databases (ignored for sqlite)
- DAILY_BONUS_TIMEZONE: IANA zone that defines a "day" for the daily
  bonus-cell claim (default: UTC)
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not initialized during bootstrap
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """
    Internal tracker for configuration loading.

    Records which values came from environment variables versus defaults,
    and any validation errors encountered.
    """

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any):
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str):
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for the Step Scientists backend.

    Usage
    -----
    >>> Config.DATABASE_URL
    'sqlite+aiosqlite:///.../data/stepscientists.db'
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    >>> Config.get_config_summary()["environment"]
    'development'
    """

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    # =========================================================================
    # Environment Configuration
    # =========================================================================

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None

    # =========================================================================
    # Directory Configuration
    # =========================================================================

    # Place logs + data at project root
    PROJECT_ROOT = Path(__file__).resolve().parents[4]
    LOGS_DIR = PROJECT_ROOT / "logs"
    DATA_DIR = PROJECT_ROOT / "data"

    # =========================================================================
    # Database Configuration
    # =========================================================================

    DATABASE_URL: str = ""
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 1800

    # =========================================================================
    # Application Metadata
    # =========================================================================

    APP_NAME: str = "Step Scientists"
    APP_VERSION: str = "1.0.0"

    # =========================================================================
    # Daily Bonus
    # =========================================================================

    DAILY_BONUS_TIMEZONE: str = "UTC"

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            error = f"{key}='{raw_value}' is not a valid boolean, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Safely parse integer from environment with bounds validation.

        Example
        -------
        >>> Config._safe_int("DATABASE_POOL_SIZE", 5, min_val=1, max_val=100)
        5
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        try:
            value = int(raw_value)
        except ValueError:
            error = f"{key}='{raw_value}' is not a valid integer, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        if min_val is not None and value < min_val:
            error = f"{key}={value} is below minimum {min_val}, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        if max_val is not None and value > max_val:
            error = f"{key}={value} exceeds maximum {max_val}, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        cls._init_metrics()

        value = os.getenv(key, default)
        cls._metrics.record_env_load(key, key in os.environ, default)
        return value

    @classmethod
    def _safe_timezone(cls, key: str, default: str) -> str:
        """Read an IANA zone name, falling back to default if it is unknown."""
        value = cls._safe_str(key, default)
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            error = f"{key}='{value}' is not a known timezone, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default
        return value

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables with validation.

        Called automatically on module import; call again to pick up a
        changed environment (tests do this after monkeypatching).
        """
        cls._init_metrics()

        cls.ENVIRONMENT = cls._safe_str("ENVIRONMENT", "development")
        cls.DEBUG = cls._safe_bool("DEBUG", False)
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)

        logs_dir = os.getenv("LOGS_DIR")
        if logs_dir:
            cls.LOGS_DIR = Path(logs_dir)

        cls.DATABASE_URL = cls._safe_str(
            "DATABASE_URL",
            f"sqlite+aiosqlite:///{cls.DATA_DIR / 'stepscientists.db'}",
        )
        cls.DATABASE_ECHO = cls._safe_bool("DATABASE_ECHO", False)
        cls.DATABASE_POOL_SIZE = cls._safe_int(
            "DATABASE_POOL_SIZE", 5, min_val=1, max_val=100
        )
        cls.DATABASE_MAX_OVERFLOW = cls._safe_int(
            "DATABASE_MAX_OVERFLOW", 10, min_val=0, max_val=100
        )
        cls.DATABASE_POOL_RECYCLE = cls._safe_int(
            "DATABASE_POOL_RECYCLE", 1800, min_val=60
        )

        cls.DAILY_BONUS_TIMEZONE = cls._safe_timezone("DAILY_BONUS_TIMEZONE", "UTC")

        cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate critical configuration values on startup.

        Raises
        ------
        ValueError
            If DATABASE_URL is empty in production.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        try:
            if not cls.DATABASE_URL:
                raise ValueError("DATABASE_URL environment variable is required")

            if cls.is_production() and cls.DATABASE_URL.startswith("sqlite"):
                logger.warning(
                    "Production environment using a sqlite database - "
                    "this may be incorrect"
                )

            valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            if cls.LOG_LEVEL.upper() not in valid_log_levels:
                logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
                cls.LOG_LEVEL = "INFO"

            cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)
            cls.DATA_DIR.mkdir(parents=True, exist_ok=True)

            if cls.is_production() and cls.DEBUG:
                logger.warning("DEBUG mode enabled in production!")

            cls._validated = True

            summary = cls._metrics.get_summary()
            logger.info(f"Configuration loaded: {summary}")
            if cls._metrics.validation_errors:
                logger.warning(f"Configuration warnings: {cls._metrics.validation_errors}")

        except Exception as e:
            logger.warning(f"Config validation warning: {e}")
            if cls.is_production():
                logger.error("Configuration validation failed in production!")
                raise

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def environment(cls) -> Environment:
        return Environment.from_string(cls.ENVIRONMENT)

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_testing(cls) -> bool:
        return cls.ENVIRONMENT.lower() == "testing"

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def daily_bonus_zone(cls) -> ZoneInfo:
        """Timezone that decides when a new daily bonus becomes claimable."""
        return ZoneInfo(cls.DAILY_BONUS_TIMEZONE)

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Get non-sensitive configuration summary for debugging."""
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "database_backend": cls.DATABASE_URL.split(":", 1)[0] if cls.DATABASE_URL else None,
            "daily_bonus_timezone": cls.DAILY_BONUS_TIMEZONE,
            "app_version": cls.APP_VERSION,
        }


Config.load()
