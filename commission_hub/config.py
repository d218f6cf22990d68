# commission_hub/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Environment detection
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from dataclasses import dataclass

# Initialize logger
logger = logging.getLogger(__name__)

DEFAULT_DB_URL = "sqlite:///data/commission_hub.db"


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() == "true"


@dataclass
class DatabaseConfig:
    """Database configuration container"""
    url: str = DEFAULT_DB_URL
    echo: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'echo': self.echo,
        }

    def masked_url(self) -> str:
        """URL safe for logs (password hidden)"""
        if "@" not in self.url or "://" not in self.url:
            return self.url
        scheme, rest = self.url.split("://", 1)
        credentials, host = rest.rsplit("@", 1)
        user = credentials.split(":", 1)[0]
        return f"{scheme}://{user}:***@{host}"


class Config:
    """
    Centralized configuration management

    Usage:
        from commission_hub.config import config

        # Get database config
        db_config = config.get_db_config()

        # Get app settings
        timeout = config.get_app_setting("SESSION_TIMEOUT_HOURS", 12)

        # Check feature flags
        if config.is_feature_enabled("EXCEL_EXPORT"):
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        db_secrets = st.secrets.get("DB_CONFIG", {})
        self._db_config = DatabaseConfig(
            url=db_secrets.get("url", DEFAULT_DB_URL),
            echo=_as_bool(db_secrets.get("echo"))
        )

        # Secrets that app settings read before falling back to the environment
        app_secrets = st.secrets.get("APP", {})
        self._secret_overrides = {key: str(value) for key, value in dict(app_secrets).items()}

        logger.info("☁️ Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local .env file"""
        # Find and load .env file
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        self._db_config = DatabaseConfig(
            url=os.getenv("DB_URL", DEFAULT_DB_URL),
            echo=_as_bool(os.getenv("DB_ECHO"))
        )
        self._secret_overrides = {}

        logger.info("💻 Running in LOCAL environment")

    def _setting(self, key: str, default: str) -> str:
        return self._secret_overrides.get(key, os.getenv(key, default))

    def _load_app_config(self):
        """Load application-specific settings"""
        self._app_config = {
            # Session
            "SESSION_TIMEOUT_HOURS": int(self._setting("SESSION_TIMEOUT_HOURS", "12")),

            # Bootstrap admin (created on first run when the users table is empty)
            "ADMIN_PASSWORD": self._setting("ADMIN_PASSWORD", ""),

            # Cache
            "CACHE_TTL_SECONDS": int(self._setting("CACHE_TTL_SECONDS", "60")),

            # Feature flags
            "ENABLE_EXCEL_EXPORT": _as_bool(self._setting("ENABLE_EXCEL_EXPORT", "true")),
            "ENABLE_DEBUG_MODE": _as_bool(self._setting("ENABLE_DEBUG_MODE", "false")),
        }

    def _log_config_status(self):
        """Log configuration status"""
        logger.info(f"✅ Database: {self._db_config.masked_url()}")
        admin_password = self._setting("ADMIN_PASSWORD", "")
        if not admin_password:
            logger.warning("⚠️ ADMIN_PASSWORD not set - admin seeding will use a random password")

    # ==================== PUBLIC GETTERS ====================

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration as dictionary"""
        return self._db_config.to_dict()

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)

    def is_feature_enabled(self, feature: str) -> bool:
        """Check if feature is enabled"""
        key = f"ENABLE_{feature.upper()}"
        return self._app_config.get(key, True)

    # ==================== PROPERTIES ====================

    @property
    def db_config(self) -> Dict[str, Any]:
        return self.get_db_config()

    @property
    def app_config(self) -> Dict[str, Any]:
        return self._app_config.copy()


# ==================== SINGLETON INSTANCE ====================

config = Config()

IS_RUNNING_ON_CLOUD = config.is_cloud
DB_CONFIG = config.db_config
APP_CONFIG = config.app_config

__all__ = [
    'config',
    'Config',
    'DatabaseConfig',
    'IS_RUNNING_ON_CLOUD',
    'DB_CONFIG',
    'APP_CONFIG',
]
