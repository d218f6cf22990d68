# commission_hub/__init__.py
"""
Shared Utilities Package for the Commission Hub app

This package contains common utilities shared across all pages:
- auth: Authentication and session management
- config: Configuration management (local + Streamlit Cloud)
- db: Database connection management
- sales_commission: commission engine and dashboard components

Usage:
    from commission_hub.auth import AuthManager
    from commission_hub.db import get_db_engine, execute_query
    from commission_hub.config import config

    # Or import commonly used items directly
    from commission_hub import AuthManager, get_db_engine, config
"""

# Authentication
from .auth import AuthManager

# Configuration
from .config import (
    config,
    Config,
    IS_RUNNING_ON_CLOUD,
    DB_CONFIG,
    APP_CONFIG,
)

# Database
from .db import (
    get_db_engine,
    check_db_connection,
    reset_db_engine,
    get_transaction,
    execute_query,
    execute_update,
    get_connection_pool_status,
)

__all__ = [
    # Auth
    'AuthManager',

    # Config
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'DB_CONFIG',
    'APP_CONFIG',

    # Database
    'get_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'get_transaction',
    'execute_query',
    'execute_update',
    'get_connection_pool_status',
]

__version__ = '1.0.0'
