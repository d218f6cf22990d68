# commission_hub/db.py
"""
Database Connection Management

Version: 1.0.0
Features:
- Singleton pattern with thread-safe double-checked locking
- SQLite by default, any SQLAlchemy URL supported
- Health check utilities
- Query execution helpers
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from pathlib import Path
import logging
import threading
from typing import Tuple, Optional, Dict, Any, List
from contextlib import contextmanager

from .config import config

logger = logging.getLogger(__name__)

# ==================== SINGLETON ENGINE ====================

_engine = None
_engine_lock = threading.Lock()


def get_db_engine() -> Engine:
    """
    Get SQLAlchemy database engine (singleton pattern)

    Thread-safe implementation using double-checked locking.
    Streamlit reruns every script on its own thread, so all of them
    share this one engine.

    Returns:
        SQLAlchemy Engine instance
    """
    global _engine

    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = _create_engine()

    return _engine


def _create_engine() -> Engine:
    """Create new database engine with configured settings"""
    db_config = config.get_db_config()
    url = make_url(db_config["url"])

    logger.info(f"🔌 Creating database engine: {url.render_as_string(hide_password=True)}")

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=db_config["echo"]
        )
    else:
        engine = create_engine(
            url,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=3600,
            pool_pre_ping=True,  # Auto-reconnect on stale connections
            echo=db_config["echo"]
        )

    logger.info("✅ Database engine created")

    return engine


# ==================== CONNECTION MANAGEMENT ====================

def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Check if database connection is healthy

    Returns:
        Tuple of (is_connected: bool, error_message: str or None)
    """
    try:
        engine = get_db_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except OperationalError as e:
        error_msg = "Cannot connect to database. Please check DB_URL."
        logger.error(f"❌ Database connection failed: {e}")
        return False, error_msg
    except Exception as e:
        error_msg = f"Database error: {str(e)}"
        logger.error(f"❌ Database error: {e}")
        return False, error_msg


def reset_db_engine():
    """
    Reset the database engine (force new connection)

    Call this after persistent connection errors or
    when you need to reconnect with different settings.
    """
    global _engine

    with _engine_lock:
        if _engine is not None:
            try:
                _engine.dispose()
                logger.info("🔄 Database engine disposed")
            except Exception as e:
                logger.error(f"Error disposing engine: {e}")
            _engine = None

    logger.info("🔄 Database engine reset - will reconnect on next query")


def get_connection_pool_status() -> Dict[str, Any]:
    """
    Get connection pool statistics for monitoring

    Returns:
        Dictionary with pool statistics
    """
    if _engine is None:
        return {"status": "not_initialized"}

    try:
        pool = _engine.pool
        return {
            "status": "active",
            "pool": type(pool).__name__,
            "checked_out": pool.checkedout() if hasattr(pool, "checkedout") else 0,
            "checked_in": pool.checkedin() if hasattr(pool, "checkedin") else 0,
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}


# ==================== CONTEXT MANAGERS ====================

@contextmanager
def get_transaction(engine: Engine = None):
    """
    Context manager for database transactions

    Usage:
        with get_transaction() as conn:
            conn.execute(text("INSERT INTO ..."))
            conn.execute(text("UPDATE ..."))
            # Auto-commit on success, auto-rollback on exception
    """
    engine = engine or get_db_engine()
    conn = engine.connect()
    trans = conn.begin()
    try:
        yield conn
        trans.commit()
    except Exception:
        trans.rollback()
        raise
    finally:
        conn.close()


# ==================== QUERY HELPERS ====================

def execute_query(query: str, params: Dict = None, engine: Engine = None) -> List[Dict]:
    """
    Execute SELECT query and return results as list of dicts

    Args:
        query: SQL query string
        params: Query parameters
        engine: Optional engine (defaults to the singleton)

    Returns:
        List of dictionaries
    """
    engine = engine or get_db_engine()

    with engine.connect() as conn:
        result = conn.execute(text(query), params or {})
        return [dict(row._mapping) for row in result]


def execute_update(query: str, params: Dict = None, engine: Engine = None) -> int:
    """
    Execute INSERT/UPDATE/DELETE query

    Returns:
        Number of affected rows
    """
    engine = engine or get_db_engine()

    with engine.connect() as conn:
        result = conn.execute(text(query), params or {})
        conn.commit()
        return result.rowcount


# ==================== EXPORTS ====================

__all__ = [
    'get_db_engine',
    'check_db_connection',
    'reset_db_engine',
    'get_connection_pool_status',
    'get_transaction',
    'execute_query',
    'execute_update',
]
