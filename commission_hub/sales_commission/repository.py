# commission_hub/sales_commission/repository.py
"""
Persistence for Sales Commission

Handles all database interactions:
- users (login accounts: admin / consultor)
- sales (one row per sale record; parcelas stored as JSON text)

Derived money fields are stored for reference only; readers recompute
them (see data_processor). Concurrent edits are last-writer-wins.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy import text
from sqlalchemy.engine import Engine

from commission_hub.db import get_db_engine, get_transaction, execute_query, execute_update
from .constants import ROLE_ADMIN

logger = logging.getLogger(__name__)

SALE_COLUMNS = [
    'id', 'user_id', 'consultor_name', 'cliente', 'produto', 'data', 'seguro',
    'cotas', 'valor_unit', 'valor_venda', 'base_comissao', 'taxa_pct',
    'credito_raw', 'credito', 'comissao_total', 'parcelas',
    'created_at', 'updated_at',
]

USER_COLUMNS = [
    'id', 'username', 'password_hash', 'password_salt', 'display_name',
    'role', 'is_active', 'created_at', 'last_login',
]

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id VARCHAR(64) PRIMARY KEY,
        username VARCHAR(100) NOT NULL UNIQUE,
        password_hash VARCHAR(128) NOT NULL,
        password_salt VARCHAR(128) NOT NULL,
        display_name VARCHAR(200) NOT NULL,
        role VARCHAR(20) NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at VARCHAR(40),
        last_login VARCHAR(40)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sales (
        id VARCHAR(64) PRIMARY KEY,
        user_id VARCHAR(64) NOT NULL,
        consultor_name VARCHAR(200),
        cliente VARCHAR(255) NOT NULL,
        produto VARCHAR(255) NOT NULL,
        data VARCHAR(20) NOT NULL,
        seguro VARCHAR(10) NOT NULL,
        cotas INTEGER NOT NULL DEFAULT 0,
        valor_unit REAL NOT NULL DEFAULT 0,
        valor_venda REAL NOT NULL DEFAULT 0,
        base_comissao VARCHAR(10) NOT NULL,
        taxa_pct REAL NOT NULL DEFAULT 0,
        credito_raw REAL,
        credito REAL,
        comissao_total REAL,
        parcelas TEXT NOT NULL,
        created_at VARCHAR(40) NOT NULL,
        updated_at VARCHAR(40) NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_sales_user_id ON sales (user_id)",
]


def _decode_parcelas(value: Any) -> Any:
    """JSON text -> list; anything unreadable is left for read-repair."""
    if isinstance(value, (list, tuple)):
        return list(value)
    try:
        return json.loads(value) if value else None
    except (TypeError, ValueError):
        logger.warning(f"Unreadable parcelas value: {value!r}")
        return None


def _decode_sale(sale: Dict[str, Any]) -> Dict[str, Any]:
    sale['parcelas'] = _decode_parcelas(sale.get('parcelas'))
    return sale


def _sale_params(record: Dict[str, Any]) -> Dict[str, Any]:
    params = {column: record.get(column) for column in SALE_COLUMNS}
    params['parcelas'] = json.dumps(list(record.get('parcelas') or []), ensure_ascii=False)
    return params


class SalesRepository:
    """
    Data access class for users and sales.

    Usage:
        repo = SalesRepository()          # singleton engine
        repo = SalesRepository(engine)    # explicit engine (tests)

        repo.init_schema()
        rows = repo.list_sales_for_user(role, user_id)
        repo.update_sale(sale_id, lambda current: {**current, 'cliente': 'X'})
    """

    def __init__(self, engine: Engine = None):
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = get_db_engine()
        return self._engine

    def init_schema(self):
        """Create tables when missing."""
        with get_transaction(self.engine) as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(text(statement))
        logger.info("✅ Schema ready (users, sales)")

    # =========================================================================
    # SALES
    # =========================================================================

    def list_sales_for_user(self, role: str, user_id: Any) -> List[Dict[str, Any]]:
        """
        Sales visible to a user: admins get all, others only their own.
        Newest first.
        """
        columns = ", ".join(SALE_COLUMNS)
        if role == ROLE_ADMIN:
            query = f"SELECT {columns} FROM sales ORDER BY created_at DESC, id"
            params = {}
        else:
            query = f"SELECT {columns} FROM sales WHERE user_id = :user_id ORDER BY created_at DESC, id"
            params = {'user_id': str(user_id)}

        sales = [_decode_sale(row) for row in execute_query(query, params, engine=self.engine)]

        logger.debug(f"list_sales_for_user(role={role}): {len(sales)} rows")
        return sales

    def get_sale(self, sale_id: str) -> Optional[Dict[str, Any]]:
        query = f"SELECT {', '.join(SALE_COLUMNS)} FROM sales WHERE id = :id"
        rows = execute_query(query, {'id': sale_id}, engine=self.engine)
        return _decode_sale(rows[0]) if rows else None

    def create_sale(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a complete sale record (id and timestamps already set)."""
        columns = ", ".join(SALE_COLUMNS)
        placeholders = ", ".join(f":{column}" for column in SALE_COLUMNS)
        execute_update(
            f"INSERT INTO sales ({columns}) VALUES ({placeholders})", _sale_params(record), engine=self.engine
        )
        logger.info(f"Sale created: {record.get('id')} (user_id={record.get('user_id')})")
        return record

    def update_sale(
        self,
        sale_id: str,
        mutator: Callable[[Dict[str, Any]], Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        """
        Replace a sale with mutator(current) inside one transaction.

        Returns:
            Updated record, or None when the sale does not exist
        """
        select = f"SELECT {', '.join(SALE_COLUMNS)} FROM sales WHERE id = :id"
        assignments = ", ".join(f"{column} = :{column}" for column in SALE_COLUMNS if column != 'id')

        with get_transaction(self.engine) as conn:
            row = conn.execute(text(select), {'id': sale_id}).fetchone()
            if row is None:
                return None

            updated = dict(mutator(_decode_sale(dict(row._mapping))))
            updated['id'] = sale_id
            conn.execute(text(f"UPDATE sales SET {assignments} WHERE id = :id"), _sale_params(updated))

        logger.info(f"Sale updated: {sale_id}")
        return updated

    def delete_sale(self, sale_id: str) -> bool:
        deleted = execute_update("DELETE FROM sales WHERE id = :id", {'id': sale_id}, engine=self.engine) > 0
        if deleted:
            logger.info(f"Sale deleted: {sale_id}")
        return deleted

    # =========================================================================
    # USERS
    # =========================================================================

    def find_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        query = f"SELECT {', '.join(USER_COLUMNS)} FROM users WHERE username = :username"
        rows = execute_query(query, {'username': username}, engine=self.engine)
        return rows[0] if rows else None

    def list_users(self) -> List[Dict[str, Any]]:
        """Users without credentials, for owner selection."""
        query = "SELECT id, username, display_name, role, is_active FROM users ORDER BY display_name"
        return execute_query(query, engine=self.engine)

    def count_users(self) -> int:
        rows = execute_query("SELECT COUNT(*) AS n FROM users", engine=self.engine)
        return rows[0]['n'] or 0

    def create_user(self, user: Dict[str, Any]) -> Dict[str, Any]:
        columns = ", ".join(USER_COLUMNS)
        placeholders = ", ".join(f":{column}" for column in USER_COLUMNS)
        params = {column: user.get(column) for column in USER_COLUMNS}
        if params['is_active'] is None:
            params['is_active'] = 1
        execute_update(f"INSERT INTO users ({columns}) VALUES ({placeholders})", params, engine=self.engine)
        logger.info(f"User created: {user.get('username')} ({user.get('role')})")
        return user

    def update_last_login(self, user_id: str, timestamp: str):
        execute_update(
            "UPDATE users SET last_login = :ts WHERE id = :id",
            {'ts': timestamp, 'id': user_id},
            engine=self.engine
        )
