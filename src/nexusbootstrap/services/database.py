"""SQLite persistence for credentials and reference data."""

import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from nexusbootstrap.errors import BootstrapError

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS payment_credentials (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        api_key TEXT NOT NULL,
        secret_key TEXT NOT NULL,
        base_url TEXT NOT NULL DEFAULT 'https://sandbox-api.iyzipay.com',
        installment INTEGER NOT NULL DEFAULT 1,
        is_test_mode INTEGER NOT NULL DEFAULT 1,
        currency TEXT NOT NULL DEFAULT 'TRY',
        is_active INTEGER NOT NULL DEFAULT 1,
        installment_options TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS endpoints (
        id TEXT PRIMARY KEY,
        path TEXT NOT NULL,
        method TEXT NOT NULL,
        controller_name TEXT NOT NULL,
        action_name TEXT NOT NULL,
        description TEXT NOT NULL,
        category TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        requires_auth INTEGER NOT NULL DEFAULT 0,
        is_tenant_specific INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (path, method)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS role_permissions (
        id TEXT PRIMARY KEY,
        role TEXT NOT NULL,
        endpoint_id TEXT NOT NULL REFERENCES endpoints(id) ON DELETE CASCADE,
        can_read INTEGER NOT NULL DEFAULT 1,
        can_write INTEGER NOT NULL DEFAULT 0,
        can_delete INTEGER NOT NULL DEFAULT 0,
        is_active INTEGER NOT NULL DEFAULT 1,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (role, endpoint_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS static_pages (
        id TEXT PRIMARY KEY,
        page_type TEXT NOT NULL UNIQUE,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        meta_title TEXT,
        meta_description TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
)


class Database:
    """Opens short-lived SQLite connections and owns the schema."""

    def __init__(self, path: str, logger, timeout: float = 30.0):
        self.path = path
        self.logger = logger
        self.timeout = timeout
        self._schema_ready = False

    def _connect(self) -> sqlite3.Connection:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as exc:
            raise BootstrapError(f"Could not open database '{self.path}': {exc}") from exc
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def ensure_schema(self):
        if self._schema_ready:
            return
        conn = self._connect()
        try:
            with conn:
                for statement in SCHEMA:
                    conn.execute(statement)
        finally:
            conn.close()
        self._schema_ready = True
        self.logger.debug("Database schema ready at %s", self.path)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection whose statements commit or roll back together."""
        self.ensure_schema()
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()
        finally:
            conn.close()
