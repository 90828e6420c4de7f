# expense_api/db.py
import logging
import os
import sqlite3

from flask import g

logger = logging.getLogger("expense-api")

SCHEMA_FILE = os.path.join(os.path.dirname(__file__), "schema.sql")


class Database:
    """
    Handle on the SQLite database file.

    Built once by the app factory and passed to every component that needs
    storage. Connections are opened lazily per application context and kept
    on `flask.g`; `close_connection` is registered as a teardown callback.
    """

    def __init__(self, path):
        self.path = path

    def init_app(self, app):
        app.extensions["database"] = self
        app.teardown_appcontext(self.close_connection)

    def _ensure_directory(self):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

    def connection(self):
        conn = getattr(g, "_database", None)
        if conn is None:
            self._ensure_directory()
            conn = g._database = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
        return conn

    def close_connection(self, exception=None):
        conn = g.pop("_database", None)
        if conn is not None:
            try:
                conn.close()
            except sqlite3.Error:
                logger.exception("Error closing DB connection")

    def query(self, sql, args=(), one=False):
        cur = self.connection().execute(sql, args)
        rv = cur.fetchall()
        cur.close()
        return (rv[0] if rv else None) if one else rv

    def execute(self, sql, args=()):
        """Run a write statement and commit; returns the affected row count."""
        conn = self.connection()
        cur = conn.cursor()
        cur.execute(sql, args)
        conn.commit()
        count = cur.rowcount
        cur.close()
        return count

    def ping(self):
        try:
            self.query("SELECT 1", one=True)
            return True
        except sqlite3.Error:
            logger.exception("Database ping failed")
            return False

    def init_schema(self):
        """Create tables and indexes from schema.sql (idempotent)."""
        if not os.path.exists(SCHEMA_FILE):
            raise FileNotFoundError(f"schema.sql not found at expected path: {SCHEMA_FILE}")

        self._ensure_directory()
        conn = sqlite3.connect(self.path)
        try:
            with open(SCHEMA_FILE, "r", encoding="utf-8") as f:
                conn.executescript(f.read())
            conn.commit()
        finally:
            conn.close()
