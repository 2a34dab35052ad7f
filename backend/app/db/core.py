import logging
import time
from contextlib import contextmanager
from pathlib import Path

import pymysql

from ..config import get_settings

__all__ = [
    "get_conn",
    "connect",
    "cursor",
    "ensure_schema",
    "SCHEMA_PATH",
]

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


def get_conn():
    """Create and return a new PyMySQL connection (autocommit enabled).

    Pings the connection (with reconnect) before returning it and retries once
    on transient connection errors.
    """
    settings = get_settings()

    last_err = None
    for attempt in range(2):
        try:
            conn = pymysql.connect(
                host=settings.db_host,
                user=settings.db_user,
                password=settings.db_password,
                database=settings.db_name,
                autocommit=True,
                connect_timeout=settings.db_connect_timeout,
                read_timeout=settings.db_read_timeout,
                write_timeout=settings.db_write_timeout,
                charset="utf8mb4",
                use_unicode=True,
            )
            try:
                conn.ping(reconnect=True)
            except Exception:
                try:
                    conn.close()
                except Exception:
                    pass
                raise
            return conn
        except Exception as e:
            logger.error("Error connecting to DB %s@%s: %s", settings.db_name, settings.db_host, e)
            last_err = e
            if attempt == 0:
                time.sleep(0.2)
                continue
            raise
    raise last_err  # type: ignore


@contextmanager
def connect():
    """Context manager that yields a DB connection and closes it afterwards."""
    conn = get_conn()
    try:
        yield conn
    finally:
        try:
            conn.close()
        except Exception:
            pass


@contextmanager
def cursor(conn):
    """Context manager that yields a DB cursor for a given connection."""
    cur = conn.cursor()
    try:
        yield cur
    finally:
        try:
            cur.close()
        except Exception:
            pass


def _split_statements(sql: str) -> list[str]:
    lines = [ln for ln in sql.splitlines() if not ln.strip().startswith("--")]
    return [s.strip() for s in "\n".join(lines).split(";") if s.strip()]


def ensure_schema(conn) -> int:
    """Create the plant-care tables when missing. Returns the statement count."""
    statements = _split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))
    with cursor(conn) as cur:
        for stmt in statements:
            cur.execute(stmt)
    return len(statements)
