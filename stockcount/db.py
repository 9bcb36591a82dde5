from __future__ import annotations

import functools
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, TypeVar

import streamlit as st

from stockcount.schema import INDEX_SQL, SCHEMA_SQL, TABLES

logger = logging.getLogger(__name__)

T = TypeVar("T")


def connect(db_path: Path | str) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return connect(db_path)


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    cols = [r["name"] for r in rows]
    return column in cols


def missing_tables(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    present = {r["name"] for r in rows}
    return [t for t in TABLES if t not in present]


def ensure_schema(conn: sqlite3.Connection) -> None:
    # Create base schema (for new installs)
    conn.executescript(SCHEMA_SQL)

    # ---- migrations for existing installs ----
    # lastUpdated arrived after the first inventory layout
    if not _column_exists(conn, "inventory", "lastUpdated"):
        conn.execute("ALTER TABLE inventory ADD COLUMN lastUpdated TEXT;")

    conn.executescript(INDEX_SQL)
    conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def run(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    """Statement inside an open transaction (no commit)."""
    cur = conn.execute(sql, tuple(params))
    n = cur.rowcount
    cur.close()
    return int(n)


def run_many(conn: sqlite3.Connection, sql: str, seq: Iterable[Iterable[Any]]) -> int:
    cur = conn.executemany(sql, [tuple(p) for p in seq])
    n = cur.rowcount
    cur.close()
    return int(n)


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """All statements issued inside the block commit together or not at all."""
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()


def self_healing(fn: Callable[..., T]) -> Callable[..., T]:
    """
    Wrap a service function taking the connection as first argument.

    If the call fails because schema tables are missing, bootstrap the schema
    and retry exactly once. Every other failure propagates unchanged.
    """

    @functools.wraps(fn)
    def wrapper(conn: sqlite3.Connection, *args, **kwargs) -> T:
        try:
            return fn(conn, *args, **kwargs)
        except sqlite3.OperationalError as e:
            missing = missing_tables(conn)
            if not missing:
                raise
            logger.warning("%s failed (%s); creating missing tables %s and retrying", fn.__name__, e, missing)
            conn.rollback()
            ensure_schema(conn)
        return fn(conn, *args, **kwargs)

    return wrapper
