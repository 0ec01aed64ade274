from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector

from ..core.constants import HR_BALANCE, LOAN_BALANCE, MAIN_BALANCE
from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_OR_USE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE\b|USE\b).*?;\s*$")


def as_db_config(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "hr_management")),
        pool_size=int(db_config.get("pool_size", 5)),
    )


def split_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside of quoted strings; '--' comment lines are dropped."""
    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    buf: list[str] = []
    quote: str | None = None
    for ch in "\n".join(lines):
        if quote:
            buf.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = as_db_config(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    """Create every table from schema.sql (statements are CREATE ... IF NOT EXISTS)."""
    target = as_db_config(db_config)
    ensure_database_exists(db_config)

    # The script's own CREATE DATABASE/USE lines are ignored so any DB name works.
    sql = _CREATE_DB_OR_USE.sub("", Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in split_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    ensure_balance_rows(db_config)


def ensure_balance_rows(db_config: dict) -> None:
    """Each named balance is a single row keyed by name; create the missing ones at zero."""
    conn = _connect(as_db_config(db_config))
    try:
        cur = conn.cursor()
        for name in (MAIN_BALANCE, HR_BALANCE, LOAN_BALANCE):
            cur.execute("INSERT IGNORE INTO balances(name, total) VALUES(%s, 0)", (name,))
        conn.commit()
    finally:
        conn.close()


def ensure_admin_user(db_config: dict, *, email: str) -> None:
    """Make sure the bootstrap admin can obtain a token and pass role checks."""
    conn = _connect(as_db_config(db_config))
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO users(email, username, role, is_active, email_verified)
            VALUES(%s, %s, 'admin', 1, 1)
            ON DUPLICATE KEY UPDATE role='admin', is_active=1
            """,
            (email.lower(), email.split("@")[0]),
        )
        conn.commit()
        logger.info("Admin user ensured for %s", email)
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(as_db_config(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
