"""Schema bootstrap: create the database and apply ``schema.sql``."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

# The target database comes from DB_CONFIG, not from the file.
_DATABASE_DIRECTIVE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")
_TOKEN = re.compile(r"""'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|;|[^'";]+|['"]""", re.DOTALL)


def split_statements(sql: str) -> List[str]:
    """Split a schema script on ``;`` outside of quoted literals."""
    sql = _LINE_COMMENT.sub("", _DATABASE_DIRECTIVE.sub("", sql))
    statements, current = [], []
    for token in _TOKEN.findall(sql):
        if token == ";":
            statements.append("".join(current).strip())
            current = []
        else:
            current.append(token)
    statements.append("".join(current).strip())
    return [stmt for stmt in statements if stmt]


def ensure_database_exists(config: DBConfig) -> None:
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    config = DBConfig.from_mapping(db_config)
    ensure_database_exists(config)

    statements = split_statements(Path(schema_path).read_text(encoding="utf-8"))
    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info(
        "Applied %d statements from %s to %s@%s/%s",
        len(statements),
        Path(schema_path).name,
        config.user,
        config.host,
        config.database,
    )


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
