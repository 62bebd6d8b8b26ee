from __future__ import annotations

from workforce_portal.database.bootstrap import SCHEMA_PATH, split_statements


def test_bundled_schema_splits_into_create_table_statements():
    statements = split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))

    assert len(statements) == 7
    assert all(stmt.upper().startswith("CREATE TABLE IF NOT EXISTS") for stmt in statements)


def test_semicolons_inside_literals_do_not_split():
    sql = """
    CREATE DATABASE IF NOT EXISTS other;
    USE other;
    -- seed a row
    INSERT INTO notes (body) VALUES ('a; b'), ("it\\'s; fine");
    SELECT 1
    """

    assert split_statements(sql) == [
        "INSERT INTO notes (body) VALUES ('a; b'), (\"it\\'s; fine\")",
        "SELECT 1",
    ]
