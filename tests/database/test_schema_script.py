from pathlib import Path

from src.hr_management.hr_management.database.bootstrap import as_db_config, split_sql_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_split_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- comment; with semicolon
    CREATE TABLE a (note VARCHAR(10) DEFAULT 'x;y');
    INSERT INTO a VALUES ("1;2");
    SELECT 1
    """
    assert list(split_sql_statements(sql)) == [
        "CREATE TABLE a (note VARCHAR(10) DEFAULT 'x;y')",
        'INSERT INTO a VALUES ("1;2")',
        "SELECT 1",
    ]


def test_schema_creates_every_table_idempotently():
    statements = list(split_sql_statements(SCHEMA.read_text(encoding="utf-8")))
    creates = [s for s in statements if s.upper().startswith("CREATE TABLE")]

    assert creates
    assert all("IF NOT EXISTS" in s.upper() for s in creates)
    names = " ".join(creates)
    for table in ("users", "employees", "attendance_punches", "balances", "ledger_transactions", "local_orders"):
        assert f"EXISTS {table} (" in names


def test_db_config_defaults():
    cfg = as_db_config({"host": "db", "port": "3307"})
    assert (cfg.host, cfg.port, cfg.user, cfg.database) == ("db", 3307, "root", "hr_management")


def test_time_columns_normalize_across_connector_types():
    from datetime import time, timedelta

    from src.hr_management.hr_management.database.mysql_base import as_time

    assert as_time(timedelta(hours=14, minutes=5)) == time(14, 5)
    assert as_time("06:00") == time(6, 0)
    assert as_time("18:30:15") == time(18, 30, 15)
    assert as_time(None) is None
