from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_management.hr_management.database.bootstrap import apply_schema, ensure_admin_user, list_tables

logger = logging.getLogger("init_db")


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql to the configured MySQL database.")
    parser.add_argument("--admin-email", help="create or promote this user to admin")
    args = parser.parse_args()

    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    if args.admin_email:
        ensure_admin_user(db_config, email=args.admin_email)

    tables = list_tables(db_config)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
