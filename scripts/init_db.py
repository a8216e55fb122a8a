"""Create the attendance database and its tables.

Usage: python scripts/init_db.py [--env testing] [--schema path/to/schema.sql]
"""

from __future__ import annotations

import argparse
import importlib
import os

from dotenv import load_dotenv

from homeschool_attendance.app_logger import setup_logging
from homeschool_attendance.config import get_settings_module
from homeschool_attendance.database.bootstrap import SCHEMA_PATH, apply_schema, list_tables


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--env", help="settings to use instead of APP_ENV (development, testing, production)")
    parser.add_argument("--schema", default=str(SCHEMA_PATH), help="schema file to apply")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    if args.env:
        os.environ["APP_ENV"] = args.env
    settings = importlib.import_module(get_settings_module())
    logger = setup_logging(getattr(settings, "LOG_LEVEL", None))

    db_config = dict(settings.DB_CONFIG)
    apply_schema(db_config, schema_path=args.schema)
    tables = sorted(list_tables(db_config))
    logger.info("database %s ready with tables: %s", db_config.get("database"), ", ".join(tables))


if __name__ == "__main__":
    main()
