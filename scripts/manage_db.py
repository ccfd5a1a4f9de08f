"""Database maintenance for the student portal.

    python scripts/manage_db.py init     # create the database and apply schema.sql
    python scripts/manage_db.py seed     # load seed.sql into an initialised database
    python scripts/manage_db.py tables   # list the tables that exist
"""
from __future__ import annotations

import argparse
import importlib
import sys

from dotenv import load_dotenv

from student_portal.config import get_settings_module
from student_portal.core.logger import configure_logging, get_logger
from student_portal.database.bootstrap import apply_schema, apply_seed_sql, list_tables

logger = get_logger(__name__)


def _target(db_config: dict) -> str:
    return (
        f"{db_config.get('user')}@{db_config.get('host')}:"
        f"{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("command", choices=("init", "seed", "tables"))
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))
    db_config = dict(settings.DB_CONFIG)

    if args.command == "init":
        count = apply_schema(db_config)
        logger.info("Applied schema ({} statements) to {}", count, _target(db_config))
    elif args.command == "seed":
        count = apply_seed_sql(db_config)
        logger.info("Seeded {} ({} statements)", _target(db_config), count)

    tables = list_tables(db_config)
    print(f"{_target(db_config)}: {len(tables)} table(s)")
    for name in tables:
        print(f"  {name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
