from __future__ import annotations

import argparse
import importlib

from dotenv import load_dotenv

from timekeeping.config import get_settings_module
from timekeeping.database.bootstrap import apply_schema, ensure_demo_employees, list_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the timekeeping tables.")
    parser.add_argument("--seed", action="store_true", help="also insert demo employees")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    if args.seed:
        ensure_demo_employees(db_config)

    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
