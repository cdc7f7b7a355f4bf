from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def _alembic_config(database_url: str) -> Config:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def _database_url(cli_url: str | None) -> str:
    url = cli_url or os.getenv("DATABASE_URL") or Config(str(ALEMBIC_INI)).get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("No DATABASE_URL or sqlalchemy.url configured.")
    return url


def _reset_schema(database_url: str) -> None:
    """SQLite files are deleted outright; other backends are migrated down to base."""
    url = make_url(database_url)
    config = _alembic_config(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).unlink(missing_ok=True)
    else:
        command.downgrade(config, "base")
    command.upgrade(config, "head")


def _seed_from_csv(database_url: str, csv_path: Path) -> None:
    os.environ["DATABASE_URL"] = database_url
    from backend.app.belfius.csv_parser import BelfiusCsvParser
    from backend.app.db import SessionLocal, engine
    from backend.app.services.import_service import ImportOrchestrator
    from backend.app.services.transaction_store import SqlTransactionStore

    session = SessionLocal()
    try:
        orchestrator = ImportOrchestrator(BelfiusCsvParser(), SqlTransactionStore(session))
        outcome = orchestrator.import_file(csv_path, csv_path.name)
        print(f"Seed import {csv_path.name}: {outcome.status} {outcome.summary()}")
        for item in outcome.errors:
            print(f"  row {item['row']}: {item['error']}")
    finally:
        session.close()
        engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Drop and re-migrate the importer database.")
    parser.add_argument("--url", help="Override the database URL.")
    parser.add_argument("--yes", action="store_true", help="Confirm the reset.")
    parser.add_argument("--seed-csv", type=Path, help="Import a Belfius CSV export afterwards.")
    args = parser.parse_args()

    if not args.yes:
        print("Refusing to reset database without --yes.")
        return 1

    database_url = _database_url(args.url)
    _reset_schema(database_url)
    if args.seed_csv:
        _seed_from_csv(database_url, args.seed_csv)

    print(f"Reset {make_url(database_url).render_as_string(hide_password=True)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
