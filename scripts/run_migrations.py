"""Run the roadmap Alembic migrations once the database accepts connections.

Deploys call this before starting the API so the ``roadmap_documents`` schema
is current when the first request arrives.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

LOGGER = logging.getLogger("leaderreps.migrations")
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_TIMEOUT = int(os.getenv("LEADERREPS_DB_MIGRATION_TIMEOUT", "60"))
DEFAULT_POLL_INTERVAL = float(os.getenv("LEADERREPS_DB_MIGRATION_POLL_INTERVAL", "3"))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upgrade the roadmap database schema.")
    parser.add_argument("--revision", default="head", help="Target revision (default: head).")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT)
    parser.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL)
    parser.add_argument("--config", default=str(PROJECT_ROOT / "alembic.ini"))
    return parser.parse_args(argv)


def load_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    url = config.get_main_option("sqlalchemy.url") or os.getenv("LEADERREPS_DATABASE_URL", "")
    if not url:
        raise RuntimeError("LEADERREPS_DATABASE_URL must be set before running migrations.")
    config.set_main_option("sqlalchemy.url", url)
    return url


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    deadline = time.monotonic() + timeout
    engine = create_engine(database_url, future=True, pool_pre_ping=True)
    last_error: Optional[Exception] = None
    try:
        while True:
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                LOGGER.info("Database is reachable.")
                return
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not ready yet: %s", exc)
            except SQLAlchemyError as exc:
                last_error = exc
                LOGGER.error("Database readiness check failed: %s", exc)
                break
            if time.monotonic() >= deadline:
                break
            time.sleep(poll_interval)
    finally:
        engine.dispose()
    raise RuntimeError("Database did not become ready in time.") from last_error


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
) -> None:
    config = config or load_config(str(PROJECT_ROOT / "alembic.ini"))
    database_url = resolve_database_url(config)
    LOGGER.info("Upgrading roadmap schema to %s", revision)
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    command.upgrade(config, revision)
    LOGGER.info("Migrations complete.")


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("LEADERREPS_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args(argv)
    try:
        run_migrations(
            args.revision,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            config=load_config(args.config),
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
