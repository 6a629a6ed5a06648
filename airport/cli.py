"""Command-line administration for the airport database.

Usage:
    python -m airport.cli init-db --db airport.db
    python -m airport.cli create-admin --db airport.db --email admin@example.com \
        --username admin --password secret123
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from airport.contracts.user import UserRegistration
from airport.persistence.db_manager import DatabaseManager
from airport.persistence.repositories.user_repo import UserRepository
from airport.services.errors import AirportError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def init_db(db_path: Path) -> DatabaseManager:
    manager = DatabaseManager()
    manager.create(db_path)
    counts = manager.table_counts()
    logger.info("Schema ready with %d tables (%d roles)", len(counts), counts["roles"])
    return manager


def create_admin(db_path: Path, email: str, username: str, password: str) -> int:
    """Create an active user holding the admin role. Returns its ID."""
    manager = init_db(db_path)
    account = UserRegistration(
        username=username,
        email=email,
        password=password,
        first_name="Admin",
        last_name=username,
    )
    user = UserRepository(manager).register(account.changes(), ADMIN_ROLE)
    logger.info("Admin user %s created (id %d)", user.username, user.user_id)
    return user.user_id


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Airport management administration")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Create the schema and seed default roles")
    init.add_argument("--db", type=Path, required=True, help="SQLite database path")

    admin = sub.add_parser("create-admin", help="Create a user with the admin role")
    admin.add_argument("--db", type=Path, required=True, help="SQLite database path")
    admin.add_argument("--email", required=True)
    admin.add_argument("--username", required=True)
    admin.add_argument("--password", required=True)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init-db":
        init_db(args.db)
        return 0

    try:
        create_admin(args.db, args.email, args.username, args.password)
    except (ValidationError, AirportError) as exc:
        logger.error("Cannot create admin: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
