#!/usr/bin/env python3
"""
Cursor Pagination - Database Setup Script

Supports:
- init: Create the cursor_pagination schema, users table and indexes
- reset: Drop and recreate the users table (--mode=schema) or truncate it (--mode=data)
- verify: Check DB connectivity, table and indexes

Populating the table is not handled here.

Usage:
    uv run db-init
    uv run db-reset --mode data --yes
    uv run db-verify

Environment Variables:
- DATABASE_URL_ADMIN: Admin connection with schema creation permissions (primary)
- DATABASE_URL_APP: Fallback
"""

from __future__ import annotations

import argparse
import os
import sys
from enum import Enum
from pathlib import Path

import psycopg
from psycopg.rows import dict_row

SCHEMA = "cursor_pagination"
EXPECTED_INDEXES = ("idx_users_surname_name_id", "idx_users_name_surname_id")


class ResetMode(Enum):
    """Database reset modes."""

    SCHEMA = "schema"
    DATA = "data"


class DatabaseSetup:
    """Handles database setup for the users table."""

    def __init__(self, admin_url: str):
        self.admin_url = admin_url.replace("+asyncpg", "", 1).replace("+psycopg", "", 1)
        self.repo_root = Path(__file__).parent.parent

    def _load_sql_file(self, filename: str) -> str:
        """Load SQL file from db directory."""
        sql_path = self.repo_root / "db" / filename
        if not sql_path.exists():
            raise FileNotFoundError(f"SQL file not found: {sql_path}")
        return sql_path.read_text(encoding="utf-8")

    def _apply_schema(self, conn: psycopg.Connection) -> None:
        # No parameters, so psycopg sends the whole file as one simple query
        conn.execute(self._load_sql_file("users_schema.sql"))
        conn.commit()

    def init(self) -> int:
        """Initialize database schema."""
        print("Initializing database schema...")
        try:
            with psycopg.connect(self.admin_url, autocommit=False) as conn:
                self._apply_schema(conn)
        except psycopg.Error as e:
            print(f"ERROR: Schema creation failed: {type(e).__name__}: {e}")
            return 1

        print("Database initialization complete.")
        return 0

    def reset(self, mode: ResetMode, force: bool = False) -> int:
        """Reset the users table (schema or data mode)."""
        print(f"Resetting users table ({mode.value})...")

        if not force:
            response = input(
                f"This will destroy all rows in {SCHEMA}.users. Continue? [y/N]: "
            )
            if response.lower() != "y":
                print("Aborted.")
                return 1

        try:
            with psycopg.connect(self.admin_url, autocommit=False) as conn:
                if mode == ResetMode.SCHEMA:
                    conn.execute(f"DROP TABLE IF EXISTS {SCHEMA}.users CASCADE")
                    conn.commit()
                    print("  Table dropped.")
                    self._apply_schema(conn)
                    print("  Schema applied.")
                else:
                    conn.execute(f"TRUNCATE TABLE {SCHEMA}.users")
                    conn.commit()
                    print("  Table truncated.")
        except psycopg.Error as e:
            print(f"ERROR: Database reset failed: {e}")
            return 1

        print("Database reset complete.")
        return 0

    def verify(self) -> int:
        """Verify database setup."""
        print("Verifying database setup...")

        errors: list[str] = []

        try:
            with psycopg.connect(self.admin_url, autocommit=True, row_factory=dict_row) as conn:
                print("  [OK] Database connection")

                columns = conn.execute(
                    """
                    SELECT column_name FROM information_schema.columns
                    WHERE table_schema = %s AND table_name = 'users'
                    """,
                    (SCHEMA,),
                ).fetchall()
                found = {row["column_name"] for row in columns}
                missing = {"Id", "Name", "Surname", "Email", "Address"} - found
                if missing:
                    errors.append(f"Missing users columns: {sorted(missing)}")
                else:
                    print("  [OK] users table columns")

                indexes = conn.execute(
                    "SELECT indexname FROM pg_indexes WHERE schemaname = %s AND tablename = 'users'",
                    (SCHEMA,),
                ).fetchall()
                index_names = {row["indexname"] for row in indexes}
                missing_indexes = [i for i in EXPECTED_INDEXES if i not in index_names]
                if missing_indexes:
                    errors.append(f"Missing indexes: {missing_indexes}")
                else:
                    print(f"  [OK] Indexes: {', '.join(EXPECTED_INDEXES)}")
        except psycopg.Error as e:
            errors.append(f"Database check failed: {e}")

        if errors:
            print("\nVerification FAILED:")
            for err in errors:
                print(f"  - {err}")
            return 1

        print("\nVerification PASSED.")
        return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Cursor Pagination - Database Setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--admin-url",
        help="Admin database URL (overrides env var)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="First-time setup")

    reset_parser = subparsers.add_parser("reset", help="Reset the users table")
    reset_parser.add_argument(
        "--mode",
        choices=["schema", "data"],
        default="data",
        help="Reset mode: schema (drop/recreate) or data (truncate only)",
    )
    reset_parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Skip confirmation prompt",
    )

    subparsers.add_parser("verify", help="Verify database setup")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    admin_url = args.admin_url or os.getenv("DATABASE_URL_ADMIN") or os.getenv("DATABASE_URL_APP")

    if not admin_url:
        print("ERROR: DATABASE_URL_ADMIN is required")
        print("Set it as environment variable or via --admin-url")
        return 2

    setup = DatabaseSetup(admin_url=admin_url)

    if args.command == "init":
        return setup.init()
    elif args.command == "reset":
        return setup.reset(mode=ResetMode(args.mode), force=args.yes)
    elif args.command == "verify":
        return setup.verify()

    return 0


if __name__ == "__main__":
    sys.exit(main())
