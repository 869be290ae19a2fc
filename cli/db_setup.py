"""
Database setup commands.

These commands wrap scripts/setup_database.py; the database URL comes from
DATABASE_URL_ADMIN (or DATABASE_URL_APP).

Usage:
    uv run db-init          # Create schema, table and indexes
    uv run db-reset         # Truncate the users table
    uv run db-verify        # Verify setup
"""

from __future__ import annotations

import sys
from pathlib import Path

from cli._runner import run

_SETUP_DB_SCRIPT = Path(__file__).parent.parent / "scripts" / "setup_database.py"


def db_init() -> None:
    """First-time database setup."""
    sys.exit(run([sys.executable, str(_SETUP_DB_SCRIPT), "init"]))


def db_reset() -> None:
    """Truncate the users table without prompting."""
    sys.exit(run([sys.executable, str(_SETUP_DB_SCRIPT), "reset", "--mode", "data", "--yes"]))


def db_reset_schema() -> None:
    """Drop and recreate the users table without prompting."""
    sys.exit(run([sys.executable, str(_SETUP_DB_SCRIPT), "reset", "--mode", "schema", "--yes"]))


def db_verify() -> None:
    """Verify database setup."""
    sys.exit(run([sys.executable, str(_SETUP_DB_SCRIPT), "verify"]))
