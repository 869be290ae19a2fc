"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock
from uuid import UUID

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Add app to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Set test environment variables before importing app
# Unit tests use mocks or the in-memory store, so these are just defaults
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("OTEL_LOG_RECORD_FORMAT", "console")

from app.core.config import Settings  # noqa: E402
from tests.utils.ranked_store import InMemoryUserStore, make_users  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings built from defaults (plus the test env above)."""
    return Settings()


@pytest.fixture
def mock_session():
    """Mock async database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def user_rows() -> list[dict]:
    """Twenty-five users with distinct surnames (so every order is strict)."""
    return make_users(25)


@pytest.fixture
def user_store(user_rows) -> InMemoryUserStore:
    """In-memory ranked users store seeded with ``user_rows``."""
    return InMemoryUserStore(user_rows)


@pytest.fixture
def fixed_id() -> UUID:
    return UUID("0b7c6f2e-3d4a-4f5b-9c8d-1e2f3a4b5c6d")
