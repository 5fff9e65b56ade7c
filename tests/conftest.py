# tests/conftest.py
"""
Shared fixtures.

Every test gets its own file-backed SQLite store under tmp_path so that worker
threads in the concurrency tests hit the same database through the pool.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from gatepass.config import Config
from gatepass.database import DatabaseManager
from gatepass.main import create_app
from gatepass.models.schemas import PassRecord
from gatepass.services.pass_service import PassService
from gatepass.services.redemption import RedemptionEngine
from gatepass.services.registry import PassRegistry

UTC = timezone.utc

# Fixed instant used across tests: Tuesday 10 March 2026, 12:00 UTC
NOON = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        DB_URL=f"sqlite:///{tmp_path / 'gatepass.db'}",
        DB_POOL_SIZE=5,
        DB_MAX_OVERFLOW=30,
        REFERENCE_TIMEZONE="UTC",
        SCAN_URL_BASE="https://gate.example.test/api/scan/",
        CODE_ISSUE_RETRIES=3,
        DB_INIT_SCHEMA=True,
    )


@pytest.fixture
def db(config):
    manager = DatabaseManager(config).connect()
    manager.init_schema()
    yield manager
    manager.close()


@pytest.fixture
def registry(db) -> PassRegistry:
    return PassRegistry(db)


@pytest.fixture
def service(registry, config) -> PassService:
    return PassService(registry, config)


@pytest.fixture
def engine() -> RedemptionEngine:
    return RedemptionEngine(UTC)


@pytest.fixture
def make_record():
    """Build an in-memory PassRecord with sensible defaults."""
    counter = {"n": 0}

    def _make(**fields) -> PassRecord:
        counter["n"] += 1
        values = {
            "code": f"{counter['n']:032X}",
            "issued_to": "Ada Lovelace",
            "purpose": "Gala dinner",
            "issued_at": NOON.replace(hour=8),
        }
        values.update(fields)
        return PassRecord(**values)

    return _make


@pytest.fixture
def client(config):
    app = create_app(config)
    with TestClient(app) as test_client:
        yield test_client
