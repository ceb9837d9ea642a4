"""Shared fixtures for StockLens tests."""

import tempfile
from datetime import date
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from tests.fixtures.sample_data import TODAY, seed

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def temp_db_path() -> AsyncGenerator[Path, None]:
    """Create temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield db_path


@pytest_asyncio.fixture
async def test_database(temp_db_path: Path):
    """Initialized test database."""
    from src.database.connection import Database

    db = Database(temp_db_path)
    await db.connect()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def seeded_database(test_database):
    """Test database holding the sample parts, BOMs, plans and stock."""
    await seed(test_database)
    return test_database


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def alert_thresholds():
    """Default alert thresholds."""
    from src.config import AlertThresholdConfig

    return AlertThresholdConfig()


@pytest.fixture
def today() -> date:
    return TODAY


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def stock_service(seeded_database):
    from src.services.stock_service import StockService

    return StockService(seeded_database)


@pytest.fixture
def receipt_service(seeded_database, stock_service, today):
    from src.services.receipt_service import ReceiptService

    return ReceiptService(seeded_database, stock_service, today=lambda: today)


@pytest.fixture
def reservation_service(seeded_database, stock_service):
    from src.services.reservation_service import ReservationService

    return ReservationService(seeded_database, stock_service)


@pytest.fixture
def requirements_handler(seeded_database, alert_thresholds, today):
    from src.query.requirements_handler import RequirementsHandler

    return RequirementsHandler(seeded_database, thresholds=alert_thresholds, today=lambda: today)
