"""Shared fixtures for API endpoint tests."""

import httpx
import pytest
import pytest_asyncio

from src.api.middleware.rate_limit import limiter
from src.api.routers.auth import (
    ROLE_ADMIN,
    ROLE_MATERIAL,
    ROLE_PRODUCTION,
    ROLE_VIEWER,
    create_access_token,
)
from tests.fixtures.api_app import build_app


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to avoid 429s."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def api_app(requirements_handler, stock_service, receipt_service, reservation_service):
    """App backed by the real services over the seeded sample database."""
    return build_app(
        requirements_handler=requirements_handler,
        stock_service=stock_service,
        receipt_service=receipt_service,
        reservation_service=reservation_service,
    )


@pytest_asyncio.fixture
async def client(api_app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=api_app),
        base_url="http://test",
    ) as client:
        yield client


def _headers(role: str) -> dict:
    token = create_access_token(data={"sub": f"{role}-user", "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers():
    return _headers(ROLE_VIEWER)


@pytest.fixture
def material_headers():
    return _headers(ROLE_MATERIAL)


@pytest.fixture
def production_headers():
    return _headers(ROLE_PRODUCTION)


@pytest.fixture
def admin_headers():
    return _headers(ROLE_ADMIN)
