"""Fixtures for HTTP route tests.

Routes get their services through ``get_services``; tests override it with
a namespace of mocks so no lifespan (and no database) is needed.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from suiport.api.app import create_app
from suiport.api.dependencies import get_services


@pytest.fixture
def fake_services(price_cache, retry_policy) -> SimpleNamespace:
    """Service container stand-in with mocked collaborators."""
    return SimpleNamespace(
        resolver=AsyncMock(),
        portfolio=AsyncMock(),
        sui_price_repo=AsyncMock(),
        sevenk=AsyncMock(),
        cache=price_cache,
        retry_policy=retry_policy,
    )


@pytest.fixture
def app(settings, fake_services):
    application = create_app(settings)
    application.dependency_overrides[get_services] = lambda: fake_services
    return application


@pytest.fixture
def client(app) -> TestClient:
    """Test client that does not run the lifespan."""
    return TestClient(app)
