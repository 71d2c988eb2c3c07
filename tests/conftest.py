from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api_template.config import Settings
from api_template.main import create_app
from tests.factories import add_failing_routes, make_settings

# Pytest only picks up fixtures from conftest.py files. Fixtures defined in other
# modules (like tests/seeds.py) are invisible unless we register them here.
pytest_plugins = ["tests.seeds"]


@pytest.fixture
def settings() -> Settings:
    """Production settings without static files, so test routes stay reachable."""
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Application built from ``settings`` plus routes that fail on purpose."""
    return add_failing_routes(create_app(settings))


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client talking to the app in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
