"""API test fixtures — FastAPI app wired to the per-test SQLite container.

Invariants:
    - The lifespan is not run under ASGITransport; the container is injected on app.state
    - Container removed after each test so no state leaks between tests
"""

import pytest
from httpx import ASGITransport, AsyncClient

from funds_transfer.config import get_settings
from funds_transfer.container import build_container
from funds_transfer.main import app


@pytest.fixture
def container(db_manager, clock, audit):
    return build_container(get_settings(), db=db_manager, clock=clock, audit=audit)


@pytest.fixture
async def client(container):
    """FastAPI test client over the injected service container."""
    app.state.container = container
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.state.container = None
