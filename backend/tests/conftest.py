"""Shared fixtures: a fresh in-memory store and an in-process API client."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.api import deps
from app.main import app
from app.utils import r2


@pytest.fixture(autouse=True)
def _fresh_store(monkeypatch):
    """Every test starts with an empty in-memory store and no R2 client."""
    monkeypatch.setattr(deps.settings, "use_database", False)
    monkeypatch.setattr(r2.settings, "r2_account_id", "")
    deps.reset_store()
    r2.reset_client()
    yield
    deps.reset_store()
    r2.reset_client()


@pytest.fixture
async def client():
    # Unhandled errors must come back as 500 responses, not test exceptions
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
