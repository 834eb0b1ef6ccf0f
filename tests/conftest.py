"""Test fixtures — a temporary served root and FastAPI test clients."""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from treeserve.config import Settings
from treeserve.main import create_app

TEST_PASSWORD = "hunter2"


@pytest.fixture
def served_root(tmp_path):
    """Served root with ``a.txt`` (10 bytes) and an empty directory ``b``."""
    root = tmp_path / "srv"
    root.mkdir()
    (root / "a.txt").write_bytes(b"0123456789")
    (root / "b").mkdir()
    return root


@pytest.fixture
def make_settings(served_root):
    def _make(**overrides) -> Settings:
        values = {"root_dir": str(served_root), "_env_file": None}
        values.update(overrides)
        return Settings(**values)

    return _make


async def _client_for(settings: Settings):
    app = create_app(settings)
    transport = ASGITransport(app=app)
    async with app.router.lifespan_context(app):
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c


@pytest_asyncio.fixture
async def client(make_settings):
    """Async test client for an app without a password."""
    async for c in _client_for(make_settings()):
        yield c


@pytest_asyncio.fixture
async def auth_client(make_settings):
    """Async test client for an app protected by ``TEST_PASSWORD``."""
    async for c in _client_for(make_settings(password=TEST_PASSWORD)):
        yield c


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    """Keep a developer's TREESERVE_* environment out of the tests."""
    for key in list(os.environ):
        if key.startswith("TREESERVE_"):
            monkeypatch.delenv(key)
