from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from campaign_dashboard.core.deps import get_db
from campaign_dashboard.core.rate_limit import limiter
from campaign_dashboard.core.security import get_current_user
from campaign_dashboard.main import app
from campaign_dashboard.models.user import User


@pytest.fixture(autouse=True)
def _no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def mock_db() -> AsyncMock:
    """AsyncSession stand-in; tests set ``execute`` results as needed."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def current_user() -> User:
    return User(id="user-1", name="Test User", email="test@example.com")


@pytest.fixture
async def client(mock_db: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated async HTTP client wired to the FastAPI app (no real server)."""
    app.dependency_overrides[get_db] = lambda: mock_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def auth_client(
    mock_db: AsyncMock, current_user: User
) -> AsyncGenerator[AsyncClient, None]:
    """Client whose requests are made as ``current_user``."""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: current_user
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()
