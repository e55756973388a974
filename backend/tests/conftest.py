"""
RecipePlanner Backend - Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh for each test):
    ├── db_engine:         In-memory SQLite with every table created
    ├── session_factory:   async_sessionmaker bound to db_engine
    ├── db_session:        One AsyncSession for service-level tests
    ├── mock_db_session:   AsyncMock session for forcing database failures
    ├── hasher / codec:    Cheap bcrypt (4 rounds) and a test signing secret
    ├── auth_service:      AuthService built from the two above
    ├── fake_recipe_api:   Stand-in for Spoonacular behind httpx.MockTransport
    ├── app:               create_app() with the DB session and recipe source swapped
    ├── client:            HTTPX AsyncClient talking to `app` over ASGI
    └── register:          Helper that registers an account and returns its token
"""

import os

# Override settings for testing BEFORE any recipeplanner imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-signing-secret-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SPOONACULAR_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import Any, Callable, Dict, List, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from recipeplanner.database import Base, get_db_session  # noqa: E402
from recipeplanner.models.meal_plan import MealPlan  # noqa: E402,F401
from recipeplanner.models.recipe import Recipe  # noqa: E402,F401
from recipeplanner.models.shopping_list import ShoppingListItem  # noqa: E402,F401
from recipeplanner.models.user import User  # noqa: E402,F401
from recipeplanner.services.auth_service import AuthService  # noqa: E402
from recipeplanner.services.circuit_breaker import CircuitBreaker  # noqa: E402
from recipeplanner.services.password_service import PasswordHasher  # noqa: E402
from recipeplanner.services.spoonacular_service import SpoonacularService  # noqa: E402
from recipeplanner.services.token_service import TokenCodec  # noqa: E402

TEST_SECRET = "another-test-secret-at-least-32-bytes-long"
DEFAULT_PASSWORD = "secret123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    A private in-memory SQLite database per test.

    StaticPool keeps one connection open so every session sees the same
    in-memory database. Foreign keys are switched on so the ON DELETE CASCADE
    and users.id references behave as they do on PostgreSQL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for driving failure paths a real database won't hit.

    Usage:
        mock_db_session.execute = AsyncMock(side_effect=OperationalError(...))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Auth collaborators
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec():
    return TokenCodec(secret=TEST_SECRET, ttl_seconds=3600)


@pytest.fixture
def auth_service(hasher, codec):
    return AuthService(hasher=hasher, codec=codec)


# ══════════════════════════════════════════════════════════════════════════
# Fake recipe API
# ══════════════════════════════════════════════════════════════════════════

class FakeRecipeApi:
    """
    httpx.MockTransport handler imitating the two Spoonacular endpoints.

    Every request is recorded in `requests`. Set `status` to make every
    response fail, or `error` to raise a transport error instead.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status = 200
        self.error: Optional[Exception] = None
        self.search_results: List[Dict[str, Any]] = [
            {"id": 73420, "title": "Apple Or Peach Strudel", "usedIngredientCount": 1},
            {"id": 632660, "title": "Apricot Glazed Apple Tart", "usedIngredientCount": 2},
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status != 200:
            return httpx.Response(self.status, json={"status": "failure", "code": self.status})
        if request.url.path == "/recipes/findByIngredients":
            return httpx.Response(200, json=self.search_results)
        if request.url.path.endswith("/information"):
            recipe_id = int(request.url.path.split("/")[2])
            return httpx.Response(200, json={"id": recipe_id, "title": "Apple Or Peach Strudel"})
        return httpx.Response(404, json={"status": "failure", "code": 404})


@pytest.fixture
def fake_recipe_api():
    return FakeRecipeApi()


@pytest_asyncio.fixture
async def recipe_source(fake_recipe_api):
    source = SpoonacularService(
        api_key="test-key-not-real",
        base_url="https://api.spoonacular.test",
        page_size=10,
        circuit_breaker=CircuitBreaker(failure_threshold=3, recovery_timeout=60),
        transport=httpx.MockTransport(fake_recipe_api),
    )
    yield source
    await source.aclose()


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(session_factory, recipe_source):
    """
    A fresh application per test, wired to the test database and the fake
    recipe API. The session override commits/rolls back like the real one.
    """
    from recipeplanner.main import create_app

    application = create_app()
    await application.state.recipe_source.aclose()
    application.state.recipe_source = recipe_source

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient configured to talk to the FastAPI app.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


def auth_headers(token: str) -> Dict[str, str]:
    return {"x-auth-token": token}


@pytest.fixture
def register(client) -> Callable:
    """
    Register an account through the API and return its token.

        token = await register("cook@example.com")
    """

    async def _register(
        email: str = "cook@example.com",
        password: str = DEFAULT_PASSWORD,
        name: Optional[str] = "Cook",
    ) -> str:
        body = {"email": email, "password": password}
        if name is not None:
            body["name"] = name
        response = await client.post("/api/auth/register", json=body)
        assert response.status_code == 201, response.text
        return response.json()["token"]

    return _register
