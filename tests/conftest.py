"""Test configuration and fixtures for the panels service."""

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core import config
from app.core.database.base import Base
from app.core.database.engine import get_db, register_models
from app.features.acl.store import SQLAlchemyACLStore, SQLAlchemyResourceDirectory
from app.features.panels.models import Panel
from app.features.views.models import View
from app.main import app as fastapi_app


TEST_SECRET = "panels-service-test-secret-0123456789abcdef"
TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"


@pytest.fixture(autouse=True)
def jwt_settings(monkeypatch):
    """Sign and verify test tokens with a fixed secret."""
    monkeypatch.setattr(config, "JWT_SECRET", TEST_SECRET)
    monkeypatch.setattr(config, "JWT_ALGORITHM", "HS256")


@pytest.fixture
async def engine():
    """In-memory database shared by every session of one test."""
    register_models()
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db):
    return SQLAlchemyACLStore(db)


@pytest.fixture
def resources(db):
    return SQLAlchemyResourceDirectory(db)


@pytest.fixture
def make_panel(db):
    """Insert a panel directly and return it."""
    async def _make_panel(tenant_id=TENANT, name="Panel", panel_id=None, user_id="creator"):
        panel = Panel(id=panel_id, tenant_id=tenant_id, user_id=user_id, name=name)
        db.add(panel)
        await db.commit()
        await db.refresh(panel)
        return panel
    return _make_panel


@pytest.fixture
def make_view(db):
    """Insert a view under a panel and return it."""
    async def _make_view(panel_id, tenant_id=TENANT, name="View", view_id=None, owner_user_id="creator"):
        view = View(
            id=view_id,
            tenant_id=tenant_id,
            owner_user_id=owner_user_id,
            panel_id=panel_id,
            name=name,
            visible_columns=[],
        )
        db.add(view)
        await db.commit()
        await db.refresh(view)
        return view
    return _make_view


@pytest.fixture
async def client(session_factory):
    """Async HTTP client against the app, with get_db bound to the test database."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    fastapi_app.dependency_overrides.clear()


def make_token(email, tenant_id=TENANT, user_id=None, **claims):
    payload = {"sub": user_id or email, "userEmail": email, **claims}
    if tenant_id is not None:
        payload["tenantId"] = tenant_id
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a user of a tenant."""
    def _auth_headers(email, tenant_id=TENANT, **claims):
        return {"Authorization": f"Bearer {make_token(email, tenant_id=tenant_id, **claims)}"}
    return _auth_headers
