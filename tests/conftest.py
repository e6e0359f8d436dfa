import pytest
import pytest_asyncio
from datetime import datetime
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from umrah_feedback.main import app
from umrah_feedback.database import Base, get_db, enable_sqlite_savepoints
from umrah_feedback.api.deps import create_access_token
from umrah_feedback.models import Survey, Profile
from tests.factories import SurveyFactory


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    enable_sqlite_savepoints(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(test_db: AsyncSession):
    """Create test client with overridden database."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def bearer(sub: str, email: str | None = None) -> dict:
    token = create_access_token(data={"sub": sub, "email": email or f"{sub}@example.com"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> dict:
    return bearer("pilgrim-1")


@pytest_asyncio.fixture
async def admin_headers(test_db: AsyncSession) -> dict:
    admin = Profile(id="admin-1", email="admin@example.com", is_admin=True)
    test_db.add(admin)
    await test_db.commit()
    return bearer("admin-1")


@pytest.fixture
def add_survey(test_db: AsyncSession):
    """Insert a survey whose text answers are ``texts``."""

    async def _add(texts=(), created_at: datetime | None = None, **kwargs) -> Survey:
        data = SurveyFactory(texts=list(texts), **kwargs)
        if created_at is not None:
            data["created_at"] = created_at
        survey = Survey(**data)
        test_db.add(survey)
        await test_db.commit()
        await test_db.refresh(survey)
        return survey

    return _add
