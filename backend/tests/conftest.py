import os

import pytest

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# 테스트용 환경 변수 세팅 (app 모듈 임포트 전에 적용)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from blog.main import app
from blog.database import Base
from blog.database import get_db as real_get_db
from blog.auth.service import issue_token
from blog.users.models import Role, User
from blog.users.service import hash_password


@pytest.fixture()
async def test_engine():
    # 테스트마다 새 메모리 SQLite (StaticPool로 단일 연결 공유)
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture(autouse=True)
async def override_db(db):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db):
    """DB에 사용자를 직접 만들고 (user, token)을 돌려줍니다."""
    async def _make(
        username: str = "alice",
        email: str | None = None,
        password: str = "Password123",
        role: Role = Role.USER,
        is_active: bool = True,
    ):
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            hashed_password=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user, issue_token(user)

    return _make
