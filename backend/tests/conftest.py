import asyncio
import os
from collections.abc import Callable, Generator
from datetime import datetime
from typing import Dict

# Keep pytest output high-signal by disabling outbound Sentry capture in tests.
os.environ["SENTRY_DSN"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from couponme.api.v1 import auth as auth_api
from couponme.core import metrics
from couponme.core.security import create_access_token, hash_password
from couponme.db.base import Base
from couponme.db.session import enable_sqlite_foreign_keys, get_session
from couponme.main import app
from couponme.models.category import Category
from couponme.models.user import User, UserRole

DEFAULT_PASSWORD = "password123"


@pytest.fixture(autouse=True)
def _reset_process_state() -> Generator[None, None, None]:
    # Rate-limit buckets and counters are process-global and can leak across tests.
    for dep in (auth_api.login_rate_limit, auth_api.register_rate_limit):
        dep.buckets.clear()
    metrics.reset()
    yield
    for dep in (auth_api.login_rate_limit, auth_api.register_rate_limit):
        dep.buckets.clear()


@pytest.fixture
def test_app() -> Generator[Dict[str, object], None, None]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    enable_sqlite_foreign_keys(engine.sync_engine)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async def init_models() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_models())

    async def override_get_session():
        async with SessionLocal() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    client = TestClient(app)
    yield {"client": client, "session_factory": SessionLocal}
    client.close()
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


@pytest.fixture
def client(test_app: Dict[str, object]) -> TestClient:
    return test_app["client"]  # type: ignore[return-value]


@pytest.fixture
def make_user(test_app: Dict[str, object]) -> Callable[..., User]:
    session_factory = test_app["session_factory"]

    def _make(
        email: str,
        role: UserRole = UserRole.USER,
        *,
        name: str = "Test User",
        membership_expiry: datetime | None = None,
    ) -> User:
        async def create() -> User:
            async with session_factory() as session:  # type: ignore[operator]
                user = User(
                    email=email,
                    hashed_password=hash_password(DEFAULT_PASSWORD),
                    name=name,
                    role=role,
                    membership_expiry=membership_expiry,
                )
                session.add(user)
                await session.commit()
                await session.refresh(user)
                return user

        return asyncio.run(create())

    return _make


@pytest.fixture
def make_category(test_app: Dict[str, object]) -> Callable[..., Category]:
    session_factory = test_app["session_factory"]

    def _make(slug: str = "books", name_en: str = "Books", name_el: str = "Βιβλία") -> Category:
        async def create() -> Category:
            async with session_factory() as session:  # type: ignore[operator]
                category = Category(slug=slug, name_en=name_en, name_el=name_el)
                session.add(category)
                await session.commit()
                await session.refresh(category)
                return category

        return asyncio.run(create())

    return _make


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(str(user.id), user.role.value, user.membership_expiry)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    return auth_headers
