from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from couponme.core.config import settings

is_sqlite = settings.database_url.startswith("sqlite")
connect_args = {"check_same_thread": False} if is_sqlite else {}

engine = create_async_engine(settings.database_url, future=True, echo=False, connect_args=connect_args)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, class_=AsyncSession)


def enable_sqlite_foreign_keys(sync_engine) -> None:  # type: ignore[no-untyped-def]
    """SQLite ignores ON DELETE rules unless the pragma is set per connection."""

    @event.listens_for(sync_engine, "connect")
    def _set_pragma(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if is_sqlite:
    enable_sqlite_foreign_keys(engine.sync_engine)


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency to provide a database session."""
    async with SessionLocal() as session:
        yield session
