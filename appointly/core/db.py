from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from appointly.core.config import settings


def _async_url(database_url: str) -> str:
    """asyncpg does not accept psycopg params like sslmode/channel_binding.
    Convert the scheme and strip them; SSL is enabled via connect_args."""
    parsed = urlparse(database_url)
    if parsed.scheme not in ("postgresql", "postgres"):
        return database_url
    query = parse_qs(parsed.query, keep_blank_values=True)
    query.pop("sslmode", None)
    query.pop("channel_binding", None)
    new_query = urlencode(query, doseq=True)
    return urlunparse(("postgresql+asyncpg", parsed.netloc, parsed.path, parsed.params, new_query, parsed.fragment))


def _serialize_sqlite_writes(engine: AsyncEngine) -> None:
    """Take the SQLite write lock at BEGIN so two booking transactions for the
    same owner run one after the other (SQLite has no SELECT ... FOR UPDATE)."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself (also makes SAVEPOINT work)
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    url = _async_url(database_url)
    if url.startswith("sqlite"):
        # NullPool: aiosqlite connections are bound to the loop that opened them
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"timeout": settings.db_pool_timeout},
        )
        _serialize_sqlite_writes(engine)
        return engine
    connect_args: dict = {"command_timeout": settings.db_pool_timeout}
    if settings.database_ssl:
        connect_args["ssl"] = True
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=settings.db_pool_timeout,
        connect_args=connect_args,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine_for(settings.database_url, echo=settings.env == "development")
async_session_maker = create_session_maker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create tables if using create_all; prefer Alembic in production."""
    # register tables on the metadata
    import appointly.models  # noqa: F401

    async with (target or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
