"""Database engine and async session factory."""

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from otp_ledger.config import settings
from otp_ledger.models.otp import OTP  # noqa: F401  (registers the table)
from otp_ledger.models.user import Base


def build_engine(
    database_url: str,
    *,
    echo: bool = False,
    isolation_level: str = "SERIALIZABLE",
) -> AsyncEngine:
    """Create an engine whose transactions are safe for the ledger.

    Server databases get the requested isolation level and rely on
    ``SELECT ... FOR UPDATE``.  SQLite has no row locks, so every
    transaction there starts with ``BEGIN IMMEDIATE`` and holds the
    database write lock until it commits or rolls back.
    """
    if make_url(database_url).get_backend_name() != "sqlite":
        return create_async_engine(
            database_url,
            echo=echo,
            isolation_level=isolation_level,
            pool_pre_ping=True,
        )

    engine = create_async_engine(database_url, echo=echo)

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        # stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = build_engine(
    settings.database_url,
    echo=settings.debug,
    isolation_level=settings.db_isolation_level,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create all tables that don't yet exist."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
