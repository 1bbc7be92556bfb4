from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from article_store.config import settings


def install_sqlite_savepoint_support(engine) -> None:
    """
    Make SAVEPOINT work on a SQLite *engine*.

    The sqlite3 driver only opens a transaction right before DML, so a
    leading SAVEPOINT would open (and its RELEASE commit) the outer
    transaction.  Turning off the driver's own BEGIN and emitting it from
    SQLAlchemy's ``begin`` event keeps savepoints nested inside it.

    Must be called once per SQLite engine (production engine below when
    ``DATABASE_URL`` points at SQLite, test engine in ``conftest.py``).
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

if engine.dialect.name == "sqlite":
    install_sqlite_savepoint_support(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession] = async_session):
    """
    Yield a session whose transaction commits when the block exits cleanly
    and rolls back when it raises.

    Service functions only flush; this is the single place that commits.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
