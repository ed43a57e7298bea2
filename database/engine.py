import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from sqlalchemy import text, event

from core.config import settings

DATABASE_URL = settings.database_url

# log for debugging purposes
logger = logging.getLogger("database_engine")


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the event loop that opened them
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
    }


db_engine = create_async_engine(
    DATABASE_URL, echo=settings.database_echo, **_engine_options(DATABASE_URL)
)


# SQLite only enforces ON DELETE CASCADE with the pragma set per connection
@event.listens_for(db_engine.sync_engine, "connect")
def connect(dbapi_connection, connection_record):
    if db_engine.dialect.name == "sqlite":
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create async session maker to be used throughout the application
AsyncSessionLocal = async_sessionmaker(
    db_engine, class_=AsyncSession, expire_on_commit=False
)


# Base class for declarative models
class Base(DeclarativeBase):
    pass


# Dependency to get DB session
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


def _load_models() -> None:
    # Registers every table on Base.metadata and attaches the row hooks
    import database.models  # noqa: F401


# Function to initialize the database (create tables)
async def init_db():
    _load_models()
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")


async def drop_db():
    """Drop every table. Used by the test suite."""
    _load_models()
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def ping_db() -> bool:
    """Return True when the database answers a trivial query."""
    async with db_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


# Function to close database connections
async def close_db():
    """Close database engine and connections."""
    await db_engine.dispose()
