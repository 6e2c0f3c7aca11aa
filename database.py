from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from config import settings


class Base(DeclarativeBase):
    pass


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


@event.listens_for(Engine, "connect")
def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII; replace it so Æ, Ø and Å match too.
    if hasattr(dbapi_connection, "create_function"):
        dbapi_connection.create_function("lower", 1, _unicode_lower)


engine: AsyncEngine = create_async_engine(settings.database_url)
SessionLocal: async_sessionmaker = async_sessionmaker(engine, expire_on_commit=False)


async def init_db(db_engine: Optional[AsyncEngine] = None) -> None:
    """Create the schema derived from the entity model."""
    db_engine = db_engine or engine
    url = db_engine.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    # registers the tables on Base.metadata
    import entities  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_session_factory() -> async_sessionmaker:
    return SessionLocal
