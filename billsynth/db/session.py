from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from billsynth.core.config import settings

class Base(DeclarativeBase):
    pass

from sqlalchemy.engine.url import make_url

def _get_db_config(url: str | None = None):
    url = url or settings.DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")

    url_obj = make_url(url)
    connect_args = {}

    # Ensure driver is asyncpg for Postgres; sqlite stays on aiosqlite
    if url_obj.drivername.startswith("postgres"):
        url_obj = url_obj.set(drivername="postgresql+asyncpg")

        # asyncpg does not support 'sslmode' in query params
        # We strip it and pass 'ssl' in connect_args
        query_params = dict(url_obj.query)
        if "sslmode" in query_params:
            ssl_mode = query_params.pop("sslmode")
            url_obj = url_obj.set(query=query_params)

            if ssl_mode == "require":
                connect_args["ssl"] = "require"
            elif ssl_mode == "disable":
                connect_args["ssl"] = False
            else:
                connect_args["ssl"] = ssl_mode
    elif url_obj.drivername == "sqlite":
        url_obj = url_obj.set(drivername="sqlite+aiosqlite")

    return url_obj, connect_args

_db_url, _db_connect_args = _get_db_config()

engine = create_async_engine(
    _db_url,
    echo=settings.DEBUG_MODE,
    connect_args=_db_connect_args
)

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
