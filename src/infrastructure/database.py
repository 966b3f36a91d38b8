"""Settings, async SQLAlchemy engine and session factory.

SqlRepository takes any async_sessionmaker; AsyncSessionLocal is the one the
application wires in, bound to settings.database_url.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "postgresql+asyncpg://localhost:5432/blog"
    database_echo: bool = False
    api_base_url: str = "http://localhost:8000"
    api_timeout: float = 10.0  # seconds, per request


settings = Settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""
