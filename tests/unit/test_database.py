"""Unit tests for src/infrastructure/database.py.

Tests cover Settings defaults, env var override, and object types.
No database connection is required.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from src.infrastructure.database import AsyncSessionLocal, Base, Settings, engine


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "DATABASE_ECHO", "API_BASE_URL", "API_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_default_url_uses_asyncpg(clean_env):
    assert "postgresql+asyncpg" in Settings(_env_file=None).database_url


def test_settings_default_url_targets_localhost(clean_env):
    assert "localhost" in Settings(_env_file=None).database_url


def test_settings_reads_database_url_from_env(clean_env):
    clean_env.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@myhost/mydb")
    assert Settings(_env_file=None).database_url == "postgresql+asyncpg://u:p@myhost/mydb"


def test_settings_echo_is_off_by_default(clean_env):
    assert Settings(_env_file=None).database_echo is False


def test_settings_api_defaults(clean_env):
    config = Settings(_env_file=None)
    assert config.api_base_url == "http://localhost:8000"
    assert config.api_timeout == 10.0


def test_settings_reads_api_values_from_env(clean_env):
    clean_env.setenv("API_BASE_URL", "https://blog.example.com")
    clean_env.setenv("API_TIMEOUT", "2.5")
    config = Settings(_env_file=None)
    assert config.api_base_url == "https://blog.example.com"
    assert config.api_timeout == 2.5


def test_base_is_declarative_base():
    assert issubclass(Base, DeclarativeBase)


def test_engine_is_async():
    assert isinstance(engine, AsyncEngine)


def test_session_factory_produces_async_sessions():
    assert isinstance(AsyncSessionLocal, async_sessionmaker)
    assert AsyncSessionLocal.class_ is AsyncSession


def test_session_factory_keeps_attributes_after_commit():
    assert AsyncSessionLocal.kw["expire_on_commit"] is False
