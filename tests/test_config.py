"""
Configuration Tests
===================

Startup fails fast when required environment variables are missing or
invalid.
"""

import pytest

from app.config import ConfigurationError, Settings, get_settings

REQUIRED = {
    "PORT": "8080",
    "SUPABASE_URL": "https://project.supabase.co/",
    "SUPABASE_SERVICE_ROLE_KEY": "service-role",
    "SUPABASE_DATABASE_URL": "postgresql://u:p@db:5432/postgres",
}


@pytest.fixture
def env(monkeypatch):
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    yield monkeypatch
    get_settings.cache_clear()


def test_loads_required_values(env):
    settings = Settings(_env_file=None)

    assert settings.PORT == 8080
    # Trailing slash is dropped
    assert settings.SUPABASE_URL == "https://project.supabase.co"
    assert settings.SUPABASE_SERVICE_ROLE_KEY == "service-role"


def test_defaults(env):
    env.delenv("MOCK_RECEIPT_DELAY_MS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.MOCK_RECEIPT_DELAY_MS == 100
    assert settings.MOCK_RECEIPT_EXPIRY_DAYS is None


@pytest.mark.parametrize(
    "dsn",
    [
        "postgresql://u:p@db:5432/postgres",
        "postgres://u:p@db:5432/postgres",
        "postgresql+asyncpg://u:p@db:5432/postgres",
    ],
)
def test_database_url_uses_asyncpg(env, dsn):
    env.setenv("SUPABASE_DATABASE_URL", dsn)

    settings = Settings(_env_file=None)

    assert settings.database_url_async == "postgresql+asyncpg://u:p@db:5432/postgres"


def test_allowed_origins_list(env):
    env.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")

    assert Settings(_env_file=None).allowed_origins_list == [
        "https://a.example",
        "https://b.example",
    ]


@pytest.mark.parametrize("name", sorted(REQUIRED))
def test_missing_required_variable_fails_fast(env, name):
    env.delenv(name)
    get_settings.cache_clear()

    with pytest.raises(ConfigurationError, match=name):
        get_settings()


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("PORT", "not-a-port"),
        ("PORT", "70000"),
        ("SUPABASE_URL", "project.supabase.co"),
        ("SUPABASE_URL", "ftp://project.supabase.co"),
        ("SUPABASE_SERVICE_ROLE_KEY", ""),
        ("SUPABASE_DATABASE_URL", ""),
        ("SUPABASE_DATABASE_URL", "mysql://u:p@db:3306/app"),
        ("SUPABASE_DATABASE_URL", "not a dsn"),
    ],
)
def test_invalid_variable_fails_fast(env, name, value):
    env.setenv(name, value)
    get_settings.cache_clear()

    with pytest.raises(ConfigurationError, match=name):
        get_settings()


def test_error_names_every_missing_variable(env):
    env.delenv("PORT")
    env.delenv("SUPABASE_URL")
    get_settings.cache_clear()

    with pytest.raises(ConfigurationError) as exc_info:
        get_settings()

    assert "PORT" in str(exc_info.value)
    assert "SUPABASE_URL" in str(exc_info.value)
