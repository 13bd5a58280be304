"""Tests for environment-driven settings."""

from todos.settings import get_settings, parse_users


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "SESSION_SECRET", "TODO_USERS", "DB_POOL_MIN_SIZE", "DB_POOL_MAX_SIZE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.database_url is None
    assert settings.session_secret == "dev-session-secret"
    assert settings.users == {}
    assert settings.db_pool_min_size == 1
    assert settings.db_pool_max_size == 5
    assert settings.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/todos")
    monkeypatch.setenv("DB_POOL_MIN_SIZE", "6")
    monkeypatch.setenv("DB_POOL_MAX_SIZE", "2")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.database_url == "postgresql://localhost/todos"
    assert settings.db_pool_min_size == 6
    assert settings.db_pool_max_size == 6
    assert settings.log_level == "DEBUG"


def test_parse_users():
    raw = "admin:$2b$12$abc, guest:$2b$12$def,broken,:nohash"
    assert parse_users(raw) == {"admin": "$2b$12$abc", "guest": "$2b$12$def"}
    assert parse_users("") == {}
