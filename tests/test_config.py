def test_defaults(monkeypatch):
    for var in ("DATABASE_URL", "TMDB_API_KEY", "ORIGINAL_LANGUAGE", "FETCH_PAGES", "PORT"):
        monkeypatch.delenv(var, raising=False)

    from config import Settings

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite+aiosqlite:///data/movies.db"
    assert settings.tmdb_api_key is None
    assert settings.original_language == "da"
    assert settings.fetch_pages == 5
    assert settings.max_actors == 10
    assert settings.port == 7070


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "abc123")
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///tmp/other.db")
    monkeypatch.setenv("FETCH_PAGES", "2")

    from importlib import reload
    import config

    reload(config)

    assert config.settings.tmdb_api_key == "abc123"
    assert config.settings.database_url == "sqlite+aiosqlite:///tmp/other.db"
    assert config.settings.fetch_pages == 2


def test_invalid_integer_rejected(monkeypatch):
    import pytest
    from pydantic import ValidationError

    from config import Settings

    monkeypatch.setenv("FETCH_PAGES", "many")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
