from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/movies.db"
    tmdb_api_key: Optional[str] = None
    tmdb_language: str = "en-US"
    original_language: str = "da"
    fetch_pages: int = 5
    max_actors: int = 10
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 7070

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
