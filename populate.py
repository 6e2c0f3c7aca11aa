import asyncio
import logging
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker

import database
import tmdb
from config import settings
from dao import GenreDAO, MovieDAO

logger = logging.getLogger(__name__)


def _require_api_key(api_key: Optional[str]) -> str:
    if not api_key:
        raise ValueError("TMDB_API_KEY is not configured")
    return api_key


async def populate_genres(api_key: Optional[str], session_factory: async_sessionmaker) -> dict[int, str]:
    """Store the TMDB genre taxonomy and return it as genre_id -> name."""
    api_key = _require_api_key(api_key)
    async with httpx.AsyncClient(timeout=30.0) as client:
        genres = await tmdb.fetch_genres(client, api_key, settings.tmdb_language)
    inserted = await GenreDAO(session_factory).save_genres(genres)
    logger.info("Stored %d genres (%d new)", len(genres), inserted)
    return dict(genres)


async def run_populate(
    api_key: Optional[str],
    session_factory: async_sessionmaker,
    pages: int = 5,
    original_language: str = "da",
) -> int:
    """
    Run the one-shot import: genres first, then movies with cast and director.
    Returns the number of movies stored.
    """
    api_key = _require_api_key(api_key)
    logger.info("Starting import: %d page(s), original language %r", pages, original_language)
    genres_by_id = await populate_genres(api_key, session_factory)

    movies = await tmdb.fetch_movies(
        api_key,
        genres_by_id,
        pages=pages,
        original_language=original_language,
        language=settings.tmdb_language,
        max_actors=settings.max_actors,
    )
    logger.info("Fetched %d movies from TMDB", len(movies))

    movie_dao = MovieDAO(session_factory)
    stored = 0
    for movie in movies:
        if movie.imdb_id is not None and await movie_dao.find_by_imdb_id(movie.imdb_id):
            logger.debug("Skipping %r, already stored", movie.title)
            continue
        await movie_dao.create_movie(movie)
        stored += 1

    logger.info("Import complete. %d new movie(s) stored.", stored)
    return stored


async def _main() -> None:
    await database.init_db()
    await run_populate(
        settings.tmdb_api_key,
        database.SessionLocal,
        pages=settings.fetch_pages,
        original_language=settings.original_language,
    )


def run() -> None:
    logging.basicConfig(level=settings.log_level)
    asyncio.run(_main())


if __name__ == "__main__":
    run()
