import asyncio
import logging
from datetime import date
from typing import Optional

import httpx

from entities import Actor, Director, Genre, Movie

logger = logging.getLogger(__name__)

TMDB_BASE = "https://api.themoviedb.org/3"

_semaphore = asyncio.Semaphore(10)


async def fetch_genres(
    client: httpx.AsyncClient, api_key: str, language: str = "en-US"
) -> list[tuple[int, str]]:
    """Fetch the TMDB movie genre taxonomy as (genre_id, name) pairs."""
    async with _semaphore:
        response = await client.get(
            f"{TMDB_BASE}/genre/movie/list",
            params={"api_key": api_key, "language": language},
        )
    response.raise_for_status()
    return [(g["id"], g["name"]) for g in response.json().get("genres", [])]


async def discover_movies(
    client: httpx.AsyncClient,
    api_key: str,
    page: int,
    original_language: str,
    language: str = "en-US",
) -> list[dict]:
    """Fetch one page of TMDB discover results for an original language."""
    async with _semaphore:
        response = await client.get(
            f"{TMDB_BASE}/discover/movie",
            params={
                "api_key": api_key,
                "language": language,
                "with_original_language": original_language,
                "sort_by": "popularity.desc",
                "page": page,
            },
        )
    response.raise_for_status()
    return response.json().get("results", [])


async def get_movie_credits(
    client: httpx.AsyncClient, api_key: str, tmdb_id: int, max_actors: int = 10
) -> tuple[Optional[str], list[str]]:
    """Return the director's name and the first ``max_actors`` cast names."""
    async with _semaphore:
        response = await client.get(
            f"{TMDB_BASE}/movie/{tmdb_id}/credits",
            params={"api_key": api_key},
        )
    response.raise_for_status()
    data = response.json()

    director = next(
        (c["name"] for c in data.get("crew", []) if c.get("job") == "Director" and c.get("name")),
        None,
    )
    cast = sorted(data.get("cast", []), key=lambda c: c.get("order", 0))
    actors: list[str] = []
    for member in cast:
        name = member.get("name")
        if name and name not in actors:
            actors.append(name)
        if len(actors) >= max_actors:
            break
    return director, actors


def _parse_release_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def build_movie(
    data: dict,
    genres_by_id: dict[int, str],
    director: Optional[str] = None,
    actors: Optional[list[str]] = None,
) -> Movie:
    """Turn a TMDB movie payload into an unsaved Movie with its relations."""
    genres = {
        Genre(genre_id=genre_id, name=genres_by_id[genre_id])
        for genre_id in data.get("genre_ids", [])
        if genre_id in genres_by_id
    }
    return Movie(
        imdb_id=data["id"],
        title=data.get("title") or data.get("original_title") or "",
        overview=data.get("overview") or None,
        release_date=_parse_release_date(data.get("release_date")),
        vote_average=data.get("vote_average") or 0.0,
        vote_count=data.get("vote_count") or 0,
        popularity=data.get("popularity") or 0.0,
        original_language=data.get("original_language"),
        original_title=data.get("original_title"),
        backdrop_path=data.get("backdrop_path"),
        poster_path=data.get("poster_path"),
        adult=bool(data.get("adult", False)),
        director=Director(name=director) if director else None,
        genres=genres,
        actors={Actor(name=name) for name in actors or []},
    )


async def _fetch_one(
    client: httpx.AsyncClient,
    api_key: str,
    data: dict,
    genres_by_id: dict[int, str],
    max_actors: int,
) -> Movie:
    try:
        director, actors = await get_movie_credits(client, api_key, data["id"], max_actors)
    except httpx.HTTPError as exc:
        logger.warning("Credits lookup failed for TMDB id %s: %s", data["id"], exc)
        director, actors = None, []
    return build_movie(data, genres_by_id, director, actors)


async def fetch_movies(
    api_key: str,
    genres_by_id: dict[int, str],
    pages: int = 5,
    original_language: str = "da",
    language: str = "en-US",
    max_actors: int = 10,
) -> list[Movie]:
    """Fetch discover pages and credits concurrently. Movies are de-duplicated by TMDB id."""
    async with httpx.AsyncClient(timeout=30.0) as client:
        page_results = await asyncio.gather(
            *[
                discover_movies(client, api_key, page, original_language, language)
                for page in range(1, pages + 1)
            ]
        )

        seen: set[int] = set()
        payloads: list[dict] = []
        for results in page_results:
            for data in results:
                if data.get("id") is None or data["id"] in seen:
                    continue
                seen.add(data["id"])
                payloads.append(data)
        logger.info("Discovered %d movies across %d page(s)", len(payloads), pages)

        return list(
            await asyncio.gather(
                *[_fetch_one(client, api_key, data, genres_by_id, max_actors) for data in payloads]
            )
        )
