"""Data access objects, one per entity type.

Every accessor is built from an ``async_sessionmaker`` and opens a short-lived
session per call. Lookups that find nothing return ``None`` or an empty list;
SQLAlchemy errors are left to propagate to the caller.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import Select, delete, extract, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from entities import Actor, Director, Genre, Movie, movie_actor, movie_genre

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 20
TOP_N = 10
SQLITE_MAX_INT = 2**63 - 1


def paginate(stmt: Select, page: Optional[int] = None, size: Optional[int] = None) -> Select:
    """Apply page/size to a statement. Leaves it untouched when both are None."""
    if page is None and size is None:
        return stmt
    page = DEFAULT_PAGE if page is None else page
    size = DEFAULT_PAGE_SIZE if size is None else size
    return stmt.offset(min(page * size, SQLITE_MAX_INT)).limit(size)


async def _resolve_genre(session: AsyncSession, genre: Genre, seen: dict[str, Genre]) -> Genre:
    if genre.name in seen:
        return seen[genre.name]
    existing = None
    if genre.genre_id is not None:
        existing = await session.scalar(select(Genre).where(Genre.genre_id == genre.genre_id))
    if existing is None:
        existing = await session.scalar(select(Genre).where(Genre.name == genre.name))
    resolved = existing or Genre(genre_id=genre.genre_id, name=genre.name)
    seen[genre.name] = resolved
    return resolved


async def _resolve_actor(session: AsyncSession, actor: Actor, seen: dict[str, Actor]) -> Actor:
    if actor.name in seen:
        return seen[actor.name]
    existing = await session.scalar(select(Actor).where(Actor.name == actor.name))
    resolved = existing or Actor(name=actor.name)
    seen[actor.name] = resolved
    return resolved


async def _resolve_director(session: AsyncSession, director: Optional[Director]) -> Optional[Director]:
    if director is None or not director.name:
        return None
    existing = await session.scalar(select(Director).where(Director.name == director.name))
    return existing or Director(name=director.name)


class MovieDAO:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def _all(self, stmt: Select) -> list[Movie]:
        async with self._session_factory() as session:
            result = await session.scalars(stmt)
            return list(result.all())

    async def _one(self, stmt: Select) -> Optional[Movie]:
        async with self._session_factory() as session:
            return await session.scalar(stmt)

    async def create_movie(self, movie: Movie) -> Movie:
        """Persist a new movie, reusing genres, actors and director that already exist."""
        async with self._session_factory.begin() as session:
            # Detach the transient relations before resolving, so the lookups'
            # autoflush cannot insert them as new rows.
            genres, actors, director = set(movie.genres), set(movie.actors), movie.director
            movie.genres, movie.actors, movie.director = set(), set(), None

            genre_seen: dict[str, Genre] = {}
            actor_seen: dict[str, Actor] = {}
            movie.director = await _resolve_director(session, director)
            movie.genres = {await _resolve_genre(session, g, genre_seen) for g in genres}
            movie.actors = {await _resolve_actor(session, a, actor_seen) for a in actors}
            session.add(movie)
        logger.info("Created movie %r (id=%s)", movie.title, movie.id)
        return movie

    async def delete_by_title(self, title: str) -> int:
        async with self._session_factory.begin() as session:
            movies = (await session.scalars(select(Movie).where(Movie.title == title))).all()
            for movie in movies:
                await session.delete(movie)
        logger.info("Deleted %d movie(s) titled %r", len(movies), title)
        return len(movies)

    async def find_by_id(self, movie_id: int) -> Optional[Movie]:
        async with self._session_factory() as session:
            return await session.get(Movie, movie_id)

    async def find_by_imdb_id(self, imdb_id: int) -> Optional[Movie]:
        return await self._one(select(Movie).where(Movie.imdb_id == imdb_id))

    async def find_by_title(self, title: str) -> Optional[Movie]:
        return await self._one(select(Movie).where(Movie.title == title).order_by(Movie.id).limit(1))

    async def count_movies(self) -> int:
        async with self._session_factory() as session:
            return await session.scalar(select(func.count()).select_from(Movie)) or 0

    async def get_all_movies(self) -> list[Movie]:
        return await self._all(select(Movie).order_by(Movie.id))

    async def get_movies(self, page: int = DEFAULT_PAGE, size: int = DEFAULT_PAGE_SIZE) -> list[Movie]:
        return await self._all(paginate(select(Movie).order_by(Movie.id), page, size))

    async def get_movies_by_genre(
        self, genre_name: str, page: Optional[int] = None, size: Optional[int] = None
    ) -> list[Movie]:
        stmt = select(Movie).join(Movie.genres).where(Genre.name == genre_name).order_by(Movie.id)
        return await self._all(paginate(stmt, page, size))

    async def get_movies_by_rating(
        self, min_rating: float, page: Optional[int] = None, size: Optional[int] = None
    ) -> list[Movie]:
        stmt = select(Movie).where(Movie.vote_average >= min_rating).order_by(Movie.id)
        return await self._all(paginate(stmt, page, size))

    async def get_movies_by_release_year(
        self, year: int, page: Optional[int] = None, size: Optional[int] = None
    ) -> list[Movie]:
        stmt = (
            select(Movie)
            .where(extract("year", Movie.release_date) == year)
            .order_by(Movie.id)
        )
        return await self._all(paginate(stmt, page, size))

    async def get_movies_by_director(self, director_name: str) -> list[Movie]:
        stmt = select(Movie).join(Movie.director).where(Director.name == director_name).order_by(Movie.id)
        return await self._all(stmt)

    async def get_movies_by_actor(self, actor_name: str) -> list[Movie]:
        stmt = select(Movie).join(Movie.actors).where(Actor.name == actor_name).order_by(Movie.id)
        return await self._all(stmt)

    async def search_movies_by_title(self, fragment: str) -> list[Movie]:
        stmt = (
            select(Movie)
            .where(func.lower(Movie.title).contains(fragment.lower(), autoescape=True))
            .order_by(Movie.title)
        )
        return await self._all(stmt)

    async def update_release_date(self, title: str, release_date: date) -> Optional[Movie]:
        async with self._session_factory.begin() as session:
            movie = await session.scalar(select(Movie).where(Movie.title == title).order_by(Movie.id).limit(1))
            if movie is None:
                logger.info("No movie titled %r to update", title)
                return None
            movie.release_date = release_date
        logger.info("Release date of %r set to %s", title, release_date)
        return movie

    async def get_total_average_rating(self) -> float:
        async with self._session_factory() as session:
            average = await session.scalar(select(func.avg(Movie.vote_average)))
        return float(average) if average is not None else 0.0

    async def get_top10_lowest_rated(self) -> list[Movie]:
        return await self._all(select(Movie).order_by(Movie.vote_average.asc(), Movie.id).limit(TOP_N))

    async def get_top10_highest_rated(self) -> list[Movie]:
        return await self._all(select(Movie).order_by(Movie.vote_average.desc(), Movie.id).limit(TOP_N))

    async def get_top10_most_popular(self) -> list[Movie]:
        return await self._all(select(Movie).order_by(Movie.popularity.desc(), Movie.id).limit(TOP_N))


class GenreDAO:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def create_genre(self, genre: Genre) -> Genre:
        async with self._session_factory.begin() as session:
            session.add(genre)
        return genre

    async def find_by_name(self, name: str) -> Optional[Genre]:
        async with self._session_factory() as session:
            return await session.scalar(select(Genre).where(Genre.name == name))

    async def find_by_genre_id(self, genre_id: int) -> Optional[Genre]:
        async with self._session_factory() as session:
            return await session.scalar(select(Genre).where(Genre.genre_id == genre_id))

    async def get_all_genres(self) -> list[Genre]:
        async with self._session_factory() as session:
            return list((await session.scalars(select(Genre).order_by(Genre.name))).all())

    async def delete_by_name(self, name: str) -> int:
        async with self._session_factory.begin() as session:
            ids = select(Genre.id).where(Genre.name == name).scalar_subquery()
            await session.execute(delete(movie_genre).where(movie_genre.c.genre_id == ids))
            result = await session.execute(delete(Genre).where(Genre.name == name))
        return result.rowcount

    async def save_genres(self, genres: Iterable[tuple[int, str]]) -> int:
        """Upsert (TMDB genre id, name) pairs. Returns how many rows were inserted."""
        inserted = 0
        async with self._session_factory.begin() as session:
            for genre_id, name in genres:
                genre = await session.scalar(select(Genre).where(Genre.genre_id == genre_id))
                if genre is None:
                    genre = await session.scalar(select(Genre).where(Genre.name == name))
                if genre is None:
                    session.add(Genre(genre_id=genre_id, name=name))
                    inserted += 1
                else:
                    genre.genre_id = genre_id
                    genre.name = name
        return inserted


class ActorDAO:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def create_actor(self, actor: Actor) -> Actor:
        async with self._session_factory.begin() as session:
            session.add(actor)
        return actor

    async def find_by_name(self, name: str) -> Optional[Actor]:
        async with self._session_factory() as session:
            return await session.scalar(select(Actor).where(Actor.name == name))

    async def get_all_actors(self) -> list[Actor]:
        async with self._session_factory() as session:
            return list((await session.scalars(select(Actor).order_by(Actor.name))).all())

    async def delete_by_name(self, name: str) -> int:
        async with self._session_factory.begin() as session:
            ids = select(Actor.id).where(Actor.name == name).scalar_subquery()
            await session.execute(delete(movie_actor).where(movie_actor.c.actor_id == ids))
            result = await session.execute(delete(Actor).where(Actor.name == name))
        return result.rowcount


class DirectorDAO:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def create_director(self, director: Director) -> Director:
        async with self._session_factory.begin() as session:
            session.add(director)
        return director

    async def find_by_name(self, name: str) -> Optional[Director]:
        async with self._session_factory() as session:
            return await session.scalar(select(Director).where(Director.name == name))

    async def get_all_directors(self) -> list[Director]:
        async with self._session_factory() as session:
            return list((await session.scalars(select(Director).order_by(Director.name))).all())

    async def delete_by_name(self, name: str) -> int:
        """Delete a director. Their movies are kept with no director."""
        async with self._session_factory.begin() as session:
            ids = select(Director.id).where(Director.name == name).scalar_subquery()
            await session.execute(
                update(Movie).where(Movie.director_id == ids).values(director_id=None)
            )
            result = await session.execute(delete(Director).where(Director.name == name))
        return result.rowcount
