from datetime import date
from pathlib import Path
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import database
from dao import MovieDAO
from entities import Actor, Director, Genre, Movie


@pytest.fixture
def tmp_db(tmp_path) -> Path:
    """Returns path to a temporary SQLite database file."""
    return tmp_path / "test.db"


@pytest.fixture
async def session_factory(tmp_db):
    """Session factory bound to a fresh schema in the temporary database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_db}", poolclass=NullPool)
    await database.init_db(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


def make_movie(
    title: str,
    imdb_id: int,
    rating: float,
    popularity: float,
    released: Optional[date] = None,
    director: Optional[str] = None,
    genres: tuple = (),
    actors: tuple = (),
) -> Movie:
    return Movie(
        imdb_id=imdb_id,
        title=title,
        overview=f"{title} is a Danish film used in the catalog tests.",
        release_date=released,
        vote_average=rating,
        vote_count=1000,
        popularity=popularity,
        original_language="da",
        original_title=title,
        director=Director(name=director) if director else None,
        genres={Genre(name=name) for name in genres},
        actors={Actor(name=name) for name in actors},
    )


SAMPLE_MOVIES = [
    dict(
        title="Jagten", imdb_id=103663, rating=8.1, popularity=20.0, released=date(2012, 8, 31),
        director="Thomas Vinterberg", genres=("Drama",),
        actors=("Mads Mikkelsen", "Thomas Bo Larsen", "Annika Wedderkopp"),
    ),
    dict(
        title="Under sandet", imdb_id=336050, rating=7.8, popularity=15.5, released=date(2015, 12, 3),
        director="Martin Zandvliet", genres=("Drama", "History", "War"),
        actors=("Roland Møller", "Louis Hofmann"),
    ),
    dict(
        title="Druk", imdb_id=580175, rating=7.7, popularity=30.2, released=date(2020, 9, 24),
        director="Thomas Vinterberg", genres=("Comedy", "Drama"),
        actors=("Mads Mikkelsen", "Thomas Bo Larsen"),
    ),
    dict(
        title="Retfærdighedens ryttere", imdb_id=663870, rating=7.4, popularity=25.1,
        released=date(2020, 11, 19), director="Anders Thomas Jensen", genres=("Action", "Comedy"),
        actors=("Mads Mikkelsen", "Nikolaj Lie Kaas"),
    ),
    dict(
        title="Italiensk for begyndere", imdb_id=11404, rating=6.9, popularity=5.0,
        released=date(2000, 12, 8), director="Lone Scherfig", genres=("Comedy", "Romance"),
        actors=("Anders W. Berthelsen",),
    ),
    dict(
        title="Undtagelsen", imdb_id=595148, rating=5.6, popularity=3.3,
        genres=("Thriller",), actors=("Nicolas Bro",),
    ),
]


@pytest.fixture
async def seeded(session_factory):
    """Session factory whose database holds SAMPLE_MOVIES."""
    movie_dao = MovieDAO(session_factory)
    for kwargs in SAMPLE_MOVIES:
        await movie_dao.create_movie(make_movie(**kwargs))
    return session_factory
