"""Console walkthrough of every accessor and service call against the live database."""

import asyncio
import logging
import textwrap
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

import database
from config import settings
from dao import MovieDAO
from entities import Actor, Director, Genre, Movie
from service import FilmService

LINE_WIDTH = 160
RED = "\033[31m"
WHITE = "\033[39m"
RESET = "\033[0m"
SEPARATOR = "-" * 118


def label(name: str, value: object) -> str:
    return f"{RED}{name}: {WHITE}{value}{RESET}"


def wrap_text(text: Optional[str], width: int = LINE_WIDTH) -> list[str]:
    """Word-wrap a movie overview. Very short or missing overviews get a placeholder line."""
    if text is None or len(text) < 12:
        return ["Overview: no plot described"]
    return textwrap.wrap(text, width=width, break_long_words=False, break_on_hyphens=False)


def overview_lines(overview: Optional[str]) -> list[str]:
    """Overview block of a movie report, coloured after wrapping."""
    if overview is None or len(overview) < 12:
        return wrap_text(None)
    wrapped = wrap_text(f"Overview: {overview}")
    prefix = "Overview:"
    if wrapped[0].startswith(prefix):
        wrapped[0] = f"{RED}{prefix}{WHITE}{wrapped[0][len(prefix):]}"
        wrapped[-1] += RESET
    return wrapped


def format_movie(movie: Movie) -> list[str]:
    genres = ", ".join(sorted(g.name for g in movie.genres)) or "No genres attached"
    actors = ", ".join(sorted(a.name for a in movie.actors)) or "No actors attached"
    director = movie.director.name if movie.director else "Unknown"
    lines = [
        label("Title", movie.title),
        label("Release date", movie.release_date),
        label("Rating", f"{movie.vote_average:.1f}"),
        label("Genres", genres),
        label("Director", director),
        label("Actors", actors),
    ]
    lines.extend(overview_lines(movie.overview))
    lines.append(SEPARATOR)
    return lines


def print_movie_details(movie: Movie) -> None:
    for line in format_movie(movie):
        print(line)


def build_festen() -> Movie:
    return Movie(
        imdb_id=1234567,
        title="Festen",
        overview=(
            "Family and friends have gathered to celebrate Helge's 60th birthday. During dinner the "
            "eldest son gives a speech that reveals a terrible family secret, and as the evening "
            "goes on the grim past is uncovered layer by layer."
        ),
        release_date=date(1998, 8, 21),
        vote_average=8.0,
        vote_count=43000,
        popularity=32.432,
        original_language="da",
        original_title="Festen",
        backdrop_path="/path/to/backdrop.jpg",
        poster_path="/path/to/poster.jpg",
        adult=False,
        director=Director(name="Thomas Vinterberg"),
        genres={Genre(genre_id=18, name="Drama"), Genre(genre_id=53, name="Thriller")},
        actors={Actor(name="Ulrich Thomsen"), Actor(name="Henning Moritzen")},
    )


async def run_demo(session_factory: async_sessionmaker) -> None:
    movie_dao = MovieDAO(session_factory)
    film_service = FilmService(movie_dao)

    print(f"Movies in the database: {await movie_dao.count_movies()}")

    await movie_dao.delete_by_title("Festen")
    festen = await movie_dao.create_movie(build_festen())
    print(f"Movie added: {festen.title}")

    print("\nMovies in the genre Drama:\n")
    for movie in await movie_dao.get_movies_by_genre("Drama"):
        print_movie_details(movie)

    print("\nMovies rated 8.0 or higher:\n")
    for movie in await movie_dao.get_movies_by_rating(8.0):
        print_movie_details(movie)

    print("\nMovies from 2020:\n")
    for movie in await movie_dao.get_movies_by_release_year(2020):
        print_movie_details(movie)

    print("\nActors appearing in 'Jagten':\n")
    for actor in await film_service.get_actors_by_movie_title("Jagten"):
        print(f"Actor: {actor.name}")

    director = await film_service.get_director_by_movie_title("Jagten")
    print(f"\nDirector of 'Jagten': {director.name if director else 'Unknown'}")

    print("\nMovies featuring 'Anders W. Berthelsen':\n")
    for movie in await film_service.find_movies_by_actor("Anders W. Berthelsen"):
        print(f"- {movie.title}")

    await movie_dao.update_release_date("Jagten", date(2024, 1, 1))

    print("\nMovies with 'Under' in the title:\n")
    for movie in await movie_dao.search_movies_by_title("Under"):
        print_movie_details(movie)

    average = await movie_dao.get_total_average_rating()
    print(f"\nAverage rating across all movies: {average:.1f}")

    print("\nTop 10 lowest rated movies:\n")
    for movie in await movie_dao.get_top10_lowest_rated():
        print(f"{movie.title} - Rating: {movie.vote_average}")

    print("\nTop 10 highest rated movies:\n")
    for movie in await movie_dao.get_top10_highest_rated():
        print(f"{movie.title} - Rating: {movie.vote_average}")

    print("\nTop 10 most popular movies:\n")
    for movie in await movie_dao.get_top10_most_popular():
        print(f"{movie.title} - Popularity: {movie.popularity}")


async def _main() -> None:
    await database.init_db()
    await run_demo(database.SessionLocal)
    await database.engine.dispose()


def run() -> None:
    logging.basicConfig(level=settings.log_level)
    asyncio.run(_main())


if __name__ == "__main__":
    run()
