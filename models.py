from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from entities import Movie


class MovieAPI(BaseModel):
    id: Optional[int] = None
    imdb_id: Optional[int] = None
    title: str
    overview: Optional[str] = None
    release_date: Optional[date] = None
    vote_average: float = 0.0
    vote_count: int = 0
    popularity: float = 0.0
    original_language: Optional[str] = None
    original_title: Optional[str] = None
    backdrop_path: Optional[str] = None
    poster_path: Optional[str] = None
    adult: bool = False
    director: Optional[str] = None
    genres: list[str] = Field(default_factory=list)
    actors: list[str] = Field(default_factory=list)


def to_movie_api(movie: Movie) -> MovieAPI:
    """Project a loaded Movie entity onto the shape returned by the HTTP API."""
    return MovieAPI(
        id=movie.id,
        imdb_id=movie.imdb_id,
        title=movie.title,
        overview=movie.overview,
        release_date=movie.release_date,
        vote_average=movie.vote_average or 0.0,
        vote_count=movie.vote_count or 0,
        popularity=movie.popularity or 0.0,
        original_language=movie.original_language,
        original_title=movie.original_title,
        backdrop_path=movie.backdrop_path,
        poster_path=movie.poster_path,
        adult=bool(movie.adult),
        director=movie.director.name if movie.director else None,
        genres=sorted(g.name for g in movie.genres),
        actors=sorted(a.name for a in movie.actors),
    )
