"""ORM entities for the movie catalog."""

from datetime import date
from typing import Optional

from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base

# Composite primary keys keep membership set-like.
movie_genre = Table(
    "movie_genre",
    Base.metadata,
    Column("movie_id", ForeignKey("movie.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", ForeignKey("genre.id", ondelete="CASCADE"), primary_key=True),
)

movie_actor = Table(
    "movie_actor",
    Base.metadata,
    Column("movie_id", ForeignKey("movie.id", ondelete="CASCADE"), primary_key=True),
    Column("actor_id", ForeignKey("actor.id", ondelete="CASCADE"), primary_key=True),
)


class Director(Base):
    __tablename__ = "director"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)

    movies: Mapped[list["Movie"]] = relationship(viewonly=True)

    def __repr__(self) -> str:
        return f"<Director(id={self.id}, name={self.name!r})>"


class Genre(Base):
    __tablename__ = "genre"

    id: Mapped[int] = mapped_column(primary_key=True)
    genre_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    movies: Mapped[list["Movie"]] = relationship(secondary=movie_genre, viewonly=True)

    def __repr__(self) -> str:
        return f"<Genre(id={self.id}, genre_id={self.genre_id}, name={self.name!r})>"


class Actor(Base):
    __tablename__ = "actor"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    movies: Mapped[list["Movie"]] = relationship(secondary=movie_actor, viewonly=True)

    def __repr__(self) -> str:
        return f"<Actor(id={self.id}, name={self.name!r})>"


class Movie(Base):
    __tablename__ = "movie"

    id: Mapped[int] = mapped_column(primary_key=True)
    imdb_id: Mapped[Optional[int]] = mapped_column(Integer, unique=True, index=True, nullable=True)
    title: Mapped[str] = mapped_column(String(500), index=True)
    overview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    release_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    vote_average: Mapped[float] = mapped_column(Float, default=0.0)
    vote_count: Mapped[int] = mapped_column(Integer, default=0)
    popularity: Mapped[float] = mapped_column(Float, default=0.0)
    original_language: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    original_title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    backdrop_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    poster_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    adult: Mapped[bool] = mapped_column(default=False)

    director_id: Mapped[Optional[int]] = mapped_column(ForeignKey("director.id"), nullable=True)
    director: Mapped[Optional[Director]] = relationship(lazy="selectin")
    genres: Mapped[set[Genre]] = relationship(
        secondary=movie_genre, collection_class=set, lazy="selectin"
    )
    actors: Mapped[set[Actor]] = relationship(
        secondary=movie_actor, collection_class=set, lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, imdb_id={self.imdb_id}, title={self.title!r})>"
