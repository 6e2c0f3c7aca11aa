from typing import Optional

from dao import MovieDAO
from entities import Actor, Director, Movie


class FilmService:
    """Answers questions that span more than one entity type."""

    def __init__(self, movie_dao: MovieDAO):
        self.movie_dao = movie_dao

    async def get_actors_by_movie_title(self, title: str) -> list[Actor]:
        movie = await self.movie_dao.find_by_title(title)
        if movie is None:
            return []
        return sorted(movie.actors, key=lambda a: a.name)

    async def get_director_by_movie_title(self, title: str) -> Optional[Director]:
        movie = await self.movie_dao.find_by_title(title)
        return movie.director if movie else None

    async def find_movies_by_actor(self, actor_name: str) -> list[Movie]:
        return await self.movie_dao.get_movies_by_actor(actor_name)
