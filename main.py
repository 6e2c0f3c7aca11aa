import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Path, Query
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

import database
from config import settings
from dao import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, SQLITE_MAX_INT, MovieDAO
from models import MovieAPI, to_movie_api

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await database.init_db()
    yield
    await database.engine.dispose()


app = FastAPI(lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return PlainTextResponse(f"Invalid request parameters: {details}", status_code=400)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s", request.url.path)
    return PlainTextResponse(f"A database error occurred: {exc}", status_code=500)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return PlainTextResponse(f"An error occurred: {exc}", status_code=500)


def get_movie_dao(
    session_factory: async_sessionmaker = Depends(database.get_session_factory),
) -> MovieDAO:
    return MovieDAO(session_factory)


def pagination(
    page: int = Query(DEFAULT_PAGE, ge=0, le=SQLITE_MAX_INT),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=SQLITE_MAX_INT),
) -> tuple[int, int]:
    return page, size


def _not_found(message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=404)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/movies/all", response_model=list[MovieAPI])
async def all_movies(
    paging: tuple[int, int] = Depends(pagination),
    movie_dao: MovieDAO = Depends(get_movie_dao),
):
    page, size = paging
    return [to_movie_api(m) for m in await movie_dao.get_movies(page, size)]


@app.get("/movies/imdb/{imdb_id}", response_model=MovieAPI)
async def movie_by_imdb_id(
    imdb_id: int = Path(ge=-SQLITE_MAX_INT - 1, le=SQLITE_MAX_INT),
    movie_dao: MovieDAO = Depends(get_movie_dao),
):
    movie = await movie_dao.find_by_imdb_id(imdb_id)
    if movie is None:
        return _not_found(f"No movie found with IMDB id: {imdb_id}")
    return to_movie_api(movie)


@app.get("/movies/genre/{genre}", response_model=list[MovieAPI])
async def movies_by_genre(
    genre: str,
    paging: tuple[int, int] = Depends(pagination),
    movie_dao: MovieDAO = Depends(get_movie_dao),
):
    page, size = paging
    movies = await movie_dao.get_movies_by_genre(genre, page, size)
    if not movies:
        return _not_found(f"No movies found in genre: {genre}")
    return [to_movie_api(m) for m in movies]


@app.get("/movies/rating/{rating}", response_model=list[MovieAPI])
async def movies_by_rating(
    rating: float,
    paging: tuple[int, int] = Depends(pagination),
    movie_dao: MovieDAO = Depends(get_movie_dao),
):
    page, size = paging
    movies = await movie_dao.get_movies_by_rating(rating, page, size)
    if not movies:
        return _not_found(f"No movies found with a rating of at least: {rating}")
    return [to_movie_api(m) for m in movies]


@app.get("/movies/year/{year}", response_model=list[MovieAPI])
async def movies_by_year(
    year: int = Path(ge=-SQLITE_MAX_INT - 1, le=SQLITE_MAX_INT),
    paging: tuple[int, int] = Depends(pagination),
    movie_dao: MovieDAO = Depends(get_movie_dao),
):
    page, size = paging
    movies = await movie_dao.get_movies_by_release_year(year, page, size)
    if not movies:
        return _not_found(f"No movies found released in: {year}")
    return [to_movie_api(m) for m in movies]


@app.get("/movies/{movie_id}", response_model=MovieAPI)
async def movie_by_id(
    movie_id: int = Path(ge=-SQLITE_MAX_INT - 1, le=SQLITE_MAX_INT),
    movie_dao: MovieDAO = Depends(get_movie_dao),
):
    movie = await movie_dao.find_by_id(movie_id)
    if movie is None:
        return _not_found(f"No movie found with id: {movie_id}")
    return to_movie_api(movie)


@app.get("/moviesbyactor/{actor}", response_model=list[MovieAPI])
async def movies_by_actor(actor: str, movie_dao: MovieDAO = Depends(get_movie_dao)):
    movies = await movie_dao.get_movies_by_actor(actor)
    if not movies:
        return _not_found(f"No movies found with actor: {actor}")
    # Undated movies are left out of the chronological listing.
    dated = sorted((m for m in movies if m.release_date), key=lambda m: m.release_date)
    return [to_movie_api(m) for m in dated]


@app.get("/moviesbyinstructor/{instructor}", response_model=list[MovieAPI])
async def movies_by_instructor(instructor: str, movie_dao: MovieDAO = Depends(get_movie_dao)):
    movies = await movie_dao.get_movies_by_director(instructor)
    if not movies:
        return _not_found(f"No movies found directed by: {instructor}")
    return [to_movie_api(m) for m in movies]


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
