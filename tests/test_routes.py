from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

import database
from conftest import SAMPLE_MOVIES
from main import app, get_movie_dao


@pytest.fixture
async def client(seeded):
    app.dependency_overrides[database.get_session_factory] = lambda: seeded
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


def test_health_endpoint():
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_all_movies_default_paging_matches_explicit(client):
    default = await client.get("/movies/all")
    explicit = await client.get("/movies/all", params={"page": 0, "size": 20})

    assert default.status_code == 200
    assert default.json() == explicit.json()
    assert len(default.json()) == len(SAMPLE_MOVIES)


async def test_all_movies_pages(client):
    response = await client.get("/movies/all", params={"page": 1, "size": 4})
    assert response.status_code == 200
    assert [m["title"] for m in response.json()] == ["Italiensk for begyndere", "Undtagelsen"]


async def test_large_page_size_is_accepted(client):
    response = await client.get("/movies/genre/Drama", params={"size": 1000})
    assert response.status_code == 200
    assert len(response.json()) == 3


async def test_page_past_sqlite_integer_range_is_empty(client):
    huge = 2**63 - 1
    response = await client.get("/movies/all", params={"page": huge, "size": huge})
    assert response.status_code == 200
    assert response.json() == []


async def test_movie_by_id(client):
    listing = (await client.get("/movies/all")).json()
    druk = next(m for m in listing if m["title"] == "Druk")

    response = await client.get(f"/movies/{druk['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["imdb_id"] == 580175
    assert body["director"] == "Thomas Vinterberg"
    assert body["genres"] == ["Comedy", "Drama"]
    assert body["actors"] == ["Mads Mikkelsen", "Thomas Bo Larsen"]
    assert body["release_date"] == "2020-09-24"


async def test_unknown_movie_id_is_404_plain_text(client):
    response = await client.get("/movies/9999")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/plain")
    assert "9999" in response.text


async def test_movie_by_imdb_id(client):
    response = await client.get("/movies/imdb/103663")
    assert response.status_code == 200
    assert response.json()["title"] == "Jagten"


async def test_unknown_imdb_id_is_404(client):
    response = await client.get("/movies/imdb/42")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/plain")


async def test_movies_by_genre(client):
    response = await client.get("/movies/genre/Comedy")
    assert response.status_code == 200
    movies = response.json()
    assert len(movies) == 3
    assert all("Comedy" in m["genres"] for m in movies)


async def test_movies_by_unknown_genre_is_404(client):
    response = await client.get("/movies/genre/Western")
    assert response.status_code == 404
    assert "Western" in response.text


async def test_movies_by_rating(client):
    response = await client.get("/movies/rating/7.7", params={"size": 2})
    assert response.status_code == 200
    assert [m["title"] for m in response.json()] == ["Jagten", "Under sandet"]


async def test_movies_by_year(client):
    response = await client.get("/movies/year/2020")
    assert response.status_code == 200
    assert {m["title"] for m in response.json()} == {"Druk", "Retfærdighedens ryttere"}


async def test_movies_by_year_without_matches_is_404(client):
    response = await client.get("/movies/year/1950")
    assert response.status_code == 404


async def test_movies_by_actor_sorted_by_release_date(client):
    response = await client.get("/moviesbyactor/Mads Mikkelsen")
    assert response.status_code == 200
    assert [m["title"] for m in response.json()] == ["Jagten", "Druk", "Retfærdighedens ryttere"]


async def test_movies_by_actor_drops_undated_movies(client):
    response = await client.get("/moviesbyactor/Nicolas Bro")
    assert response.status_code == 200
    assert response.json() == []


async def test_movies_by_unknown_actor_is_404(client):
    response = await client.get("/moviesbyactor/Ingen")
    assert response.status_code == 404
    assert "Ingen" in response.text


async def test_movies_by_instructor(client):
    response = await client.get("/moviesbyinstructor/Thomas Vinterberg")
    assert response.status_code == 200
    assert {m["title"] for m in response.json()} == {"Jagten", "Druk"}


async def test_movies_by_unknown_instructor_is_404(client):
    response = await client.get("/moviesbyinstructor/Ingen")
    assert response.status_code == 404


@pytest.mark.parametrize(
    "path",
    [
        "/movies/abc",
        "/movies/imdb/tt0103663",
        "/movies/rating/high",
        "/movies/year/twenty",
        "/movies/all?page=x",
        "/movies/all?size=0",
        "/movies/all?page=-1",
        "/movies/99999999999999999999",
        "/movies/imdb/99999999999999999999",
        "/movies/year/99999999999999999999",
        "/movies/all?page=99999999999999999999",
    ],
)
def test_parameter_errors_are_400(path):
    response = TestClient(app).get(path)
    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text.startswith("Invalid request parameters")


def test_database_errors_are_500():
    movie_dao = MagicMock()
    movie_dao.get_movies = AsyncMock(side_effect=SQLAlchemyError("database is locked"))
    app.dependency_overrides[get_movie_dao] = lambda: movie_dao
    try:
        response = TestClient(app).get("/movies/all")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert "database is locked" in response.text
