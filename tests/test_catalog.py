from bson.objectid import ObjectId

from database import DIRECTORS, GENRES, MOVIES
from seed import DEMO_MOVIES, seed_demo_catalog


def test_list_movies_is_public_and_expanded(client, catalog):
    response = client.get("/movies")
    assert response.status_code == 200
    movies = response.json()
    assert len(movies) == len(DEMO_MOVIES)
    for movie in movies:
        assert isinstance(movie["Director"], dict)
        assert isinstance(movie["Genre"], dict)


def test_get_movie_expands_references(client, catalog, auth_headers):
    response = client.get("/movies/Inception", headers=auth_headers)
    assert response.status_code == 200
    movie = response.json()
    assert movie["Title"] == "Inception"
    assert movie["Director"]["Name"] == "Christopher Nolan"
    assert movie["Director"]["Birth"] == 1970
    assert movie["Genre"]["Name"] == "Science Fiction"
    assert movie["Featured"] is True


def test_get_movie_not_found(client, catalog, auth_headers):
    response = client.get("/movies/Nonexistent", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"detail": "Movie not found"}


def test_get_movie_requires_token(client, catalog):
    assert client.get("/movies/Inception").status_code == 401


def test_movie_with_dangling_reference(client, db, auth_headers):
    db[MOVIES].insert_one({"Title": "Orphan", "Director": ObjectId(), "Genre": ObjectId()})
    response = client.get("/movies/Orphan", headers=auth_headers)
    assert response.status_code == 200
    movie = response.json()
    assert movie["Title"] == "Orphan"
    assert movie["Director"] is None
    assert movie["Genre"] is None

    listed = [m for m in client.get("/movies").json() if m["Title"] == "Orphan"]
    assert listed[0]["Director"] is None
    assert listed[0]["Genre"] is None


def test_genres(client, catalog, auth_headers):
    response = client.get("/genres", headers=auth_headers)
    assert response.status_code == 200
    assert {g["Name"] for g in response.json()} == {"Drama", "Science Fiction", "Thriller"}

    response = client.get("/genres/Thriller", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["Description"].startswith("Suspense")

    response = client.get("/genres/Western", headers=auth_headers)
    assert response.status_code == 404


def test_directors(client, catalog, auth_headers):
    response = client.get("/directors", headers=auth_headers)
    assert response.status_code == 200
    assert len(response.json()) == 3

    response = client.get("/directors/Alfred Hitchcock", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["Death"] == 1980

    response = client.get("/directors/Nobody", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"detail": "Director not found"}


def test_seed_is_skipped_when_catalog_exists(db):
    first = seed_demo_catalog(db)
    assert first["inserted"] == len(DEMO_MOVIES)
    second = seed_demo_catalog(db)
    assert second["message"] == "Catalog already seeded"
    assert db[MOVIES].count_documents({}) == len(DEMO_MOVIES)
    assert db[GENRES].count_documents({}) == 3
    assert db[DIRECTORS].count_documents({}) == 3
