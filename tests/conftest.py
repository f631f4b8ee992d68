import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import generate_token, hash_password
from config import Settings
from database import USERS, create_document
from main import create_app
from schemas import User
from seed import seed_demo_catalog

PASSWORD = "s3cretPass"


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", log_level="WARNING")


@pytest.fixture
def db():
    return mongomock.MongoClient()["myFlixDB"]


@pytest.fixture
def app(settings, db):
    return create_app(settings, db)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user(db):
    create_document(db, USERS, User(
        username="moviebuff",
        password=hash_password(PASSWORD),
        email="buff@example.com",
    ))
    return db[USERS].find_one({"Username": "moviebuff"})


@pytest.fixture
def auth_headers(user, settings):
    return {"Authorization": f"Bearer {generate_token(user, settings)}"}


@pytest.fixture
def catalog(db):
    seed_demo_catalog(db)
    return db
