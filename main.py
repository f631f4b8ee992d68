import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from bson.objectid import ObjectId
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

import auth
from auth import get_current_user, hash_password
from config import Settings
from database import (
    DIRECTORS,
    GENRES,
    MOVIES,
    USERS,
    create_document,
    ensure_indexes,
    get_database,
    get_db,
    get_documents,
    to_bson,
)
from logger import configure_logging, get_logger
from schemas import User, UserCreate, UserUpdate, public_user, to_json

logger = get_logger("api")
access_logger = get_logger("access")

router = APIRouter()

REFERENCES = {"Director": DIRECTORS, "Genre": GENRES}

# Utilities

def movie_pipeline(match: Optional[dict] = None, limit: Optional[int] = None) -> list:
    """Aggregation expanding the Director and Genre references of movies."""
    pipeline = []
    if match:
        pipeline.append({"$match": match})
    if limit:
        pipeline.append({"$limit": limit})
    for field, collection in REFERENCES.items():
        pipeline.append({"$lookup": {"from": collection, "localField": field, "foreignField": "_id", "as": field}})
        pipeline.append({"$unwind": {"path": f"${field}", "preserveNullAndEmptyArrays": True}})
    return pipeline


def movie_json(movie: dict) -> dict:
    # unmatched references are unwound away, report them as null
    for field in REFERENCES:
        movie.setdefault(field, None)
    return to_json(movie)


def utcnow():
    return datetime.now(timezone.utc)


def already_exists(username: str) -> PlainTextResponse:
    return PlainTextResponse(f"{username} already exists", status_code=status.HTTP_400_BAD_REQUEST)


@router.get("/", response_class=PlainTextResponse)
def read_root():
    return "Welcome to myFlix!"

# Movies

@router.get("/movies")
def list_movies(db: Database = Depends(get_db)):
    movies = db[MOVIES].aggregate(movie_pipeline())
    return [movie_json(m) for m in movies]


@router.get("/movies/{title}")
def get_movie(title: str, db: Database = Depends(get_db), _user: dict = Depends(get_current_user)):
    movies = list(db[MOVIES].aggregate(movie_pipeline({"Title": title}, limit=1)))
    if not movies:
        raise HTTPException(status_code=404, detail="Movie not found")
    return movie_json(movies[0])

# Genres

@router.get("/genres")
def list_genres(db: Database = Depends(get_db), _user: dict = Depends(get_current_user)):
    return [to_json(g) for g in get_documents(db, GENRES)]


@router.get("/genres/{name}")
def get_genre(name: str, db: Database = Depends(get_db), _user: dict = Depends(get_current_user)):
    genre = db[GENRES].find_one({"Name": name})
    if not genre:
        raise HTTPException(status_code=404, detail="Genre not found")
    return to_json(genre)

# Directors

@router.get("/directors")
def list_directors(db: Database = Depends(get_db), _user: dict = Depends(get_current_user)):
    return [to_json(d) for d in get_documents(db, DIRECTORS)]


@router.get("/directors/{name}")
def get_director(name: str, db: Database = Depends(get_db), _user: dict = Depends(get_current_user)):
    director = db[DIRECTORS].find_one({"Name": name})
    if not director:
        raise HTTPException(status_code=404, detail="Director not found")
    return to_json(director)

# Users

@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Database = Depends(get_db)):
    if db[USERS].find_one({"Username": payload.username}):
        return already_exists(payload.username)
    user = User(
        username=payload.username,
        password=hash_password(payload.password),
        email=payload.email,
        birthday=payload.birthday,
    )
    try:
        user_id = create_document(db, USERS, user)
    except DuplicateKeyError:
        return already_exists(payload.username)
    logger.info("Registered user %s", payload.username)
    created = db[USERS].find_one({"_id": ObjectId(user_id)})
    return public_user(created)


@router.get("/users")
def list_users(db: Database = Depends(get_db), _user: dict = Depends(get_current_user)):
    return [public_user(u) for u in get_documents(db, USERS)]


@router.get("/users/{username}")
def get_user(username: str, db: Database = Depends(get_db)):
    user = db[USERS].find_one({"Username": username})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(user)


@router.put("/users/{username}")
def update_user(
    username: str,
    payload: UserUpdate,
    db: Database = Depends(get_db),
    _user: dict = Depends(get_current_user),
):
    # only the fields sent by the client are touched
    changes = payload.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    if "Password" in changes:
        changes["Password"] = hash_password(changes["Password"])

    new_username = changes.get("Username")
    if new_username and new_username != username and db[USERS].find_one({"Username": new_username}):
        return already_exists(new_username)

    changes = to_bson(changes)
    changes["updated_at"] = utcnow()
    try:
        updated = db[USERS].find_one_and_update(
            {"Username": username},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        return already_exists(new_username)
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("Updated user %s", username)
    return public_user(updated)


@router.post("/users/{username}/{movie_id}")
def add_favorite(
    username: str,
    movie_id: str,
    db: Database = Depends(get_db),
    _user: dict = Depends(get_current_user),
):
    updated = db[USERS].find_one_and_update(
        {"Username": username},
        {"$addToSet": {"FavoriteMovies": movie_id}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(updated)


@router.delete("/users/{username}/{movie_id}")
def remove_favorite(
    username: str,
    movie_id: str,
    db: Database = Depends(get_db),
    _user: dict = Depends(get_current_user),
):
    updated = db[USERS].find_one_and_update(
        {"Username": username},
        {"$pull": {"FavoriteMovies": movie_id}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(updated)


@router.delete("/users/{username}", response_class=PlainTextResponse)
def delete_user(username: str, db: Database = Depends(get_db), _user: dict = Depends(get_current_user)):
    result = db[USERS].delete_one({"Username": username})
    if result.deleted_count == 0:
        return PlainTextResponse(f"{username} was not found", status_code=status.HTTP_400_BAD_REQUEST)
    logger.info("Deleted user %s", username)
    return f"{username} was deleted."

# Error handlers

async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "location": err["loc"][0] if err["loc"] else "body",
            "param": ".".join(str(p) for p in err["loc"][1:]),
            "msg": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=422, content=jsonable_encoder({"errors": errors}))


async def store_error_handler(request: Request, exc: PyMongoError):
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return PlainTextResponse("Error: the data store could not complete the request", status_code=500)


async def uncaught_error_handler(request: Request, exc: Exception):
    logger.error("Uncaught error on %s %s", request.method, request.url.path, exc_info=exc)
    return PlainTextResponse("Error not caught", status_code=500)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes(app.state.db)
    yield


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """Build the myFlix application around an explicit settings/database context."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    if db is None:
        db = get_database(settings)

    app = FastAPI(title="myFlix API", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            client = request.client.host if request.client else "-"
            access_logger.info(
                '%s "%s %s HTTP/%s" %d %.1fms',
                client,
                request.method,
                request.url.path,
                request.scope.get("http_version", "1.1"),
                status_code,
                elapsed,
            )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
    app.add_exception_handler(Exception, uncaught_error_handler)

    app.include_router(auth.router)
    app.include_router(router)

    static_dir = settings.static_dir
    if static_dir and not os.path.isabs(static_dir):
        static_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), static_dir)
    if static_dir and os.path.isdir(static_dir):
        # mounted last so API routes take precedence
        app.mount("/", StaticFiles(directory=static_dir), name="static")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = app.state.settings
    logger.info("Listening on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
