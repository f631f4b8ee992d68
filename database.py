"""
Database helpers

Thin layer over pymongo shared by the API and the seed script. The
collections used by the application are:
- movies
- directors
- genres
- users
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import DEFAULT_DATABASE_NAME, Settings
from logger import get_logger

logger = get_logger("database")

MOVIES = "movies"
DIRECTORS = "directors"
GENRES = "genres"
USERS = "users"


def get_client(uri: str) -> MongoClient:
    # MongoClient connects lazily, nothing is sent until the first operation
    return MongoClient(uri)


def get_database(settings: Settings) -> Database:
    client = get_client(settings.connection_uri)
    if settings.database_name:
        return client[settings.database_name]
    return client.get_default_database(default=DEFAULT_DATABASE_NAME)


def ensure_indexes(db: Database):
    db[USERS].create_index([("Username", ASCENDING)], unique=True)
    logger.info("Indexes ensured on %s", db.name)


def to_bson(value: Any) -> Any:
    """Convert values BSON cannot store (plain dates) recursively."""
    if isinstance(value, dict):
        return {k: to_bson(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_bson(v) for v in value]
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return value


def create_document(db: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True)
    else:
        doc = dict(data)
    doc = to_bson(doc)
    now = datetime.now(timezone.utc)
    doc["created_at"] = now
    doc["updated_at"] = now
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the database bound to the application"""
    return request.app.state.db
