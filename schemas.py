"""
Database Schemas

MongoDB collection schemas for myFlix, defined as Pydantic models.
Documents keep the capitalised field names of the stored myFlix data
(Title, Username, FavoriteMovies, ...), so every field carries its stored
name as alias. Models accept either spelling and dump by alias.

- Movie -> "movies" collection
- Director -> "directors" collection
- Genre -> "genres" collection
- User -> "users" collection
"""

from datetime import date
from typing import Any, List, Optional

from bson.objectid import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"


class Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)


class Genre(Document):
    """
    Genres collection schema
    Collection name: "genres"
    """
    name: str = Field(..., alias="Name")
    description: Optional[str] = Field(None, alias="Description")


class Director(Document):
    """
    Directors collection schema
    Collection name: "directors"
    """
    name: str = Field(..., alias="Name")
    bio: Optional[str] = Field(None, alias="Bio")
    birth: Optional[int] = Field(None, alias="Birth", description="Birth year")
    death: Optional[int] = Field(None, alias="Death", description="Death year, if any")


class Movie(Document):
    """
    Movies collection schema
    Collection name: "movies"
    """
    title: str = Field(..., alias="Title")
    description: Optional[str] = Field(None, alias="Description")
    genre: Optional[ObjectId] = Field(None, alias="Genre", description="Reference to a genre")
    director: Optional[ObjectId] = Field(None, alias="Director", description="Reference to a director")
    image_path: Optional[str] = Field(None, alias="ImagePath")
    featured: bool = Field(False, alias="Featured", description="Whether to highlight on homepage")


class User(Document):
    """
    Users collection schema
    Collection name: "users"
    """
    username: str = Field(..., alias="Username")
    password: str = Field(..., alias="Password", description="Password hash")
    email: EmailStr = Field(..., alias="Email")
    birthday: Optional[date] = Field(None, alias="Birthday")
    favorite_movies: List[str] = Field(default_factory=list, alias="FavoriteMovies")


# Request/response models

class UserCreate(Document):
    username: str = Field(..., alias="Username", min_length=6, pattern=USERNAME_PATTERN)
    password: str = Field(..., alias="Password", min_length=1)
    email: EmailStr = Field(..., alias="Email")
    birthday: Optional[date] = Field(None, alias="Birthday")


class UserUpdate(Document):
    username: Optional[str] = Field(None, alias="Username", min_length=6, pattern=USERNAME_PATTERN)
    password: Optional[str] = Field(None, alias="Password", min_length=1)
    email: Optional[EmailStr] = Field(None, alias="Email")
    birthday: Optional[date] = Field(None, alias="Birthday")


class LoginRequest(Document):
    username: str = Field(..., alias="Username")
    password: str = Field(..., alias="Password")


class AuthResponse(BaseModel):
    user: dict
    token: str


def to_json(value: Any) -> Any:
    """Render ObjectIds as strings so documents can be returned as JSON."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_json(v) for v in value]
    return value


def public_user(user: dict) -> dict:
    """User document as returned to clients, without the password hash."""
    doc = {k: v for k, v in user.items() if k != "Password"}
    return to_json(doc)
