"""
Authentication

Password hashing, JWT issuing/verification and the /login endpoint.
Protected routes declare `Depends(get_current_user)`; a request without a
valid bearer token is answered with 401 before the route handler runs.
"""

from datetime import datetime, timedelta, timezone

import jwt
from bson.errors import InvalidId
from bson.objectid import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database
from werkzeug.security import check_password_hash, generate_password_hash

from config import Settings, get_settings
from database import USERS, get_db
from logger import get_logger
from schemas import AuthResponse, LoginRequest, public_user

logger = get_logger("auth")

JWT_ALGORITHM = "HS256"

router = APIRouter(tags=["auth"])
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def generate_token(user: dict, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "_id": str(user["_id"]),
        "sub": user["Username"],
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Resolve the user behind the bearer token or fail with 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authenticated")
    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
        user_id = ObjectId(payload["_id"])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except (jwt.InvalidTokenError, KeyError, InvalidId, TypeError):
        raise _unauthorized("Invalid token")

    user = db[USERS].find_one({"_id": user_id})
    if not user:
        raise _unauthorized("Invalid token")
    return user


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = db[USERS].find_one({"Username": payload.username})
    if not user or not verify_password(user.get("Password"), payload.password):
        logger.info("Failed login for %s", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")
    token = generate_token(user, settings)
    logger.info("User %s logged in", payload.username)
    return AuthResponse(token=token, user=public_user(user))
