import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv
from fastapi import Request

# Load environment variables
load_dotenv()

# Origins allowed to call the API from a browser
ALLOWED_ORIGINS = [
    "http://localhost:8080",
    "http://localhost:1234",
    "http://localhost:4200",
]

DEFAULT_CONNECTION_URI = "mongodb://localhost:27017/myFlixDB"
DEFAULT_DATABASE_NAME = "myFlixDB"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    connection_uri: str = DEFAULT_CONNECTION_URI
    database_name: str = ""
    host: str = "0.0.0.0"
    port: int = 8080
    jwt_secret: str = "your_jwt_secret"
    jwt_expires_days: int = 7
    log_level: str = "INFO"
    static_dir: str = "public"
    allowed_origins: List[str] = field(default_factory=lambda: list(ALLOWED_ORIGINS))

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (.env included)."""
        return cls(
            connection_uri=os.getenv("CONNECTION_URI", DEFAULT_CONNECTION_URI),
            database_name=os.getenv("DATABASE_NAME", ""),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_int_env("PORT", 8080),
            jwt_secret=os.getenv("JWT_SECRET", "your_jwt_secret"),
            jwt_expires_days=_int_env("JWT_EXPIRES_DAYS", 7),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            static_dir=os.getenv("STATIC_DIR", "public"),
        )


def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings bound to the application"""
    return request.app.state.settings
