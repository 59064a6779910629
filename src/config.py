"""Configuration module for the Science Carnival API.

This module provides centralized configuration management, including directory
paths, database and API server settings, session settings, and the default
site settings seeded at startup.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory (SQLite database lives here by default)
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data"))).resolve()

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/science_carnival.db"
)

# Per-call timeout handed to the storage client (SQLite busy timeout or
# connection pool checkout timeout).
DB_TIMEOUT_SECONDS: float = float(os.getenv("DB_TIMEOUT_SECONDS", "5"))

# "database" for the SQLAlchemy-backed store, "memory" for the in-process one
STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "database").lower()

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Session Configuration ---

SESSION_SECRET: str = os.getenv(
    "SESSION_SECRET", "science-carnival-session-secret-change-in-production"
)
SESSION_ALGORITHM = "HS256"
SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "carnival_session")
SESSION_MAX_AGE_SECONDS: int = int(
    os.getenv("SESSION_MAX_AGE_SECONDS", str(7 * 24 * 60 * 60))  # 1 week
)
SESSION_COOKIE_SECURE: bool = os.getenv(
    "SESSION_COOKIE_SECURE", "false"
).lower() in {"1", "true", "yes", "y"}

# --- Account Configuration ---

DEFAULT_ADMIN_USERNAME: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")

# Password for the bootstrap admin. When unset, "password" is used and a warning logged.
ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")

# --- Registration Configuration ---

# Status given to every newly created registration
DEFAULT_REGISTRATION_STATUS: str = os.getenv(
    "DEFAULT_REGISTRATION_STATUS", "confirmed"
)

REGISTRATION_ID_PREFIX: str = os.getenv("REGISTRATION_ID_PREFIX", "SC")
REGISTRATION_ID_MAX_ATTEMPTS: int = int(
    os.getenv("REGISTRATION_ID_MAX_ATTEMPTS", "5")
)

# --- Site Settings ---

# Seeded at startup when absent. Format: {group: {name: value}}
DEFAULT_SETTINGS: Dict[str, Dict[str, str]] = {
    "general": {
        "siteTitle": "TGHBHS Science Carnival",
        "siteDescription": "A celebration of science and discovery at Town Green High School",
        "contactEmail": "science@tghbhs.edu",
        "registrationStatus": "open",
        "eventDate": "May 15th, 2025",
        "eventTime": "9:00 AM - 4:00 PM",
        "eventLocation": "TGHBHS Main Campus",
    },
    "email": {
        "emailFrom": "noreply@tghbhs.edu",
        "emailName": "TGHBHS Science Carnival",
        "sendConfirmation": "true",
        "sendReminder": "true",
    },
    "appearance": {
        "primaryColor": "#3B82F6",
        "secondaryColor": "#10B981",
    },
}
