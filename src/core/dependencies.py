"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated, Iterator

from fastapi import Depends

from config import STORAGE_BACKEND
from core.database import SessionLocal
from utils.db_storage import DatabaseStorage
from utils.mem_storage import MemStorage
from utils.session_manager import SessionManager
from utils.storage import Storage
from utils.user_manager import UserManager

# Singleton for MemStorage (process-wide)
_mem_storage_instance: MemStorage = None


def get_mem_storage() -> MemStorage:
    """Get the process-wide MemStorage singleton.

    Returns:
        MemStorage instance (singleton).
    """
    global _mem_storage_instance
    if _mem_storage_instance is None:
        _mem_storage_instance = MemStorage()
    return _mem_storage_instance


def get_storage() -> Iterator[Storage]:
    """Get the configured Storage backend.

    The database backend gets a request-scoped SQLAlchemy session that is
    closed when the request finishes.

    Yields:
        Storage instance.
    """
    if STORAGE_BACKEND == "memory":
        yield get_mem_storage()
        return

    db = SessionLocal()
    try:
        yield DatabaseStorage(db)
    finally:
        db.close()


def get_user_manager(storage: Storage = Depends(get_storage)) -> UserManager:
    """Get UserManager instance bound to the request's storage.

    Args:
        storage: Storage backend.

    Returns:
        UserManager instance.
    """
    return UserManager(storage)


def get_session_manager(storage: Storage = Depends(get_storage)) -> SessionManager:
    """Get SessionManager instance bound to the request's storage."""
    return SessionManager(storage)


# Type aliases for dependency injection
StorageDep = Annotated[Storage, Depends(get_storage)]
UserManagerDep = Annotated[UserManager, Depends(get_user_manager)]
SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
