import os
import sys
import tempfile
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

# Keep the module-level engine away from the real data directory.
_TMP_DIR = tempfile.mkdtemp(prefix="carnival-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["DATA_DIR"] = _TMP_DIR
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import app
from core.dependencies import get_storage
from models.base import Base
from utils.db_storage import DatabaseStorage
from utils.mem_storage import MemStorage
from utils.user_manager import UserManager

ADMIN_PASSWORD = "admin-pass"


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """An empty storage backend. Every contract test runs against both."""
    if request.param == "memory":
        yield MemStorage()
        return

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    db = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield DatabaseStorage(db)
    finally:
        db.close()
        engine.dispose()


@pytest.fixture()
def seeded_storage(storage, monkeypatch):
    """Storage after bootstrap, with the admin password taken from ADMIN_PASSWORD."""
    from utils import bootstrap as bootstrap_module

    monkeypatch.setattr(bootstrap_module, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    bootstrap_module.bootstrap(storage)
    return storage


@pytest.fixture()
def make_client(seeded_storage):
    """Factory for independent clients (separate cookie jars) sharing one storage."""
    app.dependency_overrides[get_storage] = lambda: seeded_storage

    def _make() -> TestClient:
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client):
    return make_client()


@pytest.fixture()
def admin_client(make_client):
    c = make_client()
    r = c.post("/api/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    return c


@pytest.fixture()
def user_client(make_client):
    c = make_client()
    r = c.post("/api/register", json={"username": "alice", "password": "alice-pass"})
    assert r.status_code == 201
    return c


@pytest.fixture()
def user_manager(storage):
    return UserManager(storage)
