import os

# viewcount.main crea una app a nivel de módulo: que use SQLite en memoria
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("COUNTER_RETRY_BACKOFF", "0")

import pytest
from fastapi.testclient import TestClient

from viewcount.config import Settings
from viewcount.database import Database
from viewcount.main import create_app
from viewcount.services.counter_store import CounterStore


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'viewcount.db'}")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    return CounterStore(database, max_attempts=50, retry_backoff=0.001)


@pytest.fixture
def settings(monkeypatch):
    for name in ("CACHE_TTL_SECONDS", "CDN_CACHE", "TRUST_PROXY_HEADERS", "CORS_ORIGIN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("COUNTER_RETRY_BACKOFF", "0")
    return Settings()


@pytest.fixture
def client(settings, database):
    return TestClient(create_app(settings=settings, database=database))
