import os

# Point the app's own engine at a throwaway database before anything imports it
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from formhost.main import app
from formhost.db.base import Base
from formhost.db.session import enable_sqlite_foreign_keys, get_db

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)

TestingSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@pytest.fixture()
def db_session():
    """
    Fresh in-memory schema per test.

    Application code commits and rolls back on its own (that is what is under
    test), so isolation comes from rebuilding the tables, not from an outer
    transaction.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def override_get_db(db_session):
    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def auth_enabled(monkeypatch):
    from formhost.core.config import settings

    monkeypatch.setattr(settings, "AUTH_ENABLED", True)
    yield
