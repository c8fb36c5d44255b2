import os

# Must be set before demopass is imported so no database file is created
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from demopass.database import Base, get_db, set_sqlite_pragma
from demopass.main import app


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(test_engine, "connect", set_sqlite_pragma)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Generator:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory) -> Generator:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def batch_payload():
    return {
        "batchId": "B1",
        "description": "Python demo week",
        "demoDates": ["2024-05-01", "2024-05-02"],
    }


@pytest.fixture
def student_payload():
    def build(batch_code="B1", name="Asha Verma", mobile="9876543210",
              email="asha@example.com", walk_in=False):
        return {
            "batchId": batch_code,
            "name": name,
            "mobileNumber": mobile,
            "email": email,
            "isWalkIn": walk_in,
        }
    return build
