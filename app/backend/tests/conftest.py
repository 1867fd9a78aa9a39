from __future__ import annotations

from collections.abc import Generator
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from trackrecord.api.dependencies import get_today
from trackrecord.db.base import Base
from trackrecord.db.dependencies import get_db_session
import trackrecord.models.entities  # noqa: F401
from trackrecord.main import create_app
from trackrecord.models.entities import Customer, Project, Task, User, WorkPacket

# Date default report ranges end on in API tests.
TEST_TODAY = date(2024, 6, 30)

TEST_TABLES = [
    Customer.__table__,
    Project.__table__,
    Task.__table__,
    User.__table__,
    WorkPacket.__table__,
]


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine, tables=TEST_TABLES)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=TEST_TABLES)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_today] = lambda: TEST_TODAY
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
