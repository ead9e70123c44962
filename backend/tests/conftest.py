import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app import app
from backend.field_order_module.database import Base, get_db_session
from backend.field_order_module.models import School
from backend.field_order_module.security import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def schools(db):
    main = School(id="school-main", name="Green Valley High")
    db.add(main)
    db.flush()
    db.add(School(id="school-north", name="North Campus", parent_school_id=main.id))
    db.add(School(id="school-other", name="Riverside Academy"))
    db.commit()
    return {"main": "school-main", "north": "school-north", "other": "school-other"}


@pytest.fixture
def client(session_factory):
    def override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(role: str = "school_admin", school_id: str | None = "school-main") -> dict[str, str]:
    token = create_access_token(subject=f"{role}@school.local", role=role, school_id=school_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers
