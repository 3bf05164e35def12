import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["USE_ASYNC_ENGINE"] = "0"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from nexus.main import app
from nexus.database import Base, engine, SessionLocal
from nexus.elections.model.enums import ElectionStatusEnum
from nexus.nexus_auth.model.enums import UserRole

from tests.factories import make_candidate, make_election, make_user


@pytest.fixture
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session(database):
    with SessionLocal() as session:
        yield session


@pytest.fixture
def client(database):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin(session):
    return make_user(session, "admin", UserRole.admin, name="Ada Admin")


@pytest.fixture
def faculty(session):
    return make_user(session, "faculty", UserRole.faculty, name="Frank Faculty", department="Physics")


@pytest.fixture
def other_faculty(session):
    return make_user(session, "faculty2", UserRole.faculty, name="Fiona Faculty")


@pytest.fixture
def student(session):
    return make_user(session, "student", UserRole.student, name="Sam Student", department="Computer Science")


@pytest.fixture
def other_student(session):
    return make_user(session, "student2", UserRole.student, name="Sara Student")


@pytest.fixture
def election(session, faculty):
    return make_election(session, faculty)


@pytest.fixture
def active_election(session, faculty):
    return make_election(session, faculty, status=ElectionStatusEnum.active)


@pytest.fixture
def approved_candidate(session, active_election, other_student):
    return make_candidate(session, active_election, other_student)
