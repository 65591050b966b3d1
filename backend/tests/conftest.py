import os
import tempfile
from pathlib import Path

# Point the app at a throwaway database before `nuredu` is imported.
_DB_DIR = tempfile.mkdtemp(prefix="nuredu-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from nuredu.curriculum import parse_curriculum
from nuredu.database import engine
from nuredu.main import app
from nuredu import repositories, services


CURRICULUM_DOC = {
    "specialities": {
        "us": [
            {
                "name": "Software Engineering",
                "grades": [
                    {"gradeNumber": 1, "lessons": [{"queue": 1, "title": "Intro"}, {"queue": 2, "title": "Loops"}]},
                    {"gradeNumber": 2, "lessons": [{"queue": 1, "title": "Functions"}]},
                ],
            },
            {
                "name": "Robotics",
                "grades": [
                    {"gradeNumber": 1, "lessons": [{"queue": 1, "title": "Intro to Robotics"}]},
                    {"gradeNumber": 3, "lessons": [{"queue": 1, "title": "Motors"}]},
                ],
            },
        ],
        "ua": [
            {"name": "Робототехніка", "grades": [{"gradeNumber": 1, "lessons": [{"queue": 1, "title": "Вступ"}]}]},
        ],
    },
    "lessonTypes": {"us": ["Theory", "Practice"], "ua": ["Теорія"]},
}


@pytest.fixture
def tree():
    return parse_curriculum(CURRICULUM_DOC)


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


def _token_for(client, username, password, roles=()):
    client.post('/auth/register', json={'username': username, 'password': password})
    with Session(engine) as session:
        user = repositories.UserRepository(session).get_by_username(username)
        for role in roles:
            services.UserService(session).grant_role(user.id, role)
    r = client.post('/auth/login', json={'username': username, 'password': password})
    assert r.status_code == 200
    return r.json()['access_token']


@pytest.fixture(scope="session")
def admin_token(client):
    return _token_for(client, 'admin_fixture', 'pw', roles=('admin',))


@pytest.fixture(scope="session")
def teacher_token(client):
    return _token_for(client, 'teacher_fixture', 'pw', roles=('teacher',))


@pytest.fixture(scope="session")
def student_token(client):
    return _token_for(client, 'student_fixture', 'pw')
