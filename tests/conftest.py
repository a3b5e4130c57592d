import io
from datetime import datetime, timedelta

import mongomock
import pytest

from prepwise.app import create_app
from prepwise.database import Database

DB_NAME = "prepwise_test"
DOMAIN = "@vnrvjiet.in"


@pytest.fixture
def database():
    db = Database(
        "mongodb://localhost:27017",
        DB_NAME,
        client_factory=lambda uri, **options: mongomock.MongoClient(),
        on_state_change=lambda state, address: None,
    )
    yield db
    if db.client is not None:
        db.client.drop_database(DB_NAME)
    db.close()


@pytest.fixture
def app(database, tmp_path):
    return create_app(
        {
            "TESTING": True,
            "JWT_SECRET": "test-secret",
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
            "BASE_URL": "http://testserver",
            "INSTITUTION_EMAIL_DOMAIN": DOMAIN,
            "LOG_LEVEL": "WARNING",
        },
        database=database,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return app.extensions["mongo"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def iso(delta):
    return (datetime.utcnow() + delta).isoformat()


def pdf_upload(name="unit 1.pdf", content=b"%PDF-1.4 test document", mimetype="application/pdf"):
    return (io.BytesIO(content), name, mimetype)


@pytest.fixture
def register_teacher(client):
    counter = {"n": 0}

    def _register(**overrides):
        counter["n"] += 1
        n = counter["n"]
        body = {
            "employeeId": f"tch{n:03d}",
            "employeeName": f"Teacher {n}",
            "subjectDealing": "Operating System",
            "section": "a",
            "email": f"teacher{n}{DOMAIN}",
            "password": "secret123",
            "confirmPassword": "secret123",
        }
        body.update(overrides)
        res = client.post("/api/auth/register/teacher", json=body)
        assert res.status_code == 201, res.get_json()
        data = res.get_json()
        return data["token"], data["user"]

    return _register


@pytest.fixture
def register_student(client):
    counter = {"n": 0}

    def _register(**overrides):
        counter["n"] += 1
        n = counter["n"]
        body = {
            "name": f"Student {n}",
            "rollNo": f"22cs{n:03d}",
            "section": "A",
            "year": 2,
            "email": f"student{n}{DOMAIN}",
            "password": "secret123",
            "confirmPassword": "secret123",
        }
        body.update(overrides)
        res = client.post("/api/auth/register/student", json=body)
        assert res.status_code == 201, res.get_json()
        data = res.get_json()
        return data["token"], data["user"]

    return _register


@pytest.fixture
def create_quiz(client):
    def _create(token, **overrides):
        body = {
            "title": "OS Basics",
            "subject": "Operating System",
            "unit": 1,
            "questions": [
                {"type": "MCQ", "text": "1 + 1 = ?", "options": ["1", "2", "3"], "correctAnswer": "2", "points": 1}
            ],
        }
        body.update(overrides)
        res = client.post("/api/quizzes", json=body, headers=bearer(token))
        assert res.status_code == 201, res.get_json()
        return res.get_json()["data"]

    return _create


@pytest.fixture
def upcoming():
    return {"startTime": iso(timedelta(days=1)), "endTime": iso(timedelta(days=2))}


@pytest.fixture
def finished():
    return {"startTime": iso(timedelta(days=-2)), "endTime": iso(timedelta(days=-1))}
