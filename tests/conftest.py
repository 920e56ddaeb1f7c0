import pytest

from app import create_app
from config import Config
from extensions import db
from astroquiz.models import Question
from astroquiz.services.registration_service import SUBJECTS

ADMIN_PASSWORD = "orion-belt"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-session-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ADMIN_PASSWORD = ADMIN_PASSWORD
    ADMIN_TOKEN_SECRET = "test-token-secret"
    ADMIN_TOKEN_TTL = 3600
    SEED_SAMPLE_QUESTIONS = False
    LOG_RETENTION = 50


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_token(client):
    res = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert res.status_code == 200
    # Drop the session cookie so only the bearer token authenticates
    client.delete_cookie("session")
    return res.get_json()["token"]


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


def make_question(text, correct="A", marks=1, order=1, mode="solo", subject=None):
    q = Question(
        text=text,
        correct_answer=correct,
        time_limit=30,
        marks=marks,
        order_index=order,
        mode=mode,
        subject=subject,
    )
    q.set_options({"A": "one", "B": "two", "C": "three", "D": "four"})
    db.session.add(q)
    return q


def team_members(leaders=(0,), subjects=SUBJECTS):
    return [
        {
            "name": f"Member {i}",
            "email": f"member{i}@lincoln.edu",
            "phone": f"555-010{i}",
            "subject": subject,
            "isLeader": i in leaders,
        }
        for i, subject in enumerate(subjects)
    ]
