import mongomock
import pytest

import config
from app import create_app
from utils import rate_limiter


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "test-access-secret-with-enough-bytes-0123")
    monkeypatch.setattr(config, "REFRESH_TOKEN_SECRET", "test-refresh-secret-with-enough-bytes-456")
    monkeypatch.setattr(config, "GROQ_API_KEY", "test-groq-key")
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-gemini-key")
    rate_limiter.reset()
    application = create_app(testing=True, database=mongomock.MongoClient().db)
    yield application
    rate_limiter.reset()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return app.extensions["mongo_db"]


REGISTRATION = {
    "name": "Asha",
    "email": "asha@example.com",
    "password": "secret123",
    "age": 21,
    "gender": "female",
}


@pytest.fixture
def registration():
    return dict(REGISTRATION)


@pytest.fixture
def registered_user(client):
    resp = client.post("/api/auth/register", json=REGISTRATION)
    assert resp.status_code == 201
    return resp.get_json()["data"]


@pytest.fixture
def login_data(client, registered_user):
    resp = client.post("/api/auth/login", json={
        "email": REGISTRATION["email"],
        "password": REGISTRATION["password"],
    })
    assert resp.status_code == 200
    return resp.get_json()["data"]


@pytest.fixture
def auth_headers(login_data):
    return {"Authorization": f"Bearer {login_data['tokens']['accessToken']}"}


@pytest.fixture
def user_id(login_data):
    return login_data["user"]["id"]

