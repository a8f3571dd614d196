import pytest
from fastapi.testclient import TestClient

from auth import SessionManager
from database import EntityStore, MemoryStorage
from main import app, get_store
from schemas import User
from seed import initialize_mock_data


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return EntityStore(storage)


@pytest.fixture
def seeded_store(store):
    initialize_mock_data(store)
    return store


@pytest.fixture
def sessions(store):
    return SessionManager(store)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(email, password):
        res = client.post("/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}
    return _login


def make_user(role, semillero_id=None, name="Test User", user_id="99"):
    return User(id=user_id, name=name, email="test@unilibre.edu.co", role=role, semillero_id=semillero_id)


ADMIN = ("admin@unilibre.edu.co", "admin123")
PROFESOR = ("garcia@unilibre.edu.co", "prof123")
ESTUDIANTE = ("maria@unilibre.edu.co", "est123")
VISITANTE = ("visitante@external.com", "visit123")
