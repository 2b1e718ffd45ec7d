import pytest

from app import create_app
from config import TestConfig
from models import db
from models.rbac import Role, Session
from seed_catalog import seed_sample_catalog


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def app():
    """Fresh app over an in-memory database, seeded with the sample catalog."""
    app = create_app(TestConfig)
    with app.app_context():
        seed_sample_catalog()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for calling the service layer directly."""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin():
    return Session(Role.ADMIN, "Ama Admin")


@pytest.fixture
def mtn_rep():
    return Session(Role.MTN, "Kofi MTN")


@pytest.fixture
def telecel_rep():
    return Session(Role.TELECEL, "Esi Telecel")


def login(client, role, display_name, password):
    resp = client.post("/api/auth/login", json={
        "role": role, "display_name": display_name, "password": password,
    })
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['data']['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, "admin", "Ama Admin", TestConfig.ADMIN_PASSWORD)


@pytest.fixture
def mtn_headers(client):
    return login(client, "mtn", "Kofi MTN", TestConfig.REP_PASSWORD)


@pytest.fixture
def telecel_headers(client):
    return login(client, "telecel", "Esi Telecel", TestConfig.REP_PASSWORD)
