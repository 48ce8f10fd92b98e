"""
Pytest fixtures for Nexus backend tests.

Provides an in-memory application per test, two retailers with locations and customers,
one user per role, and login helpers.
"""

import pytest

from nexus import create_app
from nexus.extensions import db
from nexus.models import Customer, Location, Retailer
from nexus.services.auth_service import create_user

PASSWORD = "Password123!"


@pytest.fixture(scope='function')
def app():
    """Fresh application and schema for every test."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def order_store(app):
    return app.extensions["order_store"]


@pytest.fixture(scope='function')
def retailer_a(app):
    retailer = Retailer(name="TechHub Electronics", website="https://techhub.com")
    db.session.add(retailer)
    db.session.commit()
    return retailer


@pytest.fixture(scope='function')
def retailer_b(app):
    retailer = Retailer(name="GadgetZone", website="https://gadgetzone.com")
    db.session.add(retailer)
    db.session.commit()
    return retailer


@pytest.fixture(scope='function')
def location_a1(retailer_a):
    location = Location(retailer_id=retailer_a.id, name="Downtown")
    db.session.add(location)
    db.session.commit()
    return location


@pytest.fixture(scope='function')
def location_a2(retailer_a):
    location = Location(retailer_id=retailer_a.id, name="Mall Kiosk")
    db.session.add(location)
    db.session.commit()
    return location


@pytest.fixture(scope='function')
def location_b1(retailer_b):
    location = Location(retailer_id=retailer_b.id, name="Main Street")
    db.session.add(location)
    db.session.commit()
    return location


@pytest.fixture(scope='function')
def downtown_customer(location_a1):
    customer = Customer(
        retailer_id=location_a1.retailer_id,
        primary_location_id=location_a1.id,
        name="Avery Stone",
        email="avery@example.com",
    )
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture(scope='function')
def gadget_customer(retailer_b):
    customer = Customer(retailer_id=retailer_b.id, name="Blake Rivers", email="blake@example.com")
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture(scope='function')
def owner(app):
    return create_user(email="owner@ivrelife.test", password=PASSWORD, role="owner")


@pytest.fixture(scope='function')
def backoffice(app):
    return create_user(email="backoffice@ivrelife.test", password=PASSWORD, role="backoffice")


@pytest.fixture(scope='function')
def retailer_user(retailer_a):
    return create_user(
        email="manager@techhub.test", password=PASSWORD, role="retailer", retailer_id=retailer_a.id
    )


@pytest.fixture(scope='function')
def other_retailer_user(retailer_b):
    return create_user(
        email="manager@gadgetzone.test", password=PASSWORD, role="retailer", retailer_id=retailer_b.id
    )


@pytest.fixture(scope='function')
def location_user(location_a1):
    return create_user(
        email="downtown@techhub.test", password=PASSWORD, role="location_user", location_id=location_a1.id
    )


@pytest.fixture(scope='function')
def mall_user(location_a2):
    return create_user(
        email="mall@techhub.test", password=PASSWORD, role="location_user", location_id=location_a2.id
    )


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def login(client):
    """login(user) -> Authorization headers for that user."""
    def _login(user):
        token = get_auth_token(client, user.email)
        assert token, f"login failed for {user.email}"
        return auth_headers(token)
    return _login


@pytest.fixture(scope='function')
def owner_headers(login, owner):
    return login(owner)


@pytest.fixture(scope='function')
def backoffice_headers(login, backoffice):
    return login(backoffice)


@pytest.fixture(scope='function')
def retailer_headers(login, retailer_user):
    return login(retailer_user)


@pytest.fixture(scope='function')
def other_retailer_headers(login, other_retailer_user):
    return login(other_retailer_user)


@pytest.fixture(scope='function')
def location_headers(login, location_user):
    return login(location_user)


@pytest.fixture(scope='function')
def mall_headers(login, mall_user):
    return login(mall_user)
