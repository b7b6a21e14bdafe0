"""
Pytest configuration and fixtures for the GarageGuru API tests

Every test gets a fresh in-memory SQLite database and its own app instance;
threaded tests use file_app, which keeps the database in a temporary file.
"""
import pytest
from garageguru import create_app
from garageguru import db as _db

ADMIN_CODE = 'TEST-ADMIN'
STAFF_CODE = 'TEST-STAFF'
PASSWORD = 'garage-pass-123'

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'JWT_SECRET_KEY': 'test-jwt-secret-key-with-enough-length',
    'ACTIVATION_CODES': {ADMIN_CODE: 'garage_admin', STAFF_CODE: 'mechanic_staff'},
    'JOB_CARD_STRICT_PARTS': False,
    'RATELIMIT_ENABLED': False,
    'ENABLE_HTTPS': False,
    'FORCE_HTTPS_REDIRECT': False,
}


@pytest.fixture(scope='function')
def app(monkeypatch):
    """Create Flask application for testing"""
    # Keep create_app away from the on-disk instance/ database
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')

    app = create_app(dict(TEST_CONFIG, SQLALCHEMY_DATABASE_URI='sqlite:///:memory:'))

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def file_app(monkeypatch, tmp_path):
    """
    Application on a file-backed SQLite database.

    Requests made from worker threads each get their own connection, so
    transactions really run side by side. No app context is left pushed.
    """
    database_uri = f"sqlite:///{tmp_path / 'garageguru.db'}"
    monkeypatch.setenv('DATABASE_URL', database_uri)

    app = create_app(dict(TEST_CONFIG, SQLALCHEMY_DATABASE_URI=database_uri))
    with app.app_context():
        _db.create_all()

    yield app

    with app.app_context():
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


def register(client, email, activation_code=ADMIN_CODE, password=PASSWORD, **profile):
    """Helper function to register a user through the API"""
    payload = {'email': email, 'password': password, 'activation_code': activation_code}
    payload.update(profile)
    return client.post('/api/auth/register', json=payload)


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


def register_admin(client, email='owner@speedfix.test', garage_name='Speed Fix'):
    """Register a garage admin; returns (headers, garage_id)"""
    response = register(
        client, email,
        name='Ravi',
        garage_name=garage_name,
        owner_name='Ravi Kumar',
        phone='9000000001',
    )
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    return bearer(body['token']), body['garage']['id']


@pytest.fixture(scope='function')
def admin(client):
    """(headers, garage_id) for the first garage"""
    return register_admin(client)


@pytest.fixture(scope='function')
def other_admin(client):
    """(headers, garage_id) for an unrelated second garage"""
    return register_admin(client, email='owner@roadking.test', garage_name='Road King')


@pytest.fixture(scope='function')
def staff(client):
    """Bearer headers for a mechanic_staff user"""
    response = register(client, 'mechanic@speedfix.test', activation_code=STAFF_CODE, name='Arun')
    assert response.status_code == 201, response.get_json()
    return bearer(response.get_json()['token'])


@pytest.fixture(scope='function')
def super_admin(app, client, monkeypatch):
    """Bearer headers for a super_admin bootstrapped from the environment"""
    from garageguru.build import ensure_super_admin

    monkeypatch.setenv('SUPER_ADMIN_EMAIL', 'root@garageguru.test')
    monkeypatch.setenv('SUPER_ADMIN_PASSWORD', PASSWORD)
    ensure_super_admin()

    response = client.post('/api/auth/login', json={'email': 'root@garageguru.test', 'password': PASSWORD})
    assert response.status_code == 200, response.get_json()
    return bearer(response.get_json()['token'])


def add_part(client, headers, garage_id, **fields):
    """Create a spare part through the API and return its JSON"""
    payload = {'name': 'Brake Pad', 'part_number': 'BP-01', 'price': '250.00', 'quantity': 10}
    payload.update(fields)
    response = client.post(f'/api/garages/{garage_id}/spare-parts', json=payload, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def open_job(client, headers, garage_id, spare_parts=(), service_charge='300.00',
             phone='9876543210', bike_number='KA01AB1234', customer_name='Suresh'):
    """Create a job card through the API and return the response"""
    return client.post(f'/api/garages/{garage_id}/job-cards', json={
        'customer_name': customer_name,
        'phone': phone,
        'bike_number': bike_number,
        'complaint': 'Brakes squeal',
        'spare_parts': list(spare_parts),
        'service_charge': service_charge,
    }, headers=headers)
