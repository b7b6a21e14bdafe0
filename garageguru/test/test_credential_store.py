"""
Tests for registration, login and bearer-token authentication
"""

from datetime import timedelta
import pytest
from flask_jwt_extended import create_access_token
from garageguru import db
from garageguru.buisness.core.credential_store import CredentialStore
from garageguru.data.core.garage import Garage
from garageguru.data.core.user import Role, User
from garageguru.exceptions import InvalidToken, UnknownIdentity
from garageguru.test.conftest import PASSWORD, STAFF_CODE, bearer, register, register_admin


def test_admin_registration_creates_garage(client):
    """A garage admin registration creates the garage and binds the user to it"""
    response = register(
        client, 'Owner@SpeedFix.test',
        name='Ravi', garage_name='Speed Fix', owner_name='Ravi Kumar', phone='9000000001',
    )
    assert response.status_code == 201
    body = response.get_json()

    assert body['token']
    assert body['user']['email'] == 'owner@speedfix.test'
    assert body['user']['role'] == 'garage_admin'
    assert body['user']['garage_id'] == body['garage']['id']
    assert 'password_hash' not in body['user']
    assert body['garage']['name'] == 'Speed Fix'
    assert body['garage']['owner_name'] == 'Ravi Kumar'

    user = User.query.filter_by(email='owner@speedfix.test').one()
    assert user.password_hash != PASSWORD
    assert user.check_password(PASSWORD)


def test_staff_registration_has_no_garage(client):
    """mechanic_staff users are created without a garage binding"""
    response = register(client, 'mechanic@speedfix.test', activation_code=STAFF_CODE, name='Arun')
    assert response.status_code == 201
    body = response.get_json()
    assert body['user']['role'] == 'mechanic_staff'
    assert body['user']['garage_id'] is None
    assert body['garage'] is None
    assert Garage.query.count() == 0


def test_duplicate_email_rejected(client):
    """Email is globally unique, compared case-insensitively"""
    register_admin(client, email='owner@speedfix.test')
    response = register(
        client, 'OWNER@speedfix.test',
        garage_name='Second', owner_name='Someone', phone='9000000002',
    )
    assert response.status_code == 409
    assert response.get_json()['error']['code'] == 'DUPLICATE_IDENTITY'
    assert Garage.query.count() == 1


def test_unknown_activation_code_creates_nothing(client):
    """Unknown activation codes fail before any record is written"""
    response = register(
        client, 'owner@speedfix.test', activation_code='NOPE',
        garage_name='Speed Fix', owner_name='Ravi', phone='9000000001',
    )
    assert response.status_code == 400
    assert response.get_json()['error']['code'] == 'INVALID_ACTIVATION_CODE'
    assert User.query.count() == 0
    assert Garage.query.count() == 0


def test_admin_registration_requires_garage_profile(client):
    """An admin without garage_name/owner_name/phone is a validation error"""
    response = register(client, 'owner@speedfix.test', garage_name='Speed Fix')
    assert response.status_code == 400
    error = response.get_json()['error']
    assert error['code'] == 'INVALID_PAYLOAD'
    assert {d['field'] for d in error['details']} == {'owner_name', 'phone'}
    assert User.query.count() == 0


def test_malformed_registration_payload(client):
    """Schema violations are reported per field"""
    response = client.post('/api/auth/register', json={'email': 'not-an-email', 'password': 'x'})
    assert response.status_code == 400
    error = response.get_json()['error']
    assert error['code'] == 'INVALID_PAYLOAD'
    fields = {d['field'] for d in error['details']}
    assert {'email', 'password', 'activation_code'} <= fields


def test_login_returns_token_and_garage(client):
    """Valid credentials return a working bearer token"""
    _, garage_id = register_admin(client, email='owner@speedfix.test')

    response = client.post('/api/auth/login', json={'email': 'owner@speedfix.test', 'password': PASSWORD})
    assert response.status_code == 200
    body = response.get_json()
    assert body['garage']['id'] == garage_id

    profile = client.get('/api/user/profile', headers=bearer(body['token']))
    assert profile.status_code == 200
    assert profile.get_json()['user']['email'] == 'owner@speedfix.test'
    assert profile.get_json()['garage']['id'] == garage_id


def test_login_failures_are_indistinguishable(client):
    """Wrong password and unknown email fail with the same error"""
    register_admin(client, email='owner@speedfix.test')

    wrong_password = client.post('/api/auth/login', json={'email': 'owner@speedfix.test', 'password': 'wrong-pass'})
    unknown_email = client.post('/api/auth/login', json={'email': 'ghost@speedfix.test', 'password': PASSWORD})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json()
    assert wrong_password.get_json()['error']['code'] == 'INVALID_CREDENTIALS'


def test_missing_token(client):
    response = client.get('/api/user/profile')
    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'MISSING_TOKEN'


def test_non_bearer_scheme_is_missing_token(client):
    response = client.get('/api/user/profile', headers={'Authorization': 'Basic abc123'})
    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'MISSING_TOKEN'


def test_garbage_token(client):
    response = client.get('/api/user/profile', headers=bearer('not.a.jwt'))
    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'INVALID_TOKEN'


def test_token_signed_with_other_key(app, client):
    """A token from another deployment does not verify"""
    headers, _ = register_admin(client)
    token = headers['Authorization'].split(' ', 1)[1]

    app.config['JWT_SECRET_KEY'] = 'a-completely-different-signing-key'
    response = client.get('/api/user/profile', headers=bearer(token))
    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'INVALID_TOKEN'


def test_expired_token(app, client):
    register_admin(client)
    user = User.query.one()
    token = create_access_token(identity=user.id, expires_delta=timedelta(seconds=-10))

    with pytest.raises(InvalidToken):
        CredentialStore.authenticate(token)

    response = client.get('/api/user/profile', headers=bearer(token))
    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'INVALID_TOKEN'


def test_token_for_deleted_user(app, client):
    """Identity is re-resolved on every request"""
    headers, _ = register_admin(client)
    assert client.get('/api/user/profile', headers=headers).status_code == 200

    User.query.delete()
    db.session.commit()

    with pytest.raises(UnknownIdentity):
        CredentialStore.authenticate(headers['Authorization'].split(' ', 1)[1])

    response = client.get('/api/user/profile', headers=headers)
    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'UNKNOWN_IDENTITY'


def test_authenticate_resolves_user(app, client):
    register_admin(client)
    user = User.query.one()

    resolved = CredentialStore.authenticate(CredentialStore.issue_token(user))
    assert resolved.id == user.id
    assert resolved.role is Role.GARAGE_ADMIN


def test_auth_endpoints_are_rate_limited(monkeypatch):
    """Repeated login attempts from one address are throttled"""
    from garageguru import create_app

    monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': True,
        'AUTH_RATE_LIMIT': '2 per minute',
        'ENABLE_HTTPS': False,
    })
    with app.app_context():
        db.create_all()

    # Each request gets its own app context here, as in production
    client = app.test_client()
    statuses = [
        client.post('/api/auth/login', json={'email': 'a@b.test', 'password': 'x'}).status_code
        for _ in range(3)
    ]

    assert statuses[:2] == [401, 401]
    assert statuses[2] == 429
