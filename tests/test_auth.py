"""
Identity provider and access control tests
"""
from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from hotelbooking import auth
from hotelbooking.errors import DuplicateEmailError, InvalidCredentialsError, InvalidTokenError, ValidationError
from hotelbooking.models import ROLE_ADMIN, ROLE_GUEST, User


class TestRegister:

    def test_register_hashes_password(self, app):
        user = auth.register('new@example.com', 'secret123')

        assert user.id is not None
        assert user.role == ROLE_GUEST
        assert user.password_hash != 'secret123'
        assert auth.check_password('secret123', user.password_hash)

    def test_email_is_normalized(self, app):
        user = auth.register('  Mixed@Example.COM ', 'secret123')
        assert user.email == 'mixed@example.com'

    def test_duplicate_email_rejected(self, app, guest):
        with pytest.raises(DuplicateEmailError):
            auth.register('guest@example.com', 'another-password')

        assert User.query.filter_by(email='guest@example.com').count() == 1

    def test_ensure_admin_is_idempotent(self, app):
        first = auth.ensure_admin('boss@example.com', 'admin1234')
        second = auth.ensure_admin('boss@example.com', 'admin1234')

        assert first.id == second.id
        assert first.role == ROLE_ADMIN

    def test_password_over_72_bytes_rejected(self, app):
        with pytest.raises(ValidationError):
            auth.register('long@example.com', 'p' * 73)

        assert User.query.filter_by(email='long@example.com').count() == 0


class TestLogin:

    def test_login_returns_verifiable_token(self, app, guest):
        token, user = auth.login('guest@example.com', 'secret123')

        identity = auth.verify(token)
        assert identity.user_id == guest.id
        assert identity.role == ROLE_GUEST
        assert user.id == guest.id

    def test_admin_token_carries_role(self, app, admin):
        token, _ = auth.login('admin@example.com', 'admin1234')
        assert auth.verify(token).role == ROLE_ADMIN

    def test_wrong_password(self, app, guest):
        with pytest.raises(InvalidCredentialsError):
            auth.login('guest@example.com', 'wrong-password')

    def test_unknown_email_fails_like_wrong_password(self, app):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            auth.login('nobody@example.com', 'secret123')
        assert exc_info.value.code == 'invalid_credentials'


class TestVerify:

    def test_garbage_token(self, app):
        with pytest.raises(InvalidTokenError):
            auth.verify('not-a-jwt')

    def test_expired_token(self, app, guest):
        token = create_access_token(
            identity=str(guest.id),
            additional_claims={'role': guest.role},
            expires_delta=timedelta(seconds=-10),
        )
        with pytest.raises(InvalidTokenError):
            auth.verify(token)

    def test_token_without_role(self, app, guest):
        token = create_access_token(identity=str(guest.id))
        with pytest.raises(InvalidTokenError):
            auth.verify(token)

    def test_token_valid_for_48_hours(self, app):
        assert app.config['JWT_ACCESS_TOKEN_EXPIRES'] == timedelta(hours=48)


class TestIsAdmin:

    def test_roles(self):
        assert auth.is_admin(auth.Identity(1, 'admin'))
        assert not auth.is_admin(auth.Identity(2, 'guest'))
        assert not auth.is_admin(None)


class TestAuthEndpoints:

    def test_signup(self, client):
        response = client.post('/api/auth/signup', json={'email': 'a@example.com', 'password': 'secret123'})

        assert response.status_code == 201
        body = response.get_json()
        assert body['user']['email'] == 'a@example.com'
        assert body['user']['role'] == 'guest'
        assert 'password_hash' not in body['user']

    def test_signup_duplicate(self, client, guest):
        response = client.post('/api/auth/signup', json={'email': 'guest@example.com', 'password': 'secret123'})

        assert response.status_code == 409
        assert response.get_json()['code'] == 'duplicate_email'

    def test_signup_invalid_body(self, client):
        response = client.post('/api/auth/signup', json={'email': 'not-an-email'})

        assert response.status_code == 400
        body = response.get_json()
        assert body['code'] == 'validation_error'
        assert {d['field'] for d in body['details']} >= {'email', 'password'}

    @pytest.mark.parametrize('password', ['p' * 100, '\u00e9' * 40])
    def test_signup_password_too_long_for_bcrypt(self, client, password):
        response = client.post('/api/auth/signup', json={'email': 'long@example.com', 'password': password})

        assert response.status_code == 400
        body = response.get_json()
        assert body['code'] == 'validation_error'
        assert [d['field'] for d in body['details']] == ['password']
        assert User.query.filter_by(email='long@example.com').count() == 0

    def test_signup_password_of_72_bytes(self, client):
        password = '\u00e9' * 36
        response = client.post('/api/auth/signup', json={'email': 'edge@example.com', 'password': password})
        assert response.status_code == 201

        response = client.post('/api/auth/login', json={'email': 'edge@example.com', 'password': password})
        assert response.status_code == 200

    def test_login_password_too_long(self, client, guest):
        response = client.post('/api/auth/login', json={'email': 'guest@example.com', 'password': 'p' * 100})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'validation_error'

    def test_login_and_me(self, client, guest):
        response = client.post('/api/auth/login', json={'email': 'guest@example.com', 'password': 'secret123'})
        assert response.status_code == 200
        token = response.get_json()['access_token']

        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 200
        assert response.get_json() == {'user_id': guest.id, 'role': 'guest', 'email': 'guest@example.com'}

    def test_login_wrong_password(self, client, guest):
        response = client.post('/api/auth/login', json={'email': 'guest@example.com', 'password': 'nope'})

        assert response.status_code == 401
        assert response.get_json()['code'] == 'invalid_credentials'

    def test_missing_token(self, client):
        response = client.get('/api/reservations')

        assert response.status_code == 401
        assert response.get_json()['code'] == 'authentication_required'

    def test_malformed_header(self, client):
        response = client.get('/api/reservations', headers={'Authorization': 'Token abc'})
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get('/api/reservations', headers={'Authorization': 'Bearer abc.def.ghi'})

        assert response.status_code == 401
        assert response.get_json()['code'] == 'invalid_token'
