import logging
from collections import namedtuple
from functools import wraps

import bcrypt
from flask import current_app
from flask_jwt_extended import create_access_token, decode_token, get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError

from hotelbooking import db
from hotelbooking.errors import (
    AuthorizationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError,
)
from hotelbooking.models import ROLE_ADMIN, ROLE_GUEST, User
from hotelbooking.schemas import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)

Identity = namedtuple('Identity', ['user_id', 'role'])


def hash_password(password):
    password = password.encode('utf-8')
    if len(password) > MAX_PASSWORD_BYTES:
        raise ValidationError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes')
    rounds = current_app.config.get('BCRYPT_ROUNDS', 10)
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def check_password(password, password_hash):
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash or over-long password
        return False


def register(email, password, role=ROLE_GUEST):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        raise DuplicateEmailError()

    user = User(email=email, password_hash=hash_password(password), role=role)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.session.rollback()
        raise DuplicateEmailError()

    logger.info('Registered user %s with role %s', user.id, user.role)
    return user


def issue_token(user):
    return create_access_token(identity=str(user.id), additional_claims={'role': user.role})


def login(email, password):
    """Return ``(token, user)`` for valid credentials.

    Unknown email and wrong password fail the same way.
    """
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None or not check_password(password, user.password_hash):
        logger.info('Failed login attempt')
        raise InvalidCredentialsError()
    return issue_token(user), user


def _identity_from_claims(claims):
    try:
        return Identity(int(claims['sub']), claims['role'])
    except (KeyError, TypeError, ValueError):
        raise InvalidTokenError()


def verify(token):
    """Decode a token issued by :func:`issue_token` into an Identity."""
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException):
        raise InvalidTokenError()
    return _identity_from_claims(claims)


def current_identity():
    return _identity_from_claims(get_jwt())


def is_admin(identity):
    return identity is not None and identity.role == ROLE_ADMIN


def auth_required(f):
    """Require a valid bearer token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Require a valid bearer token carrying the admin role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        identity = current_identity()
        if not is_admin(identity):
            logger.warning('User %s denied admin route %s', identity.user_id, f.__name__)
            raise AuthorizationError()
        return f(*args, **kwargs)
    return decorated_function


def ensure_admin(email, password):
    """Create the bootstrap admin unless a user with that email exists."""
    email = email.strip().lower()
    existing = User.query.filter_by(email=email).first()
    if existing:
        logger.info('Admin user %s already exists', email)
        return existing
    user = register(email, password, role=ROLE_ADMIN)
    logger.info('Admin user %s created', email)
    return user
