import os
import datetime

from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me')
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = datetime.timedelta(hours=48)
    JWT_TOKEN_LOCATION = ['headers']

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL', 'sqlite:///' + os.path.join(basedir, 'hotelbooking.db')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', 10))

    # Bootstrap admin, created on startup when SEED_ADMIN is on
    SEED_ADMIN = _env_bool('SEED_ADMIN', True)
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@example.com')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin1234')

    STRIPE_SECRET_KEY = os.environ.get('STRIPE_SECRET_KEY', '')
    STRIPE_API_BASE = os.environ.get('STRIPE_API_BASE', 'https://api.stripe.com')
    PAYMENT_PROCESSOR_TIMEOUT = float(os.environ.get('PAYMENT_PROCESSOR_TIMEOUT', 10))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'test-secret-key-with-enough-length-for-hs256'
    BCRYPT_ROUNDS = 4
    SEED_ADMIN = False
    STRIPE_SECRET_KEY = 'sk_test_dummy'
    LOG_LEVEL = 'WARNING'
