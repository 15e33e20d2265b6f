from datetime import date
from decimal import Decimal

import pytest

from hotelbooking import create_app, db as _db
from hotelbooking.config import TestConfig
from hotelbooking.errors import ProcessorError
from hotelbooking.payments import Charge


class FakeProcessor:
    """Stands in for Stripe; records every charge request."""

    name = 'stripe'

    def __init__(self):
        self.calls = []
        self.error = None

    def charge(self, amount_minor, currency, source, description):
        self.calls.append({
            'amount': amount_minor,
            'currency': currency,
            'source': source,
            'description': description,
        })
        if self.error:
            raise ProcessorError(self.error)
        return Charge(f'ch_test_{len(self.calls)}', 'succeeded')


@pytest.fixture
def app():
    """Create application for testing"""
    app = create_app(TestConfig)
    app.extensions['payment_processor'] = FakeProcessor()

    with app.app_context():
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def processor(app):
    return app.extensions['payment_processor']


@pytest.fixture
def guest(app):
    from hotelbooking import auth
    return auth.register('guest@example.com', 'secret123')


@pytest.fixture
def other_guest(app):
    from hotelbooking import auth
    return auth.register('other@example.com', 'secret123')


@pytest.fixture
def admin(app):
    from hotelbooking import auth
    return auth.ensure_admin('admin@example.com', 'admin1234')


def bearer(user):
    from hotelbooking.auth import issue_token
    return {'Authorization': f'Bearer {issue_token(user)}'}


@pytest.fixture
def guest_headers(guest):
    return bearer(guest)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def hotel(app):
    from hotelbooking import catalog
    return catalog.create_hotel({
        'name': 'Hotel Central',
        'image_url': 'https://example.com/central.jpg',
        'address': '123 Main Street, Madrid',
        'price_per_night': Decimal('150.00'),
        'rating': 4.5,
        'amenities': 'WiFi, Pool',
        'cancellation_policy': 'Free cancellation up to 24 hours before check-in',
    })


@pytest.fixture
def room(hotel):
    from hotelbooking import catalog
    return catalog.add_room(hotel.id, {
        'room_number': '101',
        'capacity': 2,
        'price_per_night': Decimal('120.00'),
        'availability': True,
    })


@pytest.fixture
def reservation(room, guest):
    from hotelbooking import reservations
    return reservations.create_reservation(
        room_id=room.id,
        check_in_date=date(2024, 1, 1),
        check_out_date=date(2024, 1, 5),
        guest_name='Juan Perez',
        phone='123456789',
        owner_user_id=guest.id,
    )


@pytest.fixture
def other_headers(other_guest):
    return bearer(other_guest)
