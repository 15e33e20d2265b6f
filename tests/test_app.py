"""
Application factory: bootstrap admin, CLI and error rendering
"""
from hotelbooking import create_app, db as _db
from hotelbooking.config import TestConfig
from hotelbooking.models import User


class SeedConfig(TestConfig):
    SEED_ADMIN = True
    ADMIN_EMAIL = 'root@example.com'
    ADMIN_PASSWORD = 'rootpass'


def test_admin_seeded_on_startup():
    app = create_app(SeedConfig)

    with app.app_context():
        admins = User.query.filter_by(role='admin').all()
        assert [a.email for a in admins] == ['root@example.com']
        _db.drop_all()


def test_seed_admin_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed-admin', '--email', 'ops@example.com', '--password', 'opspass'])

    assert result.exit_code == 0
    assert 'ops@example.com' in result.output
    assert User.query.filter_by(email='ops@example.com', role='admin').count() == 1


def test_unknown_route_is_json(client):
    response = client.get('/api/nowhere')

    assert response.status_code == 404
    assert response.get_json()['code'] == 'not_found'


def test_wrong_method_is_json(client):
    response = client.delete('/api/hotels')

    assert response.status_code == 405
    assert response.get_json()['code'] == 'method_not_allowed'


def test_non_object_body_rejected(client, guest_headers):
    response = client.post('/api/reservations', json=[1, 2, 3], headers=guest_headers)

    assert response.status_code == 400
    assert response.get_json()['code'] == 'validation_error'
