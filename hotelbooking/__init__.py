import logging

import click
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

logger = logging.getLogger(__name__)


def configure_logging(app):
    logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging.getLogger('hotelbooking').setLevel(app.config.get('LOG_LEVEL', 'INFO'))


def _error_response(message, code, status):
    return jsonify({'error': message, 'code': code}), status


def register_jwt_callbacks():
    @jwt.unauthorized_loader
    def missing_token(reason):
        return _error_response('Authentication required', 'authentication_required', 401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _error_response('Invalid token', 'invalid_token', 401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _error_response('Token has expired', 'invalid_token', 401)


def register_error_handlers(app):
    from hotelbooking.errors import BookingError

    @app.errorhandler(BookingError)
    def handle_booking_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        code = (error.name or 'error').lower().replace(' ', '_')
        return _error_response(error.description, code, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception('Unhandled error')
        db.session.rollback()
        return _error_response('Internal server error', 'internal_error', 500)


def register_commands(app):
    @app.cli.command('seed-admin')
    @click.option('--email', default=None, help='Admin email (defaults to ADMIN_EMAIL)')
    @click.option('--password', default=None, help='Admin password (defaults to ADMIN_PASSWORD)')
    def seed_admin(email, password):
        """Create the bootstrap admin user."""
        from hotelbooking.auth import ensure_admin

        user = ensure_admin(email or app.config['ADMIN_EMAIL'], password or app.config['ADMIN_PASSWORD'])
        click.echo(f'Admin user: {user.email}')


def create_app(config_class='hotelbooking.config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Extensions are process-wide; sessions are scoped to the app context
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    from hotelbooking.locks import KeyedLocks
    from hotelbooking.payments import StripeProcessor

    app.extensions['booking_locks'] = KeyedLocks()
    app.extensions['payment_processor'] = StripeProcessor.from_config(app.config)

    register_jwt_callbacks()
    register_error_handlers(app)
    register_commands(app)

    with app.app_context():
        from hotelbooking import routes
        app.register_blueprint(routes.api)

        db.create_all()

        if app.config.get('SEED_ADMIN'):
            from hotelbooking.auth import ensure_admin
            ensure_admin(app.config['ADMIN_EMAIL'], app.config['ADMIN_PASSWORD'])

        logger.info('Application started with database %s', db.engine.url.render_as_string(hide_password=True))

    return app
