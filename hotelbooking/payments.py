import logging
from collections import namedtuple
from decimal import ROUND_HALF_UP, Decimal

import requests
from flask import current_app

from hotelbooking import db
from hotelbooking.errors import ConflictError, ProcessorError, ReservationNotFoundError
from hotelbooking.models import PAYMENT_COMPLETED, Payment, Reservation, utcnow

logger = logging.getLogger(__name__)

Charge = namedtuple('Charge', ['charge_id', 'status'])


def to_minor_units(amount):
    """Convert a decimal amount to integer cents."""
    return int((Decimal(amount) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class StripeProcessor:
    """Stripe charges API client."""

    name = 'stripe'

    def __init__(self, secret_key, api_base='https://api.stripe.com', timeout=10):
        self.secret_key = secret_key
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            secret_key=config.get('STRIPE_SECRET_KEY', ''),
            api_base=config.get('STRIPE_API_BASE', 'https://api.stripe.com'),
            timeout=config.get('PAYMENT_PROCESSOR_TIMEOUT', 10),
        )

    def charge(self, amount_minor, currency, source, description):
        if not self.secret_key:
            raise ProcessorError('Payment processor is not configured')

        try:
            response = requests.post(
                f'{self.api_base}/v1/charges',
                data={
                    'amount': amount_minor,
                    'currency': currency,
                    'source': source,
                    'description': description,
                },
                auth=(self.secret_key, ''),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error('Stripe charge timed out after %ss', self.timeout)
            raise ProcessorError('Payment processor timed out')
        except requests.exceptions.RequestException as e:
            logger.error('Network error calling Stripe: %s', e)
            raise ProcessorError('Could not reach payment processor')

        try:
            result = response.json()
        except ValueError:
            result = {}

        if not response.ok:
            message = (result.get('error') or {}).get('message', 'Charge declined')
            logger.warning('Stripe returned %s: %s', response.status_code, message)
            raise ProcessorError(f'Payment failed: {message}')

        if result.get('status') != 'succeeded' or not result.get('id'):
            logger.warning('Stripe charge %s not succeeded: %s', result.get('id'), result.get('status'))
            raise ProcessorError('Payment was not completed')

        return Charge(result['id'], result['status'])


def get_processor():
    return current_app.extensions['payment_processor']


def charge_reservation(reservation_id, amount, currency, source, requesting_user_id):
    """Charge ``amount`` for a reservation owned by the requester and record it."""
    amount = Decimal(amount)
    processor = get_processor()

    # Held across the external call so a reservation is never charged twice
    with current_app.extensions['booking_locks'].hold('reservation', reservation_id):
        reservation = Reservation.query.filter_by(
            id=reservation_id, user_id=requesting_user_id
        ).with_for_update().first()
        if reservation is None:
            db.session.rollback()
            raise ReservationNotFoundError()

        if reservation.is_cancelled:
            db.session.rollback()
            raise ConflictError('Reservation is cancelled', code='reservation_cancelled')

        if Payment.query.filter_by(reservation_id=reservation.id).first() is not None:
            db.session.rollback()
            raise ConflictError('Reservation is already paid', code='already_paid')

        try:
            charge = processor.charge(
                to_minor_units(amount),
                currency,
                source,
                f'Payment for reservation {reservation.id}',
            )
        except ProcessorError:
            db.session.rollback()
            logger.warning('Charge for reservation %s failed', reservation.id)
            raise

        payment = Payment(
            reservation_id=reservation.id,
            amount=amount,
            currency=currency,
            payment_method=processor.name,
            processor_charge_id=charge.charge_id,
            status=PAYMENT_COMPLETED,
            payment_date=utcnow(),
        )
        db.session.add(payment)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception(
                'Charge %s succeeded for reservation %s but the payment was not recorded',
                charge.charge_id, reservation_id,
            )
            raise

    logger.info(
        'Payment %s recorded for reservation %s: %s %s (charge %s)',
        payment.id, reservation_id, amount, currency, charge.charge_id,
    )
    return payment
