import logging

from flask import current_app

from hotelbooking import db
from hotelbooking.errors import (
    AlreadyCancelledError,
    DateConflictError,
    ReservationNotFoundError,
    RoomNotFoundError,
    ValidationError,
)
from hotelbooking.models import (
    RESERVATION_CANCELLED,
    RESERVATION_PENDING,
    Reservation,
    Room,
    utcnow,
)

logger = logging.getLogger(__name__)


def _locks():
    return current_app.extensions['booking_locks']


def find_conflicting_reservation(room_id, check_in_date, check_out_date):
    """First active reservation on the room overlapping the requested stay."""
    # Half-open stays: the checkout day is free for the next guest
    return Reservation.query.filter(
        Reservation.room_id == room_id,
        Reservation.status != RESERVATION_CANCELLED,
        Reservation.check_in_date < check_out_date,
        Reservation.check_out_date > check_in_date,
    ).first()


def is_room_available(room_id, check_in_date, check_out_date):
    return find_conflicting_reservation(room_id, check_in_date, check_out_date) is None


def create_reservation(room_id, check_in_date, check_out_date, guest_name, phone, owner_user_id):
    # The room lock spans the conflict check and the insert; FOR UPDATE on
    # the room row extends that across processes where the database allows.
    with _locks().hold('room', room_id):
        room = db.session.get(Room, room_id, with_for_update=True)
        if room is None:
            db.session.rollback()
            raise RoomNotFoundError()

        if check_out_date <= check_in_date:
            db.session.rollback()
            raise ValidationError('Check-out date must be after check-in date', code='invalid_date_range')

        conflict = find_conflicting_reservation(room.id, check_in_date, check_out_date)
        if conflict is not None:
            db.session.rollback()
            logger.info(
                'Room %s unavailable for %s..%s (overlaps reservation %s)',
                room.id, check_in_date, check_out_date, conflict.id,
            )
            raise DateConflictError()

        reservation = Reservation(
            guest_name=guest_name,
            phone=phone,
            check_in_date=check_in_date,
            check_out_date=check_out_date,
            room_id=room.id,
            user_id=owner_user_id,
            status=RESERVATION_PENDING,
        )
        db.session.add(reservation)
        db.session.commit()

    logger.info(
        'Reservation %s created for room %s by user %s (%s..%s)',
        reservation.id, room_id, owner_user_id, check_in_date, check_out_date,
    )
    return reservation


def cancel_reservation(reservation_id, requesting_user_id):
    with _locks().hold('reservation', reservation_id):
        reservation = Reservation.query.filter_by(
            id=reservation_id, user_id=requesting_user_id
        ).with_for_update().first()
        if reservation is None:
            db.session.rollback()
            raise ReservationNotFoundError()

        if reservation.is_cancelled:
            db.session.rollback()
            raise AlreadyCancelledError()

        reservation.status = RESERVATION_CANCELLED
        reservation.cancelled_at = utcnow()
        db.session.commit()

    logger.info('Reservation %s cancelled by user %s', reservation.id, requesting_user_id)
    return reservation


def list_reservations(user_id):
    return Reservation.query.filter_by(user_id=user_id).order_by(Reservation.id).all()
