import logging

from sqlalchemy.exc import IntegrityError

from hotelbooking import db
from hotelbooking.errors import ConflictError, HotelNotFoundError, RoomNotFoundError
from hotelbooking.models import Hotel, Room
from hotelbooking.reservations import is_room_available

logger = logging.getLogger(__name__)


def create_hotel(fields):
    hotel = Hotel(**fields)
    db.session.add(hotel)
    db.session.commit()
    logger.info('Created hotel %s (%s)', hotel.id, hotel.name)
    return hotel


def list_hotels(filters=None):
    """Hotels matching every filter that is set (logical AND)."""
    query = Hotel.query
    if filters is not None:
        if filters.address:
            query = query.filter(Hotel.address.icontains(filters.address, autoescape=True))
        if filters.min_price is not None:
            query = query.filter(Hotel.price_per_night >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Hotel.price_per_night <= filters.max_price)
        if filters.rating is not None:
            query = query.filter(Hotel.rating >= filters.rating)
        if filters.amenities:
            query = query.filter(Hotel.amenities.icontains(filters.amenities, autoescape=True))
    return query.order_by(Hotel.id).all()


def get_hotel(hotel_id):
    hotel = db.session.get(Hotel, hotel_id)
    if hotel is None:
        raise HotelNotFoundError()
    return hotel


def get_room(hotel_id, room_id):
    get_hotel(hotel_id)
    room = Room.query.filter_by(id=room_id, hotel_id=hotel_id).first()
    if room is None:
        raise RoomNotFoundError()
    return room


def _room_number_taken(hotel_id, room_number, exclude_room_id=None):
    query = Room.query.filter_by(hotel_id=hotel_id, room_number=room_number)
    if exclude_room_id is not None:
        query = query.filter(Room.id != exclude_room_id)
    return db.session.query(query.exists()).scalar()


def _commit_room(room):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('Room number already exists in this hotel', code='duplicate_room_number')
    return room


def add_room(hotel_id, fields):
    hotel = get_hotel(hotel_id)
    if _room_number_taken(hotel.id, fields['room_number']):
        raise ConflictError('Room number already exists in this hotel', code='duplicate_room_number')

    room = Room(hotel_id=hotel.id, **fields)
    db.session.add(room)
    _commit_room(room)
    logger.info('Added room %s (number %s) to hotel %s', room.id, room.room_number, hotel.id)
    return room


def update_room(hotel_id, room_id, changes):
    room = get_room(hotel_id, room_id)
    if 'room_number' in changes and _room_number_taken(hotel_id, changes['room_number'], exclude_room_id=room.id):
        raise ConflictError('Room number already exists in this hotel', code='duplicate_room_number')

    for key, value in changes.items():
        setattr(room, key, value)
    _commit_room(room)
    logger.info('Updated room %s of hotel %s: %s', room.id, hotel_id, sorted(changes))
    return room


def delete_room(hotel_id, room_id):
    room = get_room(hotel_id, room_id)
    if room.reservations.first() is not None:
        raise ConflictError(
            'Room has reservations and cannot be deleted; mark it unavailable instead',
            code='room_in_use',
        )
    db.session.delete(room)
    db.session.commit()
    logger.info('Deleted room %s of hotel %s', room_id, hotel_id)


def room_availability(hotel_id, room_id, check_in_date, check_out_date):
    room = get_room(hotel_id, room_id)
    return {
        'room_id': room.id,
        'check_in_date': check_in_date.isoformat(),
        'check_out_date': check_out_date.isoformat(),
        'available': is_room_available(room.id, check_in_date, check_out_date),
    }
