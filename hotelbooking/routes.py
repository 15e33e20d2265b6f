from flask import Blueprint, jsonify, request

from hotelbooking import auth, catalog, payments, reservations
from hotelbooking.auth import admin_required, auth_required, current_identity
from hotelbooking.models import User
from hotelbooking.schemas import (
    Credentials,
    HotelCreate,
    HotelFilter,
    PaymentCreate,
    ReservationCreate,
    RoomCreate,
    RoomUpdate,
    SignupRequest,
    StayDates,
    parse,
)

api = Blueprint('api', __name__)


def _json_body():
    return request.get_json(silent=True)


def _query_args():
    # Empty query values (?minPrice=) count as absent
    return {key: value for key, value in request.args.items() if value.strip()}


### AUTH ###

@api.route('/api/auth/signup', methods=['POST'])
def signup():
    data = parse(SignupRequest, _json_body())
    user = auth.register(data.email, data.password)
    return jsonify({'message': 'User created', 'user': user.to_dict()}), 201


@api.route('/api/auth/login', methods=['POST'])
def login():
    data = parse(Credentials, _json_body())
    token, user = auth.login(data.email, data.password)
    return jsonify({'access_token': token, 'token_type': 'Bearer', 'role': user.role}), 200


@api.route('/api/auth/me', methods=['GET'])
@auth_required
def me():
    identity = current_identity()
    user = User.query.filter_by(id=identity.user_id).first()
    return jsonify({
        'user_id': identity.user_id,
        'role': identity.role,
        'email': user.email if user else None,
    }), 200


### HOTELS ###

@api.route('/api/hotels', methods=['GET'])
def list_hotels():
    filters = parse(HotelFilter, _query_args())
    hotels = catalog.list_hotels(filters)
    return jsonify([hotel.to_dict() for hotel in hotels]), 200


@api.route('/api/hotels/<int:hotel_id>', methods=['GET'])
def get_hotel(hotel_id):
    hotel = catalog.get_hotel(hotel_id)
    return jsonify(hotel.to_dict(include_rooms=True)), 200


@api.route('/api/hotels', methods=['POST'])
@admin_required
def create_hotel():
    data = parse(HotelCreate, _json_body())
    hotel = catalog.create_hotel(data.model_dump())
    return jsonify(hotel.to_dict()), 201


@api.route('/api/hotels/<int:hotel_id>/rooms', methods=['POST'])
@admin_required
def add_room(hotel_id):
    data = parse(RoomCreate, _json_body())
    room = catalog.add_room(hotel_id, data.model_dump())
    return jsonify({'message': 'Room added', 'room': room.to_dict()}), 201


@api.route('/api/hotels/<int:hotel_id>/rooms/<int:room_id>', methods=['PUT'])
@admin_required
def update_room(hotel_id, room_id):
    data = parse(RoomUpdate, _json_body())
    room = catalog.update_room(hotel_id, room_id, data.changes())
    return jsonify({'message': 'Room updated', 'room': room.to_dict()}), 200


@api.route('/api/hotels/<int:hotel_id>/rooms/<int:room_id>', methods=['DELETE'])
@admin_required
def delete_room(hotel_id, room_id):
    catalog.delete_room(hotel_id, room_id)
    return jsonify({'message': 'Room deleted'}), 200


@api.route('/api/hotels/<int:hotel_id>/rooms/<int:room_id>/availability', methods=['GET'])
def room_availability(hotel_id, room_id):
    dates = parse(StayDates, _query_args())
    result = catalog.room_availability(hotel_id, room_id, dates.check_in_date, dates.check_out_date)
    return jsonify(result), 200


### RESERVATIONS ###

@api.route('/api/reservations', methods=['POST'])
@auth_required
def create_reservation():
    data = parse(ReservationCreate, _json_body())
    reservation = reservations.create_reservation(
        room_id=data.room_id,
        check_in_date=data.check_in_date,
        check_out_date=data.check_out_date,
        guest_name=data.guest_name,
        phone=data.phone,
        owner_user_id=current_identity().user_id,
    )
    return jsonify(reservation.to_dict()), 201


@api.route('/api/reservations', methods=['GET'])
@auth_required
def list_reservations():
    items = reservations.list_reservations(current_identity().user_id)
    return jsonify([reservation.to_dict() for reservation in items]), 200


@api.route('/api/reservations/<int:reservation_id>/cancel', methods=['PUT'])
@auth_required
def cancel_reservation(reservation_id):
    reservation = reservations.cancel_reservation(reservation_id, current_identity().user_id)
    return jsonify({'message': 'Reservation cancelled', 'reservation': reservation.to_dict()}), 200


### PAYMENTS ###

@api.route('/api/payments/create-payment', methods=['POST'])
@auth_required
def create_payment():
    data = parse(PaymentCreate, _json_body())
    payment = payments.charge_reservation(
        reservation_id=data.reservation_id,
        amount=data.amount,
        currency=data.currency,
        source=data.source,
        requesting_user_id=current_identity().user_id,
    )
    return jsonify(payment.to_dict()), 201
