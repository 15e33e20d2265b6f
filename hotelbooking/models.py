# hotelbooking/models.py
from datetime import datetime, timezone

from hotelbooking import db

ROLE_GUEST = 'guest'
ROLE_ADMIN = 'admin'

RESERVATION_PENDING = 'pending'
RESERVATION_CONFIRMED = 'confirmed'
RESERVATION_CANCELLED = 'cancelled'

PAYMENT_PENDING = 'pending'
PAYMENT_COMPLETED = 'completed'
PAYMENT_FAILED = 'failed'


def utcnow():
    return datetime.now(timezone.utc)


def _money(value):
    return float(value) if value is not None else None


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)  # bcrypt
    role = db.Column(db.Enum(ROLE_GUEST, ROLE_ADMIN, name='user_role'), nullable=False, default=ROLE_GUEST)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    reservations = db.relationship('Reservation', backref='user', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'role': self.role,
        }


class Hotel(db.Model):
    __tablename__ = 'hotels'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    image_url = db.Column(db.String(500), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    price_per_night = db.Column(db.Numeric(10, 2), nullable=False)
    rating = db.Column(db.Float)
    amenities = db.Column(db.Text)  # comma-separated tags
    cancellation_policy = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    rooms = db.relationship(
        'Room', backref='hotel', lazy=True, cascade='all, delete-orphan', order_by='Room.id'
    )

    @property
    def amenity_list(self):
        if not self.amenities:
            return []
        return [tag.strip() for tag in self.amenities.split(',') if tag.strip()]

    def to_dict(self, include_rooms=False):
        data = {
            'id': self.id,
            'name': self.name,
            'image_url': self.image_url,
            'address': self.address,
            'price_per_night': _money(self.price_per_night),
            'rating': self.rating,
            'amenities': self.amenity_list,
            'cancellation_policy': self.cancellation_policy,
        }
        if include_rooms:
            data['rooms'] = [room.to_dict() for room in self.rooms]
        return data


class Room(db.Model):
    __tablename__ = 'rooms'
    __table_args__ = (
        db.UniqueConstraint('hotel_id', 'room_number', name='uq_room_number_per_hotel'),
    )

    id = db.Column(db.Integer, primary_key=True)
    hotel_id = db.Column(db.Integer, db.ForeignKey('hotels.id'), nullable=False, index=True)
    room_number = db.Column(db.String(20), nullable=False)
    capacity = db.Column(db.Integer, nullable=False)
    price_per_night = db.Column(db.Numeric(10, 2), nullable=False)
    # Advisory only; booking conflicts are decided by reservations
    availability = db.Column(db.Boolean, nullable=False, default=True)

    reservations = db.relationship('Reservation', backref='room', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'hotel_id': self.hotel_id,
            'room_number': self.room_number,
            'capacity': self.capacity,
            'price_per_night': _money(self.price_per_night),
            'availability': self.availability,
        }


class Reservation(db.Model):
    __tablename__ = 'reservations'
    __table_args__ = (
        db.CheckConstraint('check_out_date > check_in_date', name='ck_reservation_dates'),
        db.Index('ix_reservation_room_dates', 'room_id', 'check_in_date', 'check_out_date'),
    )

    id = db.Column(db.Integer, primary_key=True)
    guest_name = db.Column(db.String(200), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    check_in_date = db.Column(db.Date, nullable=False)
    check_out_date = db.Column(db.Date, nullable=False)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    status = db.Column(
        db.Enum(RESERVATION_PENDING, RESERVATION_CONFIRMED, RESERVATION_CANCELLED, name='reservation_status'),
        nullable=False,
        default=RESERVATION_PENDING,
    )
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    payment = db.relationship('Payment', backref='reservation', uselist=False, lazy=True)

    @property
    def is_cancelled(self):
        return self.status == RESERVATION_CANCELLED

    @property
    def nights(self):
        return (self.check_out_date - self.check_in_date).days

    def to_dict(self):
        return {
            'id': self.id,
            'guest_name': self.guest_name,
            'phone': self.phone,
            'check_in_date': self.check_in_date.isoformat(),
            'check_out_date': self.check_out_date.isoformat(),
            'nights': self.nights,
            'room_id': self.room_id,
            'user_id': self.user_id,
            'status': self.status,
            'cancelled_at': self.cancelled_at.isoformat() if self.cancelled_at else None,
        }


class Payment(db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    # One payment per reservation
    reservation_id = db.Column(db.Integer, db.ForeignKey('reservations.id'), nullable=False, unique=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False)
    payment_method = db.Column(db.String(50), nullable=False)
    processor_charge_id = db.Column(db.String(255))
    status = db.Column(
        db.Enum(PAYMENT_PENDING, PAYMENT_COMPLETED, PAYMENT_FAILED, name='payment_status'),
        nullable=False,
        default=PAYMENT_PENDING,
    )
    refund_status = db.Column(
        db.Enum('pending', 'processed', 'failed', name='refund_status'),
        nullable=False,
        default='pending',
    )
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'reservation_id': self.reservation_id,
            'amount': _money(self.amount),
            'currency': self.currency,
            'payment_method': self.payment_method,
            'processor_charge_id': self.processor_charge_id,
            'status': self.status,
            'refund_status': self.refund_status,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
        }
