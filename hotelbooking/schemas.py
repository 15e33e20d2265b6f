from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from hotelbooking.errors import ValidationError


class RequestSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra='ignore',
    )


def parse(schema, data):
    """Validate ``data`` against ``schema`` or raise a 400 ValidationError."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        details = [
            {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
            for err in exc.errors()
        ]
        raise ValidationError('Invalid request data', details=details)


### AUTH ###

MAX_PASSWORD_BYTES = 72


class Credentials(RequestSchema):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        if '@' not in value:
            raise ValueError('must be a valid email address')
        return value.lower()

    @field_validator('password')
    @classmethod
    def password_fits_bcrypt(cls, value):
        # bcrypt rejects anything longer
        if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise ValueError(f'must be at most {MAX_PASSWORD_BYTES} bytes')
        return value


class SignupRequest(Credentials):
    password: str = Field(min_length=6, max_length=128)


### CATALOG ###

def _join_amenities(value):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ', '.join(str(tag).strip() for tag in value if str(tag).strip())
    return value


class HotelCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=200)
    image_url: str = Field(min_length=1, max_length=500)
    address: str = Field(min_length=1, max_length=255)
    price_per_night: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    amenities: Optional[Union[List[str], str]] = None
    cancellation_policy: Optional[str] = None

    @field_validator('amenities')
    @classmethod
    def amenities_as_text(cls, value):
        return _join_amenities(value)


class HotelFilter(RequestSchema):
    address: Optional[str] = None
    min_price: Optional[Decimal] = Field(default=None, ge=0)
    max_price: Optional[Decimal] = Field(default=None, ge=0)
    rating: Optional[float] = None
    amenities: Optional[str] = None

    @model_validator(mode='after')
    def check_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError('minPrice must not exceed maxPrice')
        return self


def _room_number_text(value):
    # 101 and "101" are the same room
    return str(value) if isinstance(value, int) else value


class RoomCreate(RequestSchema):
    room_number: str = Field(min_length=1, max_length=20)
    capacity: int = Field(gt=0)
    price_per_night: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    availability: bool = True

    @field_validator('room_number', mode='before')
    @classmethod
    def room_number_as_text(cls, value):
        return _room_number_text(value)


class RoomUpdate(RequestSchema):
    room_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    capacity: Optional[int] = Field(default=None, gt=0)
    price_per_night: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    availability: Optional[bool] = None

    @field_validator('room_number', mode='before')
    @classmethod
    def room_number_as_text(cls, value):
        return _room_number_text(value)

    def changes(self):
        return {key: value for key, value in self.model_dump(exclude_unset=True).items() if value is not None}


class StayDates(RequestSchema):
    check_in_date: date
    check_out_date: date

    @model_validator(mode='after')
    def check_order(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError('check_out_date must be after check_in_date')
        return self


### RESERVATIONS ###

class ReservationCreate(RequestSchema):
    room_id: int
    guest_name: str = Field(min_length=1, max_length=200)
    phone: str = Field(min_length=1, max_length=50)
    check_in_date: date
    check_out_date: date


### PAYMENTS ###

class PaymentCreate(RequestSchema):
    reservation_id: int
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    currency: str = Field(default='usd', min_length=3, max_length=3)
    source: str = Field(min_length=1, max_length=255)

    @field_validator('currency')
    @classmethod
    def lower_currency(cls, value):
        return value.lower()
