class BookingError(Exception):
    """Internal server error."""
    status_code = 500
    code = 'internal_error'

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.__doc__.strip()
        super().__init__(self.message)
        if code is not None:
            self.code = code
        self.details = details

    def to_dict(self):
        body = {'error': self.message, 'code': self.code}
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(BookingError):
    """Invalid request data."""
    status_code = 400
    code = 'validation_error'


class AuthenticationError(BookingError):
    """Authentication required."""
    status_code = 401
    code = 'authentication_required'


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""
    code = 'invalid_credentials'


class InvalidTokenError(AuthenticationError):
    """Invalid or expired token."""
    code = 'invalid_token'


class AuthorizationError(BookingError):
    """Access denied."""
    status_code = 403
    code = 'forbidden'


class NotFoundError(BookingError):
    """Resource not found."""
    status_code = 404
    code = 'not_found'


class HotelNotFoundError(NotFoundError):
    """Hotel not found."""
    code = 'hotel_not_found'


class RoomNotFoundError(NotFoundError):
    """Room not found."""
    code = 'room_not_found'


class ReservationNotFoundError(NotFoundError):
    """Reservation not found."""
    code = 'reservation_not_found'


class ConflictError(BookingError):
    """Request conflicts with the current state."""
    status_code = 409
    code = 'conflict'


class DuplicateEmailError(ConflictError):
    """Email is already registered."""
    code = 'duplicate_email'


class DateConflictError(ConflictError):
    """Room is not available for the selected dates."""
    code = 'date_conflict'


class AlreadyCancelledError(ConflictError):
    """Reservation is already cancelled."""
    code = 'already_cancelled'


class ProcessorError(BookingError):
    """Payment processor failed to charge."""
    status_code = 502
    code = 'processor_error'
