class BookingError(Exception):
    """Base class for workshop booking failures returned to the caller."""

    status_code = 500
    code = "booking_error"
    default_message = "Booking failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid booking request"


class NotFound(BookingError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class SlotExhausted(BookingError):
    status_code = 400
    code = "slot_exhausted"
    default_message = "Not enough spots available"


class GatewayError(BookingError):
    status_code = 500
    code = "gateway_error"
    default_message = "Payment gateway unavailable"


class SignatureInvalid(BookingError):
    status_code = 400
    code = "signature_invalid"
    default_message = "Payment verification failed"


class StorageError(BookingError):
    status_code = 500
    code = "storage_error"
    default_message = "Could not save booking"
