class CallBookingError(Exception):
    """Base for errors surfaced to the client as {"error": message}."""
    status_code = 400

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code


class BookingValidationError(CallBookingError):
    status_code = 400


class PaymentsDisabledError(CallBookingError):
    status_code = 400


class PaymentRequiredError(CallBookingError):
    status_code = 402


class NotFoundError(CallBookingError):
    status_code = 404


class SlotConflictError(CallBookingError):
    status_code = 409


class PaymentIntegrityError(CallBookingError):
    """Client-supplied payment proof does not hold up; nothing is booked."""
    status_code = 400


class InvalidStateError(CallBookingError):
    status_code = 400


class ProviderNotConfiguredError(CallBookingError):
    status_code = 501


class DuplicateRequestError(CallBookingError):
    status_code = 409
