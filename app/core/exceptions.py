"""Domain errors raised by the catalog, booking and identity services."""


class DomainError(Exception):
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(DomainError):
    status_code = 404
    default_message = "Not found"


class ForbiddenError(DomainError):
    status_code = 403
    default_message = "Administrator access required"


class ConfirmationRequiredError(DomainError):
    status_code = 428
    default_message = "Deletion must be confirmed"


# ---------- Booking ----------
class BookingError(DomainError):
    """Expected outcome of an illegal booking transition; state is unchanged."""

    status_code = 409


class AlreadyBookedError(BookingError):
    default_message = "Event already booked"


class NotBookedError(BookingError):
    default_message = "Event is not booked"


class CapacityExhaustedError(BookingError):
    default_message = "No spots available"


class CapacityOverflowError(BookingError):
    default_message = "Capacity would exceed the event's original capacity"


class ConflictError(DomainError):
    """A concurrent writer changed the event between read and write."""

    status_code = 409
    default_message = "The event is busy right now, please try again"


class BackendUnavailableError(DomainError):
    status_code = 503
    default_message = "Service temporarily unavailable, please try again"


# ---------- Identity ----------
class AuthError(DomainError):
    status_code = 401
    default_message = "Authentication failed"


class InvalidEmailError(AuthError):
    status_code = 400
    default_message = "Please enter a valid email address"


class UserDisabledError(AuthError):
    status_code = 403
    default_message = "This account has been deactivated"


class UserNotFoundError(AuthError):
    status_code = 404
    default_message = "Account not found"


class WrongPasswordError(AuthError):
    default_message = "Invalid password"


class WeakPasswordError(AuthError):
    status_code = 400
    default_message = "Password should be at least 6 characters"


class EmailAlreadyInUseError(AuthError):
    status_code = 409
    default_message = "This email is already registered"


class PasswordMismatchError(AuthError):
    status_code = 400
    default_message = "Passwords do not match"


class InvalidTokenError(AuthError):
    default_message = "Session expired, please sign in again"
