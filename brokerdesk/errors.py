"""Domain error kinds and how they map onto HTTP status codes."""

from __future__ import annotations


class BrokerDeskError(Exception):
    """Base exception for business-rule and infrastructure failures."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = "internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(BrokerDeskError):
    """Malformed or out-of-range input."""

    status_code = 400
    code = "validation_error"


class EmailExists(BrokerDeskError):
    status_code = 409
    code = "email_exists"

    def __init__(self, message: str = "email already exists"):
        super().__init__(message)


class InvalidCredentials(BrokerDeskError):
    """Same message for unknown email and wrong password."""

    status_code = 401
    code = "invalid_credentials"

    def __init__(self, message: str = "invalid email or password"):
        super().__init__(message)


class InvalidToken(BrokerDeskError):
    status_code = 401
    code = "invalid_token"

    def __init__(self, message: str = "invalid token"):
        super().__init__(message)


class NotFound(BrokerDeskError):
    """Missing, or owned by another broker. The two are never distinguished."""

    status_code = 404
    code = "not_found"

    def __init__(self, message: str = "not found"):
        super().__init__(message)


class InvalidReference(BrokerDeskError):
    """Appointment points at a client/property the broker does not own."""

    status_code = 400
    code = "invalid_reference"


class InternalError(BrokerDeskError):
    """Storage or hashing failure. Detail stays in the logs."""

    status_code = 500
    code = "internal_error"
