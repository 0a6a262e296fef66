"""
Error taxonomy for the Travel Journal API.

Every failure a route can produce is one of these. Each class carries the
HTTP status it maps to; main.py renders them as {"error": message}.
"""


class JournalError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredential(JournalError):
    status_code = 401
    default_message = "Missing token"


class InvalidCredential(JournalError):
    status_code = 401
    default_message = "Invalid token"


class NotFound(JournalError):
    status_code = 404
    default_message = "Not found"


class AccessDenied(JournalError):
    status_code = 403
    default_message = "Access denied"


class InvalidArgument(JournalError):
    status_code = 400
    default_message = "Invalid argument"


class InvalidReference(InvalidArgument):
    default_message = "Invalid reference"


class InvalidOperation(JournalError):
    status_code = 400
    default_message = "Invalid operation"


class Conflict(JournalError):
    status_code = 409
    default_message = "Conflict"


class PartialFailure(JournalError):
    status_code = 500
    default_message = "Operation only partially completed"
