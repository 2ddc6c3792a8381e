"""
Error kinds raised by the SUSE Manager and meshStack clients.

Clients raise these; the intent layer catches them and hands them back to
the caller as values next to a sentinel status.
"""


class ApiError(Exception):
    """Base class for every client-side API failure"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(ApiError):
    """Non-success HTTP status, connection failure or unusable URL"""


class DecodeError(ApiError):
    """Response body is not the JSON document we expected"""


class NotFoundError(ApiError):
    """Lookup succeeded at the HTTP level but matched nothing"""


class PreconditionError(ApiError):
    """A workflow guard failed, so the mutating call was never issued"""


class ConfigurationError(ApiError, ValueError):
    """Client cannot be built, e.g. no base URL given or configured"""
