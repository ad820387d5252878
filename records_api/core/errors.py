"""
Error taxonomy for use cases.

Services raise these; the application maps them to HTTP responses
(ValidationError -> 400, NotFoundError -> 404). Storage failures live in
``records_api.repositories.json_storage`` and map to 500.
"""


class ServiceError(Exception):
    """Base class for business-rule failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Client-supplied input fails a stated constraint."""


class NotFoundError(ServiceError):
    """Referenced record does not exist."""


class AuthorizationError(NotFoundError):
    """Caller does not own the resource; reported as not-found."""


def ensure_utf8(*values: str | None) -> None:
    """Reject text that cannot be stored, such as lone surrogates from JSON escapes."""
    for value in values:
        if value is None:
            continue
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise ValidationError("Input contains invalid characters.") from None
