"""
Domain errors shared by the persistence gateway, the completion relay and the routes.

Each error carries the HTTP status it maps to; the handlers in api.api render
them as {"error": message}.
"""


class TutorChatError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TutorChatError):
    """A required field is missing or empty."""

    status_code = 400


class NotFoundError(TutorChatError):
    """An identifier does not reference an existing tutor, chat or message."""

    status_code = 404


class StorageError(TutorChatError):
    """The store is unreachable or a write failed. The operation was rolled back."""

    status_code = 500


class ProviderError(TutorChatError):
    """The completion provider call failed. The relay converts it to the fallback message."""


def require(value, field: str):
    """Return value, or raise ValidationError("<field> is required") when it is missing or blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
    return value
