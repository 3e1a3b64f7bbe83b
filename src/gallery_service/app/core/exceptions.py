"""Business exceptions raised by gallery services.

Each exception maps to one HTTP status. ``register_exception_handlers`` renders
them as ``{success: false, message, code}``.
"""


class GalleryException(Exception):
    """Base exception for all gallery business errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthenticationError(GalleryException):
    """Missing, invalid or expired identity."""

    code = "UNAUTHORIZED"
    status_code = 401


class PermissionDeniedError(GalleryException):
    """Valid identity without rights on the resource, e.g. deleting someone else's image."""

    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(GalleryException):
    code = "NOT_FOUND"
    status_code = 404


class ValidationError(GalleryException):
    """Bad input detected before any mutation happens.

    Examples:
        - Description longer than allowed
        - Unsupported file type
        - File too large
    """

    code = "VALIDATION_ERROR"
    status_code = 400


class ConflictError(GalleryException):
    """Duplicate resource, e.g. username or email already registered."""

    code = "CONFLICT"
    status_code = 400


class UpstreamError(GalleryException):
    """External caption generation failed or timed out."""

    code = "UPSTREAM_ERROR"
    status_code = 502


class InternalError(GalleryException):
    """Storage or other unexpected failure."""

    code = "INTERNAL_ERROR"
    status_code = 500


class CollectionRetrievalError(InternalError):
    """A collection view could not be assembled; no partial page is returned."""
