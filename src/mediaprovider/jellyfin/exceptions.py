"""Exception classes for the Jellyfin API client."""

from ..exceptions import MediaProviderError


class JellyfinError(MediaProviderError):
    """Base exception for Jellyfin API errors.

    Attributes:
        status_code: HTTP status code of the failed request (0 if none)
        message: Error message
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Jellyfin Error {status_code}: {message}")


class JellyfinAuthenticationError(JellyfinError):
    """Login failed, or the access token was rejected (HTTP 401)."""


class JellyfinAuthorizationError(JellyfinError):
    """User not allowed to perform the request (HTTP 403)."""


class JellyfinNotFoundError(JellyfinError):
    """Requested item does not exist (HTTP 404)."""


_ERROR_CLASSES = {
    401: JellyfinAuthenticationError,
    403: JellyfinAuthorizationError,
    404: JellyfinNotFoundError,
}


def error_for_status(status_code: int, message: str) -> JellyfinError:
    """Build the exception matching an HTTP status code."""
    return _ERROR_CLASSES.get(status_code, JellyfinError)(status_code, message)
