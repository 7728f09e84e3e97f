"""Subsonic backend: API client, record adapters and MediaProvider."""

from .auth import auth_params, generate_token
from .client import SubsonicClient
from .exceptions import (
    ClientVersionTooOldError,
    ServerVersionTooOldError,
    SubsonicAuthenticationError,
    SubsonicAuthorizationError,
    SubsonicError,
    SubsonicNotFoundError,
    SubsonicParameterError,
    SubsonicTrialError,
    SubsonicVersionError,
    TokenAuthenticationNotSupportedError,
)
from .models import SubsonicAuthToken, SubsonicConfig
from .provider import SubsonicMediaProvider

__all__ = [
    # Client
    "SubsonicClient",
    "SubsonicMediaProvider",
    # Models
    "SubsonicConfig",
    "SubsonicAuthToken",
    # Authentication
    "generate_token",
    "auth_params",
    # Exceptions
    "SubsonicError",
    "SubsonicAuthenticationError",
    "TokenAuthenticationNotSupportedError",
    "ClientVersionTooOldError",
    "ServerVersionTooOldError",
    "SubsonicAuthorizationError",
    "SubsonicNotFoundError",
    "SubsonicParameterError",
    "SubsonicTrialError",
    "SubsonicVersionError",
]
