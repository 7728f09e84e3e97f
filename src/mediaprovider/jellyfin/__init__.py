"""Jellyfin backend: API client, record adapters and MediaProvider."""

from .client import JellyfinClient
from .exceptions import (
    JellyfinAuthenticationError,
    JellyfinAuthorizationError,
    JellyfinError,
    JellyfinNotFoundError,
)
from .models import JellyfinConfig, QueryOpts
from .provider import JellyfinMediaProvider

__all__ = [
    "JellyfinClient",
    "JellyfinMediaProvider",
    "JellyfinConfig",
    "QueryOpts",
    "JellyfinError",
    "JellyfinAuthenticationError",
    "JellyfinAuthorizationError",
    "JellyfinNotFoundError",
]
