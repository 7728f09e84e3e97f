"""Unified async access to Subsonic and Jellyfin music servers.

Example:
    >>> from mediaprovider import ServerConfig, create_provider
    >>> provider = create_provider(ServerConfig.from_environment())
    >>> results = await provider.search_all("miles davis", 30)
"""

from .cache import TimedCache
from .config import ServerConfig, create_provider
from .exceptions import MediaProviderError, UnsupportedOperationError
from .models import (
    GENRE_COUNT_UNSUPPORTED,
    Album,
    AlbumInfo,
    AlbumWithTracks,
    Artist,
    ArtistInfo,
    ArtistWithAlbums,
    ContentType,
    Favorites,
    Genre,
    IDAndIndex,
    Playlist,
    PlaylistWithTracks,
    RatingFavoriteParameters,
    SearchResult,
    Track,
)
from .provider import MediaProvider

__version__ = "1.0.0"

__all__ = [
    "MediaProvider",
    "ServerConfig",
    "create_provider",
    "TimedCache",
    # Models
    "GENRE_COUNT_UNSUPPORTED",
    "Album",
    "AlbumInfo",
    "AlbumWithTracks",
    "Artist",
    "ArtistInfo",
    "ArtistWithAlbums",
    "ContentType",
    "Favorites",
    "Genre",
    "IDAndIndex",
    "Playlist",
    "PlaylistWithTracks",
    "RatingFavoriteParameters",
    "SearchResult",
    "Track",
    # Exceptions
    "MediaProviderError",
    "UnsupportedOperationError",
]
