"""Capability-set interface implemented once per backend family."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .models import (
    AlbumInfo,
    AlbumWithTracks,
    Artist,
    ArtistInfo,
    ArtistWithAlbums,
    Favorites,
    Genre,
    IDAndIndex,
    Playlist,
    PlaylistWithTracks,
    RatingFavoriteParameters,
    SearchResult,
    Track,
)

PrefetchCoverCallback = Callable[[str], None]


class MediaProvider(ABC):
    """Uniform access to one media server, whatever its backend family.

    All backend operations are coroutines. Errors from single-call operations
    are raised unchanged from the backend client.
    """

    def __init__(self):
        self.prefetch_cover_cb: Optional[PrefetchCoverCallback] = None

    def set_prefetch_cover_callback(self, cb: Optional[PrefetchCoverCallback]):
        """Register a callback that callers may use to warm a cover art cache.

        The provider only stores the callback.
        """
        self.prefetch_cover_cb = cb

    @abstractmethod
    def can_make_public_playlist(self) -> bool:
        """Whether edit_playlist honours the public flag."""

    # Playlists

    @abstractmethod
    async def create_playlist(self, name: str, track_ids: List[str]) -> None:
        """Create a playlist holding track_ids."""

    @abstractmethod
    async def edit_playlist(self, playlist_id: str, name: str, description: str, public: bool) -> None:
        """Update playlist metadata."""

    @abstractmethod
    async def delete_playlist(self, playlist_id: str) -> None:
        """Delete a playlist."""

    @abstractmethod
    async def add_playlist_tracks(self, playlist_id: str, track_ids: List[str]) -> None:
        """Append tracks to a playlist."""

    @abstractmethod
    async def remove_playlist_tracks(self, playlist_id: str, remove: List[IDAndIndex]) -> None:
        """Remove playlist entries, identified by track ID and position."""

    @abstractmethod
    async def replace_playlist_tracks(self, playlist_id: str, track_ids: List[str]) -> None:
        """Replace the contents of a playlist with track_ids.

        Not guaranteed to be atomic; see the implementations.
        """

    @abstractmethod
    async def get_playlists(self) -> List[Playlist]:
        """List all playlists visible to the user."""

    @abstractmethod
    async def get_playlist(self, playlist_id: str) -> PlaylistWithTracks:
        """Get a playlist with its tracks."""

    # Library reads

    @abstractmethod
    async def get_album(self, album_id: str) -> AlbumWithTracks:
        """Get an album with its tracks."""

    @abstractmethod
    async def get_album_info(self, album_id: str) -> AlbumInfo:
        """Get album notes and external references."""

    @abstractmethod
    async def get_artist(self, artist_id: str) -> ArtistWithAlbums:
        """Get an artist with their albums."""

    @abstractmethod
    async def get_artist_info(self, artist_id: str) -> ArtistInfo:
        """Get an artist's biography and similar artists."""

    @abstractmethod
    async def get_artists(self) -> List[Artist]:
        """List all album artists."""

    @abstractmethod
    async def get_track(self, track_id: str) -> Track:
        """Get a single track."""

    @abstractmethod
    async def get_top_tracks(self, artist: Artist, limit: int) -> List[Track]:
        """Get an artist's most popular tracks."""

    @abstractmethod
    async def get_random_tracks(self, genre_name: str, limit: int) -> List[Track]:
        """Get random tracks, optionally restricted to a genre."""

    @abstractmethod
    async def get_similar_tracks(self, artist_id: str, limit: int) -> List[Track]:
        """Get tracks similar to an artist's work."""

    @abstractmethod
    async def get_cover_art(self, cover_art_id: str, size: int) -> bytes:
        """Fetch encoded cover art bytes."""

    @abstractmethod
    async def get_genres(self) -> List[Genre]:
        """List genres, served from a short-lived cache."""

    @abstractmethod
    async def get_favorites(self) -> Favorites:
        """Get favorite albums, artists and tracks."""

    @abstractmethod
    async def search_all(self, query: str, max_results: int) -> List[SearchResult]:
        """Search albums, artists, tracks, playlists and genres at once."""

    # Writes and playback support

    @abstractmethod
    async def set_favorite(self, params: RatingFavoriteParameters, favorite: bool) -> None:
        """Mark or unmark albums, artists and tracks as favorites."""

    @abstractmethod
    async def get_stream_url(self, track_id: str) -> str:
        """Build a streaming URL for a track."""

    @abstractmethod
    async def download_track(self, track_id: str) -> bytes:
        """Download the audio data of a track."""

    @abstractmethod
    async def scrobble(self, track_id: str, submission: bool) -> None:
        """Report playback of a track."""

    @abstractmethod
    async def rescan_library(self) -> None:
        """Ask the server to rescan its library."""
