"""Backend-agnostic domain model shared by every media provider.

Every entity is a frozen value record produced by the record adapters of one
backend family. Identity fields carry the backend's own opaque ID strings;
nothing here invents IDs or relates IDs across backend families.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

# Genre album/track count for backends that cannot report it. Callers must
# treat it as "unknown", never as zero.
GENRE_COUNT_UNSUPPORTED = -1


@dataclass(frozen=True)
class Track:
    """A single track.

    Attributes:
        id: Backend track ID
        cover_art_id: Image ID; the parent album's ID when the track has no own image
        parent_id: Parent (album or directory) ID
        name: Track title
        duration: Duration in seconds
        artist_ids: Artist IDs, index-aligned with artist_names
        artist_names: Artist names, index-aligned with artist_ids
        size: File size in bytes
        bit_rate: Bitrate in kbps
    """

    id: str
    cover_art_id: str = ""
    parent_id: str = ""
    name: str = ""
    duration: int = 0
    track_number: int = 0
    disc_number: int = 0
    genre: str = ""
    artist_ids: List[str] = field(default_factory=list)
    artist_names: List[str] = field(default_factory=list)
    album: str = ""
    album_id: str = ""
    year: int = 0
    rating: int = 0
    favorite: bool = False
    play_count: int = 0
    size: int = 0
    file_path: str = ""
    bit_rate: int = 0


@dataclass(frozen=True)
class Album:
    """Album header without its tracks."""

    id: str
    cover_art_id: str = ""
    name: str = ""
    duration: int = 0
    artist_ids: List[str] = field(default_factory=list)
    artist_names: List[str] = field(default_factory=list)
    year: int = 0
    genres: List[str] = field(default_factory=list)
    track_count: int = 0
    favorite: bool = False


@dataclass(frozen=True)
class AlbumWithTracks(Album):
    """Album header plus its ordered tracks.

    The header and the track listing come from two separate backend calls, so
    track_count may transiently disagree with len(tracks).
    """

    tracks: List[Track] = field(default_factory=list)


@dataclass(frozen=True)
class AlbumInfo:
    notes: str = ""
    lastfm_url: str = ""
    musicbrainz_id: str = ""


@dataclass(frozen=True)
class Artist:
    id: str
    cover_art_id: str = ""
    name: str = ""
    favorite: bool = False
    album_count: int = 0


@dataclass(frozen=True)
class ArtistWithAlbums(Artist):
    albums: List[Album] = field(default_factory=list)


@dataclass(frozen=True)
class ArtistInfo:
    biography: str = ""
    lastfm_url: str = ""
    image_url: str = ""
    similar_artists: List[Artist] = field(default_factory=list)


@dataclass(frozen=True)
class Playlist:
    """Playlist header.

    Attributes:
        public: Always False for backends without playlist visibility
        owner: Owning user; the logged-in user for backends without ownership
        duration: Total duration in seconds
    """

    id: str
    cover_art_id: str = ""
    name: str = ""
    description: str = ""
    public: bool = False
    owner: str = ""
    duration: int = 0
    track_count: int = 0


@dataclass(frozen=True)
class PlaylistWithTracks(Playlist):
    tracks: List[Track] = field(default_factory=list)


@dataclass(frozen=True)
class Genre:
    """Genre with its album and track counts.

    Either count may be GENRE_COUNT_UNSUPPORTED.
    """

    name: str
    album_count: int = GENRE_COUNT_UNSUPPORTED
    track_count: int = GENRE_COUNT_UNSUPPORTED


class ContentType(str, Enum):
    """Discriminator of a SearchResult."""

    ALBUM = "Album"
    ARTIST = "Artist"
    TRACK = "Track"
    PLAYLIST = "Playlist"
    GENRE = "Genre"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SearchResult:
    """One entry of a federated search.

    Dispatch on type before reading size:
        - Album / Playlist: track count
        - Artist / Genre: album count
        - Track: duration in seconds

    artist_name is only set for Track and Album results.
    """

    name: str
    id: str
    type: ContentType
    cover_id: str = ""
    size: int = 0
    artist_name: str = ""


@dataclass
class Favorites:
    """Favorite albums, artists and tracks.

    Each list is filled independently; an empty list may also mean that
    category's query failed.
    """

    albums: List[Album] = field(default_factory=list)
    artists: List[Artist] = field(default_factory=list)
    tracks: List[Track] = field(default_factory=list)


@dataclass(frozen=True)
class RatingFavoriteParameters:
    """IDs whose favorite (or rating) state should change."""

    album_ids: List[str] = field(default_factory=list)
    artist_ids: List[str] = field(default_factory=list)
    track_ids: List[str] = field(default_factory=list)

    def all_ids(self) -> List[str]:
        """Album IDs, then artist IDs, then track IDs."""
        return [*self.album_ids, *self.artist_ids, *self.track_ids]


@dataclass(frozen=True)
class IDAndIndex:
    """A playlist entry: the track ID and its position in the playlist."""

    id: str
    index: int
