"""Connection and query models for Jellyfin servers."""

import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Item sort fields understood by the Items endpoints
SORT_BY_COMMUNITY_RATING = "CommunityRating"
SORT_BY_RANDOM = "Random"

SORT_ASC = "Ascending"
SORT_DESC = "Descending"


@dataclass
class JellyfinConfig:
    """Configuration for connecting to a Jellyfin server.

    Attributes:
        url: Base server URL (e.g., "https://jellyfin.example.com")
        username: Jellyfin username
        password: Jellyfin password, sent once to AuthenticateByName
        client_name: Client identifier reported in the authorization header
        device_name: Device name reported in the authorization header
        device_id: Stable device identifier
        client_version: Client version reported in the authorization header
        timeout: Per-request timeout in seconds
    """

    url: str
    username: str
    password: str = ""
    client_name: str = "mediaprovider"
    device_name: str = "mediaprovider"
    device_id: str = "mediaprovider"
    client_version: str = "1.0.0"
    timeout: float = 30.0

    def __post_init__(self):
        """Validate configuration on initialization."""
        if not self.url or not self.url.startswith(("http://", "https://")):
            raise ValueError("url must be a valid HTTP/HTTPS URL")
        if not self.username:
            raise ValueError("username is required")

        if not self.url.startswith("https://"):
            warnings.warn(
                "Using HTTP instead of HTTPS for Jellyfin connection. "
                "Credentials will be transmitted insecurely.",
                UserWarning,
                stacklevel=2,
            )

    def authorization_header(self, token: Optional[str] = None) -> str:
        """Build the X-Emby-Authorization header value.

        Example:
            >>> JellyfinConfig(url="https://jf.example.com", username="a").authorization_header("abc")
            'MediaBrowser Client="mediaprovider", Device="mediaprovider", DeviceId="mediaprovider", Version="1.0.0", Token="abc"'
        """
        parts = [
            f'Client="{self.client_name}"',
            f'Device="{self.device_name}"',
            f'DeviceId="{self.device_id}"',
            f'Version="{self.client_version}"',
        ]
        if token:
            parts.append(f'Token="{token}"')
        return "MediaBrowser " + ", ".join(parts)


@dataclass
class Filter:
    """Item filter.

    Attributes:
        parent_id: Restrict to children of this item (e.g. an album's tracks)
        artist_id: Restrict to items by this artist
        genres: Restrict to items tagged with any of these genres
        favorite: Only items the user marked as favorite
    """

    parent_id: Optional[str] = None
    artist_id: Optional[str] = None
    genres: List[str] = field(default_factory=list)
    favorite: bool = False


@dataclass
class Sort:
    field: Optional[str] = None
    mode: str = SORT_ASC


@dataclass
class Paging:
    limit: Optional[int] = None
    start_index: int = 0


@dataclass
class QueryOpts:
    """Filter, sort and paging options for Items queries."""

    filter: Filter = field(default_factory=Filter)
    sort: Sort = field(default_factory=Sort)
    paging: Paging = field(default_factory=Paging)

    def to_params(self, artist_key: str = "ArtistIds") -> Dict[str, str]:
        """Convert to Items endpoint query parameters.

        Args:
            artist_key: Parameter carrying artist_id ("AlbumArtistIds" for albums)
        """
        params: Dict[str, str] = {}
        if self.filter.parent_id:
            params["ParentId"] = self.filter.parent_id
        if self.filter.artist_id:
            params[artist_key] = self.filter.artist_id
        if self.filter.genres:
            params["Genres"] = "|".join(self.filter.genres)
        if self.filter.favorite:
            params["IsFavorite"] = "true"
        if self.sort.field:
            params["SortBy"] = self.sort.field
            params["SortOrder"] = self.sort.mode
        if self.paging.limit:
            params["Limit"] = str(self.paging.limit)
        if self.paging.start_index:
            params["StartIndex"] = str(self.paging.start_index)
        return params
