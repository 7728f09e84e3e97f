"""HTTP client for the Jellyfin REST API (music library subset)."""

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import JellyfinAuthenticationError, error_for_status
from .models import JellyfinConfig, Paging, QueryOpts

logger = logging.getLogger(__name__)

# Extra item fields needed by the record adapters
ITEM_FIELDS = "Genres,MediaSources,Overview,ChildCount,SongCount,Path,DateCreated"


class JellyfinClient:
    """Synchronous HTTP client for a Jellyfin server.

    Features:
    - Username/password login (AuthenticateByName) and token header auth
    - requests.Session with retries on idempotent 5xx responses
    - HTTP error statuses mapped to typed JellyfinError exceptions

    Records are returned as the raw JSON items of the server; mapping to the
    domain model happens in mediaprovider.jellyfin.transform.

    Attributes:
        config: JellyfinConfig with server connection details
        session: requests.Session shared by all requests
        user_id: ID of the logged-in user (after login())
        token: Access token (after login())

    Example:
        >>> client = JellyfinClient(JellyfinConfig(url="https://jf.example.com",
        ...                                        username="john", password="secret"))
        >>> client.login()
        >>> album = client.get_album("a1b2")
    """

    def __init__(self, config: JellyfinConfig):
        self.config = config
        self._base_url = config.url.rstrip("/")
        self.user_id: Optional[str] = None
        self.user_name: Optional[str] = None
        self.token: Optional[str] = None
        self.session = self._create_session()

        logger.info(f"Initialized Jellyfin client for {self._base_url}")

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=3,
            read=3,
            connect=3,
            backoff_factor=0.3,
            status_forcelist=(500, 502, 503, 504),
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({
            "Accept": "application/json",
            "X-Emby-Authorization": self.config.authorization_header(),
        })
        return session

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and decode its JSON body.

        Returns:
            Decoded JSON, or None for empty responses

        Raises:
            JellyfinError: Typed subclass matching the HTTP status
            requests.RequestException: For network errors
        """
        url = f"{self._base_url}{path}"
        logger.debug(f"{method} {path} params={params}")
        response = self.session.request(method, url, params=params, json=json, timeout=self.config.timeout)

        if not response.ok:
            logger.error(f"Jellyfin request failed for {method} {path}: {response.status_code}")
            raise error_for_status(response.status_code, response.text[:500] or response.reason or "")

        if not response.content:
            return None
        return response.json()

    def _user_path(self, suffix: str = "") -> str:
        if not self.user_id:
            raise JellyfinAuthenticationError(0, "Not logged in")
        return f"/Users/{self.user_id}{suffix}"

    def login(self) -> bool:
        """Authenticate with username and password.

        Raises:
            JellyfinAuthenticationError: If credentials are rejected
        """
        logger.debug(f"Logging in to Jellyfin as {self.config.username}")
        data = self._request(
            "POST",
            "/Users/AuthenticateByName",
            json={"Username": self.config.username, "Pw": self.config.password},
        )
        self.token = data["AccessToken"]
        self.user_id = data["User"]["Id"]
        self.user_name = data["User"].get("Name", self.config.username)
        self.session.headers["X-Emby-Authorization"] = self.config.authorization_header(self.token)

        logger.info(f"Logged in to Jellyfin as {self.user_name}")
        return True

    def logged_in_user(self) -> str:
        return self.user_name or ""

    def _items(self, item_types: str, opts: QueryOpts, artist_key: str = "ArtistIds", **extra) -> List[Dict]:
        """Query the user's library for items of the given types."""
        params = {
            "IncludeItemTypes": item_types,
            "Recursive": "true",
            "Fields": ITEM_FIELDS,
            **opts.to_params(artist_key),
            **extra,
        }
        data = self._request("GET", self._user_path("/Items"), params=params)
        return data.get("Items", [])

    def _item(self, item_id: str) -> Dict:
        return self._request("GET", self._user_path(f"/Items/{item_id}"))

    # Albums and songs

    def get_album(self, album_id: str) -> Dict:
        logger.debug(f"Fetching album: {album_id}")
        return self._item(album_id)

    def get_albums(self, opts: QueryOpts) -> List[Dict]:
        albums = self._items("MusicAlbum", opts, artist_key="AlbumArtistIds")
        logger.info(f"Retrieved {len(albums)} albums")
        return albums

    def get_song(self, song_id: str) -> Dict:
        logger.debug(f"Fetching song: {song_id}")
        return self._item(song_id)

    def get_songs(self, opts: QueryOpts) -> List[Dict]:
        songs = self._items("Audio", opts)
        logger.info(f"Retrieved {len(songs)} songs")
        return songs

    def get_similar_songs(self, album_id: str, limit: int) -> List[Dict]:
        """Songs similar to an album (instant mix). Jellyfin has no artist-based variant."""
        logger.debug(f"Fetching songs similar to album {album_id} (limit={limit})")
        data = self._request(
            "GET",
            f"/Items/{album_id}/InstantMix",
            params={"UserId": self.user_id, "Limit": limit, "Fields": ITEM_FIELDS},
        )
        return data.get("Items", [])

    # Artists

    def get_artist(self, artist_id: str) -> Dict:
        logger.debug(f"Fetching artist: {artist_id}")
        return self._item(artist_id)

    def get_album_artists(self, opts: QueryOpts) -> List[Dict]:
        params = {"UserId": self.user_id, "Fields": ITEM_FIELDS, **opts.to_params()}
        data = self._request("GET", "/Artists/AlbumArtists", params=params)
        artists = data.get("Items", [])
        logger.info(f"Retrieved {len(artists)} album artists")
        return artists

    def get_similar_artists(self, artist_id: str, limit: int = 20) -> List[Dict]:
        logger.debug(f"Fetching artists similar to {artist_id}")
        data = self._request(
            "GET",
            f"/Items/{artist_id}/Similar",
            params={"UserId": self.user_id, "Limit": limit, "IncludeItemTypes": "MusicArtist"},
        )
        return data.get("Items", [])

    # Genres

    def get_genres(self, paging: Paging) -> List[Dict]:
        """List music genres as {Name, Id} records. Jellyfin reports no counts."""
        params: Dict[str, Any] = {"UserId": self.user_id}
        if paging.limit:
            params["Limit"] = paging.limit
        if paging.start_index:
            params["StartIndex"] = paging.start_index
        genres = self._request("GET", "/MusicGenres", params=params).get("Items", [])
        logger.info(f"Retrieved {len(genres)} genres")
        return genres

    # Search

    def search(self, query: str, limit: int) -> Dict[str, List[Dict]]:
        """Search albums, artists and songs by name.

        Args:
            query: Search term
            limit: Maximum number of items per category

        Returns:
            Dictionary with "albums", "artists" and "songs" record lists
        """
        logger.debug(f"Searching for '{query}' (limit={limit})")
        if limit <= 0:
            return {"albums": [], "artists": [], "songs": []}
        opts = QueryOpts(paging=Paging(limit=limit))
        artists = self._request(
            "GET",
            "/Artists",
            params={"UserId": self.user_id, "SearchTerm": query, "Limit": limit, "Fields": ITEM_FIELDS},
        ).get("Items", [])
        result = {
            "albums": self._items("MusicAlbum", opts, SearchTerm=query),
            "artists": artists,
            "songs": self._items("Audio", opts, SearchTerm=query),
        }
        logger.info(f"Search completed for query: {query}")
        return result

    # Playlists

    def get_playlists(self) -> List[Dict]:
        playlists = self._items("Playlist", QueryOpts())
        logger.info(f"Retrieved {len(playlists)} playlists")
        return playlists

    def get_playlist(self, playlist_id: str) -> Dict:
        logger.debug(f"Fetching playlist: {playlist_id}")
        return self._item(playlist_id)

    def get_playlist_songs(self, playlist_id: str) -> List[Dict]:
        data = self._request(
            "GET",
            f"/Playlists/{playlist_id}/Items",
            params={"UserId": self.user_id, "Fields": ITEM_FIELDS},
        )
        songs = data.get("Items", [])
        logger.info(f"Retrieved {len(songs)} tracks from playlist {playlist_id}")
        return songs

    def create_playlist(self, name: str, song_ids: Sequence[str]) -> Dict:
        logger.debug(f"Creating playlist {name} with {len(song_ids)} songs")
        return self._request(
            "POST",
            "/Playlists",
            json={"Name": name, "Ids": list(song_ids), "UserId": self.user_id, "MediaType": "Audio"},
        )

    def update_playlist_metadata(self, playlist_id: str, name: str, description: str) -> None:
        """Rename a playlist and set its overview.

        Jellyfin updates items by posting the full item back.
        """
        item = self._item(playlist_id)
        item["Name"] = name
        item["Overview"] = description
        self._request("POST", f"/Items/{playlist_id}", json=item)
        logger.info(f"Updated playlist {playlist_id}")

    def delete_playlist(self, playlist_id: str) -> None:
        self._request("DELETE", f"/Items/{playlist_id}")
        logger.info(f"Deleted playlist {playlist_id}")

    def add_songs_to_playlist(self, playlist_id: str, song_ids: Sequence[str]) -> None:
        if not song_ids:
            logger.debug(f"No songs to add to playlist {playlist_id}")
            return
        self._request(
            "POST",
            f"/Playlists/{playlist_id}/Items",
            params={"Ids": ",".join(song_ids), "UserId": self.user_id},
        )

    def remove_songs_from_playlist(self, playlist_id: str, song_ids: Sequence[str]) -> None:
        if not song_ids:
            logger.debug(f"No songs to remove from playlist {playlist_id}")
            return
        self._request(
            "DELETE",
            f"/Playlists/{playlist_id}/Items",
            params={"EntryIds": ",".join(song_ids)},
        )

    # User data and server actions

    def set_favorite(self, item_id: str, favorite: bool) -> None:
        """Mark or unmark one item as favorite. There is no bulk variant."""
        method = "POST" if favorite else "DELETE"
        self._request(method, self._user_path(f"/FavoriteItems/{item_id}"))

    def refresh_library(self) -> None:
        self._request("POST", "/Library/Refresh")
        logger.info("Requested library refresh")

    def get_item_image(self, item_id: str, image_type: str = "Primary", size: int = 0, quality: int = 92) -> bytes:
        """Download an item image as encoded bytes."""
        params: Dict[str, Any] = {"quality": quality}
        if size:
            params["fillHeight"] = size
            params["fillWidth"] = size
        url = f"{self._base_url}/Items/{item_id}/Images/{image_type}"
        response = self.session.get(url, params=params, timeout=self.config.timeout)
        if not response.ok:
            raise error_for_status(response.status_code, response.reason or "")
        logger.info(f"Downloaded {len(response.content)} bytes of image {item_id}")
        return response.content

    def download_song(self, song_id: str) -> bytes:
        """Download a song through its universal stream URL."""
        response = self.session.get(self.get_stream_url(song_id), timeout=self.config.timeout)
        if not response.ok:
            raise error_for_status(response.status_code, response.reason or "")
        logger.info(f"Downloaded {len(response.content)} bytes for song {song_id}")
        return response.content

    def get_stream_url(self, song_id: str) -> str:
        params = {
            "UserId": self.user_id,
            "DeviceId": self.config.device_id,
            "api_key": self.token,
            "Container": "opus,mp3,aac,m4a,flac,webma,webm,wav,ogg",
        }
        return f"{self._base_url}/Audio/{song_id}/universal?{urlencode(params)}"

    def close(self):
        self.session.close()
        logger.info("Closed Jellyfin client")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
