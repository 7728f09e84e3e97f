"""HTTP client for Subsonic API v1.16.1."""

import logging
import threading
import time
from collections import deque
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urljoin

import httpx

from .auth import auth_params
from .exceptions import error_for_code
from .models import SubsonicConfig

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> List:
    """Subsonic JSON collapses one-element arrays on some servers."""
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


class SubsonicClient:
    """Synchronous HTTP client for Subsonic API v1.16.1.

    This client implements the Subsonic REST API with:
    - Token-based authentication (MD5 salt+hash) or OpenSubsonic API keys
    - Typed exceptions for Subsonic error codes
    - Connection pooling and timeout configuration
    - Optional sliding-window rate limiting

    Responses are returned as the raw JSON records of the server; mapping to
    the domain model happens in mediaprovider.subsonic.transform.

    The client is safe to call from several worker threads at once.

    Attributes:
        config: SubsonicConfig with server connection details
        client: httpx.Client for HTTP requests

    Example:
        >>> config = SubsonicConfig(
        ...     url="https://music.example.com",
        ...     username="john",
        ...     password="secret"
        ... )
        >>> with SubsonicClient(config) as client:
        ...     client.ping()
        ...     album = client.get_album("al-1")
    """

    def __init__(self, config: SubsonicConfig):
        """Initialize Subsonic API client.

        Args:
            config: SubsonicConfig with server URL, credentials and rate limit
        """
        self.config = config
        self._base_url = config.url.rstrip("/")

        # OpenSubsonic detection attributes
        self.opensubsonic = False
        self.opensubsonic_version = None

        self.rate_limit = config.rate_limit
        self._request_times: Optional[deque] = deque(maxlen=100) if config.rate_limit else None
        self._rate_lock = threading.Lock()

        transport = httpx.HTTPTransport(
            limits=httpx.Limits(
                max_connections=100,
                max_keepalive_connections=20,
                keepalive_expiry=5.0,
            ),
            retries=3,  # connection errors only
        )
        self.client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(
                connect=30.0,
                read=60.0,  # large library listings
                write=30.0,
                pool=5.0,
            ),
            transport=transport,
            follow_redirects=True,
            http2=True,
        )

        logger.info(f"Initialized Subsonic client for {self._base_url}")
        if self.rate_limit:
            logger.info(f"Rate limiting enabled: {self.rate_limit} requests/second")

    def _apply_rate_limit(self):
        """Block until another request fits into the one-second window."""
        if not self.rate_limit or self._request_times is None:
            return

        with self._rate_lock:
            now = time.time()

            while self._request_times and now - self._request_times[0] > 1.0:
                self._request_times.popleft()

            if len(self._request_times) >= self.rate_limit:
                sleep_time = 1.0 - (now - self._request_times[0])
                if sleep_time > 0:
                    logger.debug(f"Rate limit reached, sleeping for {sleep_time:.3f}s")
                    time.sleep(sleep_time)
                    now = time.time()
                    while self._request_times and now - self._request_times[0] > 1.0:
                        self._request_times.popleft()

            self._request_times.append(time.time())

    def _build_url(self, endpoint: str) -> str:
        """Build full URL for API endpoint.

        Args:
            endpoint: API endpoint path (e.g., "ping", "getSong")

        Returns:
            Full URL with /rest/ prefix
        """
        return urljoin(self._base_url, f"/rest/{endpoint}")

    def _build_params(self, **kwargs) -> Dict[str, Any]:
        """Build query parameters with authentication and API version.

        None values are dropped, sequences become repeated parameters and
        booleans are sent as "true"/"false".

        Args:
            **kwargs: Endpoint-specific parameters

        Returns:
            Complete parameter dictionary for API request
        """
        params: Dict[str, Any] = {
            "v": self.config.api_version,
            "c": self.config.client_name,
            "f": "json",
        }
        params.update(auth_params(self.config))

        for key, value in kwargs.items():
            if value is None:
                continue
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            elif isinstance(value, (list, tuple)):
                params[key] = [str(v) for v in value]
            else:
                params[key] = str(value)

        return params

    def _handle_response(self, response: httpx.Response) -> dict:
        """Parse and validate Subsonic API response.

        Args:
            response: HTTP response from Subsonic server

        Returns:
            Content of the "subsonic-response" envelope

        Raises:
            SubsonicError: Typed subclass matching the API error code
            httpx.HTTPStatusError: For HTTP-level errors
        """
        response.raise_for_status()

        data = response.json()
        subsonic_response = data.get("subsonic-response", {})

        if subsonic_response.get("status") == "failed":
            error = subsonic_response.get("error", {})
            code = error.get("code", 0)
            message = error.get("message", "Unknown error")

            logger.error(f"Subsonic API error {code}: {message}")
            raise error_for_code(code, message)

        return subsonic_response

    def _get(self, endpoint: str, **kwargs) -> dict:
        """Call a JSON endpoint and return its validated response envelope."""
        url = self._build_url(endpoint)
        params = self._build_params(**kwargs)

        self._apply_rate_limit()
        response = self.client.get(url, params=params)
        return self._handle_response(response)

    def ping(self) -> bool:
        """Test server connectivity and authentication.

        Also detects OpenSubsonic support.

        Returns:
            True if ping successful

        Raises:
            SubsonicAuthenticationError: If credentials are invalid
            SubsonicVersionError: If API version incompatible
            httpx.HTTPError: For network/HTTP errors
        """
        logger.debug(f"Pinging Subsonic server at {self._base_url}")
        data = self._get("ping")

        if "openSubsonic" in data and isinstance(data["openSubsonic"], dict):
            self.opensubsonic = True
            self.opensubsonic_version = data["openSubsonic"].get("serverVersion")
            logger.info(f"OpenSubsonic server detected: version {self.opensubsonic_version}")
        else:
            self.opensubsonic = data.get("openSubsonic") is True
            self.opensubsonic_version = data.get("serverVersion")

        logger.info("Subsonic ping successful")
        return True

    # Browsing

    def get_album(self, album_id: str) -> Dict:
        """Get an album with its songs (getAlbum).

        Returns:
            Album record; its "song" key holds the track records

        Raises:
            SubsonicNotFoundError: If album_id does not exist
        """
        logger.debug(f"Fetching album: {album_id}")
        album = self._get("getAlbum", id=album_id).get("album", {})
        album["song"] = _as_list(album.get("song"))
        logger.info(f"Retrieved album {album_id} with {len(album['song'])} songs")
        return album

    def get_album_info2(self, album_id: str) -> Dict:
        """Get album notes and external links (getAlbumInfo2)."""
        logger.debug(f"Fetching album info: {album_id}")
        return self._get("getAlbumInfo2", id=album_id).get("albumInfo", {})

    def get_artist(self, artist_id: str) -> Dict:
        """Get an artist with their albums (getArtist).

        Returns:
            Artist record; its "album" key holds the album records

        Raises:
            SubsonicNotFoundError: If artist_id does not exist
        """
        logger.debug(f"Fetching artist: {artist_id}")
        artist = self._get("getArtist", id=artist_id).get("artist", {})
        artist["album"] = _as_list(artist.get("album"))
        logger.info(f"Retrieved artist {artist_id}")
        return artist

    def get_artists(self, music_folder_id: Optional[str] = None) -> List[Dict]:
        """Get all artists using ID3 browsing (getArtists).

        Args:
            music_folder_id: Optional music folder to restrict the listing to

        Returns:
            Artist records flattened out of the alphabetical index
        """
        logger.debug(f"Fetching artists (folder={music_folder_id})")
        data = self._get("getArtists", musicFolderId=music_folder_id)

        artists = []
        for index in _as_list(data.get("artists", {}).get("index")):
            artists.extend(_as_list(index.get("artist")))

        logger.info(f"Retrieved {len(artists)} artists")
        return artists

    def get_artist_info2(self, artist_id: str, count: int = 20) -> Dict:
        """Get biography, images and similar artists (getArtistInfo2)."""
        logger.debug(f"Fetching artist info: {artist_id}")
        info = self._get("getArtistInfo2", id=artist_id, count=count).get("artistInfo2", {})
        info["similarArtist"] = _as_list(info.get("similarArtist"))
        return info

    def get_song(self, song_id: str) -> Dict:
        """Get a single song record (getSong).

        Raises:
            SubsonicNotFoundError: If song_id does not exist
        """
        logger.debug(f"Fetching song: {song_id}")
        return self._get("getSong", id=song_id).get("song", {})

    def get_top_songs(self, artist_name: str, count: int = 50) -> List[Dict]:
        """Get an artist's top songs (getTopSongs). Keyed by artist name, not ID."""
        logger.debug(f"Fetching top songs for {artist_name} (count={count})")
        data = self._get("getTopSongs", artist=artist_name, count=count)
        return _as_list(data.get("topSongs", {}).get("song"))

    def get_random_songs(self, size: int = 10, genre: Optional[str] = None) -> List[Dict]:
        """Get random songs (getRandomSongs).

        Args:
            size: Number of songs to return (max 500)
            genre: Optional genre filter
        """
        logger.debug(f"Fetching {size} random songs (genre={genre})")
        data = self._get("getRandomSongs", size=min(size, 500), genre=genre or None)
        songs = _as_list(data.get("randomSongs", {}).get("song"))
        logger.info(f"Retrieved {len(songs)} random songs")
        return songs

    def get_similar_songs2(self, artist_id: str, count: int = 50) -> List[Dict]:
        """Get songs similar to an artist's (getSimilarSongs2)."""
        logger.debug(f"Fetching similar songs for artist {artist_id} (count={count})")
        data = self._get("getSimilarSongs2", id=artist_id, count=count)
        return _as_list(data.get("similarSongs2", {}).get("song"))

    def get_genres(self) -> List[Dict]:
        """Get all genres with their song and album counts (getGenres).

        Returns:
            Genre records: {"value": name, "songCount": n, "albumCount": n}
        """
        logger.debug("Fetching genres")
        genres = _as_list(self._get("getGenres").get("genres", {}).get("genre"))
        logger.info(f"Retrieved {len(genres)} genres")
        return genres

    def search3(
        self,
        query: str,
        artist_count: int = 20,
        album_count: int = 20,
        song_count: int = 20,
    ) -> Dict[str, List[Dict]]:
        """Search for artists, albums, and songs using the search3 endpoint.

        Args:
            query: Search query string
            artist_count: Maximum number of artists to return
            album_count: Maximum number of albums to return
            song_count: Maximum number of songs to return

        Returns:
            Dictionary with "artist", "album" and "song" record lists, in
            server order
        """
        logger.debug(
            f"Searching for '{query}' (artists={artist_count}, "
            f"albums={album_count}, songs={song_count})"
        )
        data = self._get(
            "search3",
            query=query,
            artistCount=artist_count,
            albumCount=album_count,
            songCount=song_count,
        )
        result = data.get("searchResult3", {})

        logger.info(f"Search completed for query: {query}")
        return {key: _as_list(result.get(key)) for key in ("artist", "album", "song")}

    # Playlists

    def get_playlists(self, username: Optional[str] = None) -> List[Dict]:
        """Get all playlists for the user (getPlaylists).

        Args:
            username: Optional username to get playlists for (requires admin)
        """
        logger.debug(f"Fetching playlists (username={username})")
        playlists = _as_list(self._get("getPlaylists", username=username).get("playlists", {}).get("playlist"))
        logger.info(f"Retrieved {len(playlists)} playlists")
        return playlists

    def get_playlist(self, playlist_id: str) -> Dict:
        """Get a playlist with its entries (getPlaylist).

        Returns:
            Playlist record; its "entry" key holds the track records
        """
        logger.debug(f"Fetching playlist: {playlist_id}")
        playlist = self._get("getPlaylist", id=playlist_id).get("playlist", {})
        playlist["entry"] = _as_list(playlist.get("entry"))
        logger.info(f"Retrieved {len(playlist['entry'])} tracks from playlist {playlist_id}")
        return playlist

    def create_playlist(
        self,
        song_ids: Sequence[str],
        name: Optional[str] = None,
        playlist_id: Optional[str] = None,
    ) -> Dict:
        """Create a playlist, or overwrite the songs of an existing one (createPlaylist).

        Exactly one of name and playlist_id must be given.
        """
        if (name is None) == (playlist_id is None):
            raise ValueError("Exactly one of name and playlist_id is required")
        logger.debug(f"Creating playlist (name={name}, id={playlist_id}, songs={len(song_ids)})")
        data = self._get("createPlaylist", name=name, playlistId=playlist_id, songId=list(song_ids))
        return data.get("playlist", {})

    def update_playlist(
        self,
        playlist_id: str,
        name: Optional[str] = None,
        comment: Optional[str] = None,
        public: Optional[bool] = None,
        song_ids_to_add: Sequence[str] = (),
        song_indexes_to_remove: Sequence[int] = (),
    ) -> bool:
        """Update playlist metadata and entries (updatePlaylist)."""
        logger.debug(f"Updating playlist {playlist_id}")
        self._get(
            "updatePlaylist",
            playlistId=playlist_id,
            name=name,
            comment=comment,
            public=public,
            songIdToAdd=list(song_ids_to_add) or None,
            songIndexToRemove=list(song_indexes_to_remove) or None,
        )
        logger.info(f"Updated playlist {playlist_id}")
        return True

    def delete_playlist(self, playlist_id: str) -> bool:
        """Delete a playlist (deletePlaylist)."""
        logger.debug(f"Deleting playlist {playlist_id}")
        self._get("deletePlaylist", id=playlist_id)
        logger.info(f"Deleted playlist {playlist_id}")
        return True

    # Annotation

    def star(
        self,
        ids: Sequence[str] = (),
        album_ids: Sequence[str] = (),
        artist_ids: Sequence[str] = (),
    ) -> bool:
        """Star (favorite) songs, albums and artists in one request."""
        logger.debug(f"Starring {len(ids)} songs, {len(album_ids)} albums, {len(artist_ids)} artists")
        self._get(
            "star",
            id=list(ids) or None,
            albumId=list(album_ids) or None,
            artistId=list(artist_ids) or None,
        )
        return True

    def unstar(
        self,
        ids: Sequence[str] = (),
        album_ids: Sequence[str] = (),
        artist_ids: Sequence[str] = (),
    ) -> bool:
        """Unstar songs, albums and artists in one request."""
        logger.debug(f"Unstarring {len(ids)} songs, {len(album_ids)} albums, {len(artist_ids)} artists")
        self._get(
            "unstar",
            id=list(ids) or None,
            albumId=list(album_ids) or None,
            artistId=list(artist_ids) or None,
        )
        return True

    def get_starred2(self) -> Dict[str, List[Dict]]:
        """Get starred songs, albums, and artists using ID3 tags (getStarred2).

        Returns:
            Dictionary with "artist", "album" and "song" record lists
        """
        logger.debug("Fetching starred items (ID3)")
        starred = self._get("getStarred2").get("starred2", {})
        result = {key: _as_list(starred.get(key)) for key in ("artist", "album", "song")}

        logger.info(
            f"Retrieved {len(result['artist'])} starred artists, "
            f"{len(result['album'])} albums, {len(result['song'])} songs"
        )
        return result

    def scrobble(self, track_id: str, time: Optional[int] = None, submission: bool = True) -> bool:
        """Register song playback (scrobble).

        Args:
            track_id: ID of the track that was played
            time: Unix timestamp (milliseconds) when playback started
            submission: If True, submit a scrobble. If False, just update "now playing"
        """
        action = "Scrobbling" if submission else "Now playing"
        logger.debug(f"{action} track: {track_id}")
        self._get("scrobble", id=track_id, time=time, submission=submission)
        return True

    def start_scan(self) -> Dict:
        """Start a library rescan (startScan)."""
        logger.debug("Starting library scan")
        status = self._get("startScan").get("scanStatus", {})
        logger.info(f"Scan status: {status}")
        return status

    # Media retrieval

    def _get_binary(self, endpoint: str, **kwargs) -> bytes:
        """Call an endpoint returning binary data.

        Errors come back as a JSON envelope instead of the payload.
        """
        url = self._build_url(endpoint)
        params = self._build_params(**kwargs)

        self._apply_rate_limit()
        response = self.client.get(url, params=params)

        content_type = response.headers.get("content-type", "")
        if content_type.startswith(("text/xml", "application/json")):
            self._handle_response(response)
        response.raise_for_status()
        return response.content

    def get_cover_art(self, cover_art_id: str, size: Optional[int] = None) -> bytes:
        """Download cover art image bytes (getCoverArt).

        Args:
            cover_art_id: Cover art identifier from a record's coverArt field
            size: Optional size in pixels to scale image (maintains aspect ratio)

        Returns:
            Binary image data (JPEG/PNG)

        Raises:
            SubsonicNotFoundError: If cover_art_id does not exist
        """
        logger.debug(f"Fetching cover art: {cover_art_id} (size={size})")
        content = self._get_binary("getCoverArt", id=cover_art_id, size=size or None)
        logger.info(f"Downloaded {len(content)} bytes of cover art {cover_art_id}")
        return content

    def download_track(self, track_id: str) -> bytes:
        """Download the original file of a track (download).

        Raises:
            SubsonicNotFoundError: If track_id does not exist
            httpx.HTTPError: If the download fails
        """
        logger.debug(f"Downloading track: {track_id}")
        content = self._get_binary("download", id=track_id)
        logger.info(f"Downloaded {len(content)} bytes for track {track_id}")
        return content

    def get_stream_url(self, track_id: str) -> str:
        """Get an authenticated streaming URL for a track.

        Example:
            >>> client.get_stream_url("12345")
            'https://music.example.com/rest/stream?v=1.16.1&c=...&id=12345'
        """
        url = self._build_url("stream")
        params = self._build_params(id=track_id)

        logger.debug(f"Generated stream URL for track {track_id}")
        return str(httpx.URL(url, params=params))

    def close(self):
        """Close HTTP client and release resources."""
        self.client.close()
        logger.info("Closed Subsonic client")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
