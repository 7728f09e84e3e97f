"""MediaProvider implementation for Subsonic-compatible servers."""

import asyncio
import logging
from typing import Any, Callable, List, Optional

from ..aggregate import filter_by_terms, finalize_results, gather_slots, primary, query_terms, secondary
from ..cache import TimedCache
from ..models import (
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
from ..provider import MediaProvider
from .client import SubsonicClient
from .transform import (
    album_fields,
    artist_fields,
    merge_results,
    playlist_fields,
    to_album,
    to_artist,
    to_genre,
    to_playlist,
    to_track,
)

logger = logging.getLogger(__name__)


class SubsonicMediaProvider(MediaProvider):
    """MediaProvider backed by a SubsonicClient.

    Most operations map to one native Subsonic endpoint. Blocking client calls
    run in worker threads so composite operations can issue them concurrently.

    Attributes:
        client: SubsonicClient used for every backend call
        genre_cache: TimedCache holding the genre listing
    """

    def __init__(self, client: SubsonicClient, genre_cache: Optional[TimedCache] = None):
        super().__init__()
        self.client = client
        self.genre_cache: TimedCache[List[Genre]] = genre_cache or TimedCache()

    async def _call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        return await asyncio.to_thread(fn, *args, **kwargs)

    def can_make_public_playlist(self) -> bool:
        return True

    # Playlists

    async def create_playlist(self, name: str, track_ids: List[str]) -> None:
        await self._call(self.client.create_playlist, track_ids, name=name)

    async def edit_playlist(self, playlist_id: str, name: str, description: str, public: bool) -> None:
        await self._call(self.client.update_playlist, playlist_id, name=name, comment=description, public=public)

    async def delete_playlist(self, playlist_id: str) -> None:
        await self._call(self.client.delete_playlist, playlist_id)

    async def add_playlist_tracks(self, playlist_id: str, track_ids: List[str]) -> None:
        await self._call(self.client.update_playlist, playlist_id, song_ids_to_add=track_ids)

    async def remove_playlist_tracks(self, playlist_id: str, remove: List[IDAndIndex]) -> None:
        # Subsonic removes entries by position
        indexes = [entry.index for entry in remove]
        await self._call(self.client.update_playlist, playlist_id, song_indexes_to_remove=indexes)

    async def replace_playlist_tracks(self, playlist_id: str, track_ids: List[str]) -> None:
        """Overwrite the playlist's songs with one createPlaylist call."""
        await self._call(self.client.create_playlist, track_ids, playlist_id=playlist_id)

    async def get_playlists(self) -> List[Playlist]:
        playlists = await self._call(self.client.get_playlists)
        return [to_playlist(p) for p in playlists]

    async def get_playlist(self, playlist_id: str) -> PlaylistWithTracks:
        pl = await self._call(self.client.get_playlist, playlist_id)
        return PlaylistWithTracks(**playlist_fields(pl), tracks=[to_track(e) for e in pl["entry"]])

    # Library reads

    async def get_album(self, album_id: str) -> AlbumWithTracks:
        al = await self._call(self.client.get_album, album_id)
        return AlbumWithTracks(**album_fields(al), tracks=[to_track(s) for s in al["song"]])

    async def get_album_info(self, album_id: str) -> AlbumInfo:
        info = await self._call(self.client.get_album_info2, album_id)
        return AlbumInfo(
            notes=info.get("notes", ""),
            lastfm_url=info.get("lastFmUrl", ""),
            musicbrainz_id=info.get("musicBrainzId", ""),
        )

    async def get_artist(self, artist_id: str) -> ArtistWithAlbums:
        ar = await self._call(self.client.get_artist, artist_id)
        return ArtistWithAlbums(**artist_fields(ar), albums=[to_album(a) for a in ar["album"]])

    async def get_artist_info(self, artist_id: str) -> ArtistInfo:
        info = await self._call(self.client.get_artist_info2, artist_id)
        return ArtistInfo(
            biography=info.get("biography", ""),
            lastfm_url=info.get("lastFmUrl", ""),
            image_url=info.get("largeImageUrl", ""),
            similar_artists=[to_artist(a) for a in info["similarArtist"]],
        )

    async def get_artists(self) -> List[Artist]:
        artists = await self._call(self.client.get_artists)
        return [to_artist(a) for a in artists]

    async def get_track(self, track_id: str) -> Track:
        return to_track(await self._call(self.client.get_song, track_id))

    async def get_top_tracks(self, artist: Artist, limit: int) -> List[Track]:
        songs = await self._call(self.client.get_top_songs, artist.name, count=limit)
        return [to_track(s) for s in songs]

    async def get_random_tracks(self, genre_name: str, limit: int) -> List[Track]:
        songs = await self._call(self.client.get_random_songs, size=limit, genre=genre_name)
        return [to_track(s) for s in songs]

    async def get_similar_tracks(self, artist_id: str, limit: int) -> List[Track]:
        songs = await self._call(self.client.get_similar_songs2, artist_id, count=limit)
        return [to_track(s) for s in songs]

    async def get_cover_art(self, cover_art_id: str, size: int) -> bytes:
        return await self._call(self.client.get_cover_art, cover_art_id, size=size)

    async def get_genres(self) -> List[Genre]:
        return await self.genre_cache.get_or_refresh(self._fetch_genres)

    async def _fetch_genres(self) -> List[Genre]:
        genres = await self._call(self.client.get_genres)
        return [to_genre(g) for g in genres]

    async def get_favorites(self) -> Favorites:
        """Get starred items with one native getStarred2 call."""
        starred = await self._call(self.client.get_starred2)
        return Favorites(
            albums=[to_album(a) for a in starred["album"]],
            artists=[to_artist(a) for a in starred["artist"]],
            tracks=[to_track(s) for s in starred["song"]],
        )

    async def search_all(self, query: str, max_results: int) -> List[SearchResult]:
        """Search albums, artists and songs natively, plus playlists and genres by name.

        search3, getPlaylists and getGenres run concurrently. A search3 failure
        is raised; playlist or genre failures only drop that category. Playlists
        and genres match when their name contains every query term,
        case-insensitively.

        Args:
            query: Free-text query
            max_results: Maximum number of merged results; search3 is asked for
                max_results // 3 of each of its categories

        Returns:
            Albums, artists, tracks, playlists, genres, truncated to max_results
        """
        terms = query_terms(query)
        count = max_results // 3

        search, playlists, genres = await gather_slots(
            self._call(self.client.search3, query, artist_count=count, album_count=count, song_count=count),
            self._call(self.client.get_playlists),
            self._call(self.client.get_genres),
        )

        search = primary(search)
        playlists = filter_by_terms(secondary(playlists, [], "Playlist"), terms, lambda p: p.get("name", ""))
        genres = filter_by_terms(secondary(genres, [], "Genre"), terms, lambda g: g.get("value", ""))

        return finalize_results(merge_results(search, playlists, genres), terms, max_results)

    # Writes and playback support

    async def set_favorite(self, params: RatingFavoriteParameters, favorite: bool) -> None:
        """Star or unstar everything in params with a single request."""
        fn = self.client.star if favorite else self.client.unstar
        await self._call(fn, ids=params.track_ids, album_ids=params.album_ids, artist_ids=params.artist_ids)

    async def get_stream_url(self, track_id: str) -> str:
        return self.client.get_stream_url(track_id)

    async def download_track(self, track_id: str) -> bytes:
        return await self._call(self.client.download_track, track_id)

    async def scrobble(self, track_id: str, submission: bool) -> None:
        await self._call(self.client.scrobble, track_id, submission=submission)

    async def rescan_library(self) -> None:
        await self._call(self.client.start_scan)
