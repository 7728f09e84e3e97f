"""MediaProvider implementation for Jellyfin servers."""

import asyncio
import logging
from typing import Any, Callable, List, Optional

from ..aggregate import (
    FAVORITE_BATCH_SIZE,
    filter_by_terms,
    finalize_results,
    gather_slots,
    primary,
    query_terms,
    run_in_batches,
    secondary,
)
from ..cache import TimedCache
from ..exceptions import UnsupportedOperationError
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
from .client import JellyfinClient
from .models import SORT_BY_COMMUNITY_RATING, SORT_BY_RANDOM, SORT_DESC, Filter, Paging, QueryOpts, Sort
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


def _favorites_only() -> QueryOpts:
    return QueryOpts(filter=Filter(favorite=True))


class JellyfinMediaProvider(MediaProvider):
    """MediaProvider backed by a logged-in JellyfinClient.

    Jellyfin lacks several Subsonic capabilities, which this class fills in:
    - genre counts are reported as GENRE_COUNT_UNSUPPORTED
    - similar tracks are approximated from the artist's best-rated album
    - playlists are never public and are owned by the logged-in user
    - favorites can only be set one item per request
    - scrobbling is not supported

    Attributes:
        client: JellyfinClient used for every backend call
        genre_cache: TimedCache holding the genre listing
    """

    def __init__(self, client: JellyfinClient, genre_cache: Optional[TimedCache] = None):
        super().__init__()
        self.client = client
        self.genre_cache: TimedCache[List[Genre]] = genre_cache or TimedCache()

    async def _call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        return await asyncio.to_thread(fn, *args, **kwargs)

    def can_make_public_playlist(self) -> bool:
        return False

    # Playlists

    async def create_playlist(self, name: str, track_ids: List[str]) -> None:
        await self._call(self.client.create_playlist, name, track_ids)

    async def edit_playlist(self, playlist_id: str, name: str, description: str, public: bool) -> None:
        # public is ignored, Jellyfin has no playlist visibility
        await self._call(self.client.update_playlist_metadata, playlist_id, name, description)

    async def delete_playlist(self, playlist_id: str) -> None:
        await self._call(self.client.delete_playlist, playlist_id)

    async def add_playlist_tracks(self, playlist_id: str, track_ids: List[str]) -> None:
        await self._call(self.client.add_songs_to_playlist, playlist_id, track_ids)

    async def remove_playlist_tracks(self, playlist_id: str, remove: List[IDAndIndex]) -> None:
        await self._call(self.client.remove_songs_from_playlist, playlist_id, [entry.id for entry in remove])

    async def replace_playlist_tracks(self, playlist_id: str, track_ids: List[str]) -> None:
        """Replace the playlist's tracks. This is NOT atomic.

        Runs three steps in order: list the current tracks, remove all of
        them, add track_ids. If the add step fails the playlist is left
        empty; nothing is restored. Any step's error is raised.
        """
        current = await self._call(self.client.get_playlist_songs, playlist_id)
        await self._call(self.client.remove_songs_from_playlist, playlist_id, [s["Id"] for s in current])
        await self._call(self.client.add_songs_to_playlist, playlist_id, track_ids)

    async def get_playlists(self) -> List[Playlist]:
        playlists = await self._call(self.client.get_playlists)
        owner = self.client.logged_in_user()
        return [to_playlist(p, owner) for p in playlists]

    async def get_playlist(self, playlist_id: str) -> PlaylistWithTracks:
        pl = await self._call(self.client.get_playlist, playlist_id)
        songs = await self._call(self.client.get_playlist_songs, playlist_id)
        return PlaylistWithTracks(
            **playlist_fields(pl, self.client.logged_in_user()),
            tracks=[to_track(s) for s in songs],
        )

    # Library reads

    async def get_album(self, album_id: str) -> AlbumWithTracks:
        """Get the album header, then its tracks.

        The two calls are not transactional; track_count may differ from the
        number of tracks returned.
        """
        al = await self._call(self.client.get_album, album_id)
        songs = await self._call(self.client.get_songs, QueryOpts(filter=Filter(parent_id=album_id)))
        return AlbumWithTracks(**album_fields(al), tracks=[to_track(s) for s in songs])

    async def get_album_info(self, album_id: str) -> AlbumInfo:
        al = await self._call(self.client.get_album, album_id)
        return AlbumInfo(notes=al.get("Overview", ""))

    async def get_artist(self, artist_id: str) -> ArtistWithAlbums:
        ar = await self._call(self.client.get_artist, artist_id)
        albums = await self._call(self.client.get_albums, QueryOpts(filter=Filter(artist_id=artist_id)))
        return ArtistWithAlbums(**artist_fields(ar), albums=[to_album(a) for a in albums])

    async def get_artist_info(self, artist_id: str) -> ArtistInfo:
        ar = await self._call(self.client.get_artist, artist_id)
        similar = await self._call(self.client.get_similar_artists, artist_id)
        return ArtistInfo(
            biography=ar.get("Overview", ""),
            similar_artists=[to_artist(a) for a in similar],
        )

    async def get_artists(self) -> List[Artist]:
        artists = await self._call(self.client.get_album_artists, QueryOpts())
        return [to_artist(a) for a in artists]

    async def get_track(self, track_id: str) -> Track:
        return to_track(await self._call(self.client.get_song, track_id))

    async def get_top_tracks(self, artist: Artist, limit: int) -> List[Track]:
        opts = QueryOpts(
            filter=Filter(artist_id=artist.id),
            sort=Sort(field=SORT_BY_COMMUNITY_RATING, mode=SORT_DESC),
            paging=Paging(limit=limit),
        )
        songs = await self._call(self.client.get_songs, opts)
        return [to_track(s) for s in songs]

    async def get_random_tracks(self, genre_name: str, limit: int) -> List[Track]:
        opts = QueryOpts(
            filter=Filter(genres=[genre_name] if genre_name else []),
            sort=Sort(field=SORT_BY_RANDOM),
            paging=Paging(limit=limit),
        )
        songs = await self._call(self.client.get_songs, opts)
        return [to_track(s) for s in songs]

    async def get_similar_tracks(self, artist_id: str, limit: int) -> List[Track]:
        """Approximate tracks similar to an artist.

        Jellyfin can only find songs similar to an album, so this uses the
        artist's best community-rated album as the seed. An artist without
        albums yields an empty list.
        """
        opts = QueryOpts(
            filter=Filter(artist_id=artist_id),
            sort=Sort(field=SORT_BY_COMMUNITY_RATING, mode=SORT_DESC),
            paging=Paging(limit=1),
        )
        albums = await self._call(self.client.get_albums, opts)
        if not albums:
            return []
        songs = await self._call(self.client.get_similar_songs, albums[0]["Id"], limit)
        return [to_track(s) for s in songs]

    async def get_cover_art(self, cover_art_id: str, size: int) -> bytes:
        return await self._call(self.client.get_item_image, cover_art_id, "Primary", size, 92)

    async def get_genres(self) -> List[Genre]:
        """List genres, refetching at most once per cache window.

        Album and track counts are GENRE_COUNT_UNSUPPORTED.
        """
        return await self.genre_cache.get_or_refresh(self._fetch_genres)

    async def _fetch_genres(self) -> List[Genre]:
        genres = await self._call(self.client.get_genres, Paging())
        return [to_genre(g) for g in genres]

    async def get_favorites(self) -> Favorites:
        """Fetch favorite albums, artists and tracks concurrently.

        Never raises for a failed category: that category is returned empty
        and the failure is logged. A normal return therefore does not mean
        all three queries succeeded.
        """
        albums, artists, songs = await gather_slots(
            self._call(self.client.get_albums, _favorites_only()),
            self._call(self.client.get_album_artists, _favorites_only()),
            self._call(self.client.get_songs, _favorites_only()),
        )
        return Favorites(
            albums=[to_album(a) for a in secondary(albums, [], "Favorite albums")],
            artists=[to_artist(a) for a in secondary(artists, [], "Favorite artists")],
            tracks=[to_track(s) for s in secondary(songs, [], "Favorite tracks")],
        )

    async def search_all(self, query: str, max_results: int) -> List[SearchResult]:
        """Search albums, artists and songs, plus playlists and genres by name.

        The library search, the playlist listing and the genre listing run
        concurrently. A library search failure is raised; playlist or genre
        failures only drop that category.

        Args:
            query: Free-text query
            max_results: Maximum number of merged results; the library search
                is asked for max_results // 3 of each category

        Returns:
            Albums, artists, tracks, playlists, genres, truncated to max_results
        """
        terms = query_terms(query)

        search, playlists, genres = await gather_slots(
            self._call(self.client.search, query, max_results // 3),
            self._call(self.client.get_playlists),
            self._call(self.client.get_genres, Paging()),
        )

        search = primary(search)
        playlists = filter_by_terms(secondary(playlists, [], "Playlist"), terms, lambda p: p.get("Name", ""))
        genres = filter_by_terms(secondary(genres, [], "Genre"), terms, lambda g: g.get("Name", ""))

        return finalize_results(merge_results(search, playlists, genres), terms, max_results)

    # Writes and playback support

    async def set_favorite(self, params: RatingFavoriteParameters, favorite: bool) -> None:
        """Set the favorite state of every album, artist and track in params.

        Jellyfin has no bulk favorite endpoint, so items are updated one
        request each, FAVORITE_BATCH_SIZE at a time, batch after batch. Every
        item is attempted even after a failure; the first failure is raised
        once all batches are done.
        """
        ids = params.all_ids()
        logger.debug(f"Setting favorite={favorite} on {len(ids)} items")

        error = await run_in_batches(
            ids,
            lambda item_id: self._call(self.client.set_favorite, item_id, favorite),
            batch_size=FAVORITE_BATCH_SIZE,
        )
        if error is not None:
            raise error

    async def get_stream_url(self, track_id: str) -> str:
        return self.client.get_stream_url(track_id)

    async def download_track(self, track_id: str) -> bytes:
        return await self._call(self.client.download_song, track_id)

    async def scrobble(self, track_id: str, submission: bool) -> None:
        raise UnsupportedOperationError("scrobble", "Jellyfin")

    async def rescan_library(self) -> None:
        await self._call(self.client.refresh_library)
