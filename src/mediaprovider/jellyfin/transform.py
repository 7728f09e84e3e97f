"""Transform Jellyfin items into domain model entities.

Jellyfin reports runtimes in ticks. Track and album runtimes use 100ns ticks
(10,000,000 per second); playlist runtimes arrive at a coarser granularity
(1,000,000 per second). The two factors are not interchangeable.
"""

from typing import Dict, List, Optional, Tuple

from ..models import (
    GENRE_COUNT_UNSUPPORTED,
    Album,
    Artist,
    ContentType,
    Genre,
    Playlist,
    SearchResult,
    Track,
)

TICKS_PER_SECOND = 10_000_000
PLAYLIST_TICKS_PER_SECOND = 1_000_000


def ticks_to_seconds(ticks: Optional[int], per_second: int = TICKS_PER_SECOND) -> int:
    """Convert a tick count to whole seconds.

    Examples:
        >>> ticks_to_seconds(1_800_000_000)
        180
        >>> ticks_to_seconds(180_000_000, PLAYLIST_TICKS_PER_SECOND)
        180
        >>> ticks_to_seconds(None)
        0
    """
    return int((ticks or 0) // per_second)


def name_id_pairs(refs: Optional[List[Dict]]) -> Tuple[List[str], List[str]]:
    """Flatten a list of {Id, Name} references into index-aligned ID and name lists."""
    ids: List[str] = []
    names: List[str] = []
    for ref in refs or []:
        ids.append(ref.get("Id", ""))
        names.append(ref.get("Name", ""))
    return ids, names


def _user_data(item: Dict) -> Dict:
    return item.get("UserData") or {}


def track_cover_art_id(item: Dict) -> str:
    """The track's own image if it has one, otherwise its album's."""
    if (item.get("ImageTags") or {}).get("Primary"):
        return item["Id"]
    return item.get("AlbumId", "")


def to_track(item: Optional[Dict]) -> Optional[Track]:
    """Map a Jellyfin Audio item to a Track."""
    if item is None:
        return None
    artist_ids, artist_names = name_id_pairs(item.get("ArtistItems"))
    user_data = _user_data(item)
    genres = item.get("Genres") or []
    sources = item.get("MediaSources") or []
    source = sources[0] if sources else {}

    return Track(
        id=item["Id"],
        cover_art_id=track_cover_art_id(item),
        parent_id=item.get("AlbumId", ""),
        name=item.get("Name", ""),
        duration=ticks_to_seconds(item.get("RunTimeTicks")),
        track_number=item.get("IndexNumber") or 0,
        disc_number=item.get("ParentIndexNumber") or 0,
        genre=genres[0] if genres else "",
        artist_ids=artist_ids,
        artist_names=artist_names,
        album=item.get("Album", ""),
        album_id=item.get("AlbumId", ""),
        year=item.get("ProductionYear") or 0,
        rating=user_data.get("Rating") or 0,
        favorite=user_data.get("IsFavorite", False),
        play_count=user_data.get("PlayCount", 0),
        size=source.get("Size") or 0,
        file_path=source.get("Path", ""),
        bit_rate=(source.get("Bitrate") or 0) // 1000,
    )


def album_fields(item: Dict) -> Dict:
    """Album constructor arguments shared by Album and AlbumWithTracks."""
    artist_ids, artist_names = name_id_pairs(item.get("AlbumArtists"))
    return dict(
        id=item["Id"],
        cover_art_id=item["Id"],
        name=item.get("Name", ""),
        duration=ticks_to_seconds(item.get("RunTimeTicks")),
        artist_ids=artist_ids,
        artist_names=artist_names,
        year=item.get("ProductionYear") or 0,
        genres=list(item.get("Genres") or []),
        track_count=item.get("ChildCount") or 0,
        favorite=_user_data(item).get("IsFavorite", False),
    )


def to_album(item: Optional[Dict]) -> Optional[Album]:
    """Map a Jellyfin MusicAlbum item to an Album."""
    if item is None:
        return None
    return Album(**album_fields(item))


def artist_fields(item: Dict) -> Dict:
    return dict(
        id=item["Id"],
        cover_art_id=item["Id"],
        name=item.get("Name", ""),
        favorite=_user_data(item).get("IsFavorite", False),
        album_count=item.get("AlbumCount") or item.get("ChildCount") or 0,
    )


def to_artist(item: Optional[Dict]) -> Optional[Artist]:
    """Map a Jellyfin MusicArtist item to an Artist."""
    if item is None:
        return None
    return Artist(**artist_fields(item))


def playlist_fields(item: Dict, owner: str) -> Dict:
    """Playlist constructor arguments.

    Jellyfin playlists have no visibility, so public is always False and the
    owner is the logged-in user.
    """
    return dict(
        id=item["Id"],
        cover_art_id=item["Id"],
        name=item.get("Name", ""),
        description=item.get("Overview", ""),
        public=False,
        owner=owner,
        duration=ticks_to_seconds(item.get("RunTimeTicks"), PLAYLIST_TICKS_PER_SECOND),
        track_count=item.get("ChildCount") or item.get("SongCount") or 0,
    )


def to_playlist(item: Optional[Dict], owner: str) -> Optional[Playlist]:
    """Map a Jellyfin Playlist item to a Playlist owned by owner."""
    if item is None:
        return None
    return Playlist(**playlist_fields(item, owner))


def to_genre(item: Optional[Dict]) -> Optional[Genre]:
    """Map a Jellyfin genre {Name, Id} to a Genre with unsupported counts."""
    if item is None:
        return None
    return Genre(
        name=item.get("Name", ""),
        album_count=GENRE_COUNT_UNSUPPORTED,
        track_count=GENRE_COUNT_UNSUPPORTED,
    )


def merge_results(
    search_result: Dict[str, List[Dict]],
    matching_playlists: List[Dict],
    matching_genres: List[Dict],
) -> List[SearchResult]:
    """Merge search records and filtered playlists/genres into SearchResults.

    Order: albums, artists, songs (server order), then playlists, then genres.
    """
    results: List[SearchResult] = []

    for al in search_result.get("albums", []):
        album = to_album(al)
        results.append(SearchResult(
            type=ContentType.ALBUM,
            id=album.id,
            cover_id=album.cover_art_id,
            name=album.name,
            artist_name=", ".join(album.artist_names),
            size=album.track_count,
        ))

    for ar in search_result.get("artists", []):
        artist = to_artist(ar)
        results.append(SearchResult(
            type=ContentType.ARTIST,
            id=artist.id,
            cover_id=artist.cover_art_id,
            name=artist.name,
            size=artist.album_count,
        ))

    for tr in search_result.get("songs", []):
        track = to_track(tr)
        results.append(SearchResult(
            type=ContentType.TRACK,
            id=track.id,
            cover_id=track.cover_art_id,
            name=track.name,
            artist_name=", ".join(track.artist_names),
            size=track.duration,
        ))

    for pl in matching_playlists:
        results.append(SearchResult(
            type=ContentType.PLAYLIST,
            id=pl["Id"],
            cover_id=pl["Id"],
            name=pl.get("Name", ""),
            size=pl.get("ChildCount") or pl.get("SongCount") or 0,
        ))

    for g in matching_genres:
        results.append(SearchResult(
            type=ContentType.GENRE,
            id=g.get("Name", ""),
            name=g.get("Name", ""),
            size=GENRE_COUNT_UNSUPPORTED,
        ))

    return results
