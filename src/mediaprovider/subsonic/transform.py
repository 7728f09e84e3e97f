"""Transform Subsonic API records into domain model entities.

Subsonic resolves cover art server-side, so coverArt is used verbatim.
OpenSubsonic servers add multi-valued "artists" and "albumArtists" lists of
{id, name}; plain Subsonic servers only carry one artist/artistId pair.
"""

from typing import Dict, List, Optional, Tuple

from ..models import Album, Artist, ContentType, Genre, Playlist, SearchResult, Track


def artist_refs(record: Dict, *multi_keys: str) -> Tuple[List[str], List[str]]:
    """Flatten the artist references of a record into ID and name lists.

    Both lists are filled in one pass, so index i of one refers to index i of
    the other.

    Args:
        record: Song or album record
        *multi_keys: OpenSubsonic multi-valued keys, tried in order
            (default: "artists")

    Returns:
        (artist_ids, artist_names)

    Examples:
        >>> artist_refs({"artists": [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}]})
        (['1', '2'], ['A', 'B'])
        >>> artist_refs({"artistId": "1", "artist": "A"})
        (['1'], ['A'])
    """
    ids: List[str] = []
    names: List[str] = []
    keys = multi_keys or ("artists",)
    refs = next((record[key] for key in keys if record.get(key)), [])
    if refs:
        for ref in refs:
            ids.append(ref.get("id", ""))
            names.append(ref.get("name", ""))
    elif record.get("artist"):
        ids.append(record.get("artistId", ""))
        names.append(record["artist"])
    return ids, names


def get_name_string(single_name: Optional[str], id_names: Optional[List[Dict]]) -> str:
    """Select the single-valued artist name or join the OpenSubsonic names.

    Examples:
        >>> get_name_string("A feat. B", [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}])
        'A, B'
        >>> get_name_string("A", [])
        'A'
    """
    if not id_names:
        return single_name or ""
    return ", ".join(ref.get("name", "") for ref in id_names)


def to_track(song: Optional[Dict]) -> Optional[Track]:
    """Map a Subsonic song ("child") record to a Track."""
    if song is None:
        return None
    artist_ids, artist_names = artist_refs(song)
    return Track(
        id=song["id"],
        cover_art_id=song.get("coverArt", ""),
        parent_id=song.get("parent", ""),
        name=song.get("title", ""),
        duration=song.get("duration", 0),
        track_number=song.get("track", 0),
        disc_number=song.get("discNumber", 0),
        genre=song.get("genre", ""),
        artist_ids=artist_ids,
        artist_names=artist_names,
        album=song.get("album", ""),
        album_id=song.get("albumId", ""),
        year=song.get("year", 0),
        rating=song.get("userRating", 0),
        favorite=bool(song.get("starred")),
        play_count=song.get("playCount", 0),
        size=song.get("size", 0),
        file_path=song.get("path", ""),
        bit_rate=song.get("bitRate", 0),
    )


def album_fields(album: Dict) -> Dict:
    """Album constructor arguments shared by Album and AlbumWithTracks."""
    artist_ids, artist_names = artist_refs(album, "albumArtists", "artists")
    genres = [g.get("name", "") for g in album.get("genres") or []]
    if not genres and album.get("genre"):
        genres = [album["genre"]]
    return dict(
        id=album["id"],
        cover_art_id=album.get("coverArt", ""),
        name=album.get("name", ""),
        duration=album.get("duration", 0),
        artist_ids=artist_ids,
        artist_names=artist_names,
        year=album.get("year", 0),
        genres=genres,
        track_count=album.get("songCount", 0),
        favorite=bool(album.get("starred")),
    )


def to_album(album: Optional[Dict]) -> Optional[Album]:
    """Map a Subsonic album (ID3) record to an Album."""
    if album is None:
        return None
    return Album(**album_fields(album))


def artist_fields(artist: Dict) -> Dict:
    return dict(
        id=artist["id"],
        cover_art_id=artist.get("coverArt", ""),
        name=artist.get("name", ""),
        favorite=bool(artist.get("starred")),
        album_count=artist.get("albumCount", 0),
    )


def to_artist(artist: Optional[Dict]) -> Optional[Artist]:
    """Map a Subsonic artist (ID3) record to an Artist."""
    if artist is None:
        return None
    return Artist(**artist_fields(artist))


def playlist_fields(playlist: Dict) -> Dict:
    return dict(
        id=playlist["id"],
        cover_art_id=playlist.get("coverArt", ""),
        name=playlist.get("name", ""),
        description=playlist.get("comment", ""),
        public=playlist.get("public", False),
        owner=playlist.get("owner", ""),
        duration=playlist.get("duration", 0),
        track_count=playlist.get("songCount", 0),
    )


def to_playlist(playlist: Optional[Dict]) -> Optional[Playlist]:
    """Map a Subsonic playlist record to a Playlist."""
    if playlist is None:
        return None
    return Playlist(**playlist_fields(playlist))


def to_genre(genre: Optional[Dict]) -> Optional[Genre]:
    """Map a getGenres record ({"value", "songCount", "albumCount"}) to a Genre."""
    if genre is None:
        return None
    return Genre(
        name=genre.get("value", ""),
        album_count=genre.get("albumCount", 0),
        track_count=genre.get("songCount", 0),
    )


def merge_results(
    search_result: Dict[str, List[Dict]],
    matching_playlists: List[Dict],
    matching_genres: List[Dict],
) -> List[SearchResult]:
    """Merge search3 records and filtered playlists/genres into SearchResults.

    Order: albums, artists, songs (server order), then playlists, then genres.
    """
    results: List[SearchResult] = []

    for al in search_result.get("album", []):
        results.append(SearchResult(
            type=ContentType.ALBUM,
            id=al["id"],
            cover_id=al.get("coverArt", ""),
            name=al.get("name", ""),
            artist_name=get_name_string(al.get("artist"), al.get("artists")),
            size=al.get("songCount", 0),
        ))

    for ar in search_result.get("artist", []):
        results.append(SearchResult(
            type=ContentType.ARTIST,
            id=ar["id"],
            cover_id=ar.get("coverArt", ""),
            name=ar.get("name", ""),
            size=ar.get("albumCount", 0),
        ))

    for tr in search_result.get("song", []):
        results.append(SearchResult(
            type=ContentType.TRACK,
            id=tr["id"],
            cover_id=tr.get("coverArt", ""),
            name=tr.get("title", ""),
            artist_name=get_name_string(tr.get("artist"), tr.get("artists")),
            size=tr.get("duration", 0),
        ))

    for pl in matching_playlists:
        results.append(SearchResult(
            type=ContentType.PLAYLIST,
            id=pl["id"],
            cover_id=pl.get("coverArt", ""),
            name=pl.get("name", ""),
            size=pl.get("songCount", 0),
        ))

    for g in matching_genres:
        results.append(SearchResult(
            type=ContentType.GENRE,
            id=g.get("value", ""),
            name=g.get("value", ""),
            size=g.get("albumCount", 0),
        ))

    return results
