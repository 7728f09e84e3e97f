"""Tests for Subsonic record adapters."""

from mediaprovider.models import ContentType
from mediaprovider.subsonic.transform import (
    artist_refs,
    get_name_string,
    merge_results,
    to_album,
    to_genre,
    to_playlist,
    to_track,
)

SONG = {
    "id": "t1",
    "parent": "al1",
    "title": "So What",
    "album": "Kind of Blue",
    "albumId": "al1",
    "artist": "Miles Davis",
    "artistId": "ar1",
    "coverArt": "al-al1",
    "duration": 562,
    "track": 1,
    "discNumber": 1,
    "year": 1959,
    "genre": "Jazz",
    "size": 9000000,
    "bitRate": 320,
    "path": "Miles Davis/Kind of Blue/01.flac",
    "playCount": 4,
    "userRating": 5,
    "starred": "2024-01-01T00:00:00Z",
}


class TestTrack:
    def test_field_mapping(self):
        track = to_track(SONG)

        assert track.id == "t1"
        assert track.name == "So What"
        assert track.cover_art_id == "al-al1"
        assert track.parent_id == "al1"
        assert track.duration == 562
        assert track.artist_ids == ["ar1"]
        assert track.artist_names == ["Miles Davis"]
        assert track.favorite is True
        assert track.rating == 5
        assert track.bit_rate == 320
        assert track.file_path == "Miles Davis/Kind of Blue/01.flac"

    def test_none_maps_to_none(self):
        assert to_track(None) is None
        assert to_album(None) is None
        assert to_playlist(None) is None

    def test_unstarred(self):
        assert to_track({"id": "t2"}).favorite is False


class TestArtistRefs:
    def test_multi_valued_artists_stay_aligned(self):
        record = {
            "artist": "A feat. B",
            "artistId": "x",
            "artists": [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}, {"id": "3", "name": "C"}],
        }

        ids, names = artist_refs(record)

        assert ids == ["1", "2", "3"]
        assert names == ["A", "B", "C"]

    def test_album_prefers_album_artists(self):
        album = to_album({
            "id": "al1",
            "artist": "A feat. B",
            "artistId": "x",
            "artists": [{"id": "9", "name": "Guest"}],
            "albumArtists": [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}],
        })

        assert album.artist_ids == ["1", "2"]
        assert album.artist_names == ["A", "B"]

    def test_album_falls_back_to_artists(self):
        album = to_album({"id": "al1", "artists": [{"id": "9", "name": "Guest"}]})

        assert album.artist_ids == ["9"]
        assert album.artist_names == ["Guest"]

    def test_no_artist(self):
        assert artist_refs({}) == ([], [])

    def test_name_string(self):
        assert get_name_string("A feat. B", [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}]) == "A, B"
        assert get_name_string(None, None) == ""


class TestAlbumPlaylistGenre:
    def test_album_genres_from_opensubsonic(self):
        album = to_album({"id": "al1", "genre": "Jazz", "genres": [{"name": "Jazz"}, {"name": "Modal"}], "songCount": 5})

        assert album.genres == ["Jazz", "Modal"]
        assert album.track_count == 5

    def test_album_single_genre(self):
        assert to_album({"id": "al1", "genre": "Jazz"}).genres == ["Jazz"]

    def test_playlist(self):
        playlist = to_playlist({
            "id": "p1", "name": "Mix", "comment": "Late night", "public": True,
            "owner": "john", "duration": 600, "songCount": 3,
        })

        assert playlist.description == "Late night"
        assert playlist.public is True
        assert playlist.owner == "john"
        assert playlist.track_count == 3

    def test_genre_counts(self):
        genre = to_genre({"value": "Jazz", "songCount": 120, "albumCount": 9})

        assert genre.name == "Jazz"
        assert genre.album_count == 9
        assert genre.track_count == 120


class TestMergeResults:
    def test_order_and_sizes(self):
        search = {
            "album": [{"id": "al1", "name": "Foo Bar", "artist": "X", "songCount": 10}],
            "artist": [{"id": "ar1", "name": "Foo Bar Band", "albumCount": 3}],
            "song": [{"id": "t1", "title": "Foo Bar Song", "artist": "Y", "duration": 200}],
        }

        results = merge_results(
            search,
            [{"id": "p1", "name": "foo bar mix", "songCount": 7}],
            [{"value": "Foo Bar Core", "albumCount": 4, "songCount": 40}],
        )

        assert [r.type for r in results] == [
            ContentType.ALBUM, ContentType.ARTIST, ContentType.TRACK, ContentType.PLAYLIST, ContentType.GENRE,
        ]
        assert [r.size for r in results] == [10, 3, 200, 7, 4]
        assert results[0].artist_name == "X"
        assert results[1].artist_name == ""
        assert results[4].id == "Foo Bar Core"
