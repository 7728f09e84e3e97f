"""Tests for Jellyfin record adapters."""

from mediaprovider.jellyfin.transform import (
    PLAYLIST_TICKS_PER_SECOND,
    TICKS_PER_SECOND,
    merge_results,
    ticks_to_seconds,
    to_album,
    to_artist,
    to_genre,
    to_playlist,
    to_track,
)
from mediaprovider.models import GENRE_COUNT_UNSUPPORTED, ContentType

AUDIO = {
    "Id": "t1",
    "Name": "So What",
    "Album": "Kind of Blue",
    "AlbumId": "al1",
    "RunTimeTicks": 5_620_000_000,
    "IndexNumber": 1,
    "ParentIndexNumber": 1,
    "ProductionYear": 1959,
    "Genres": ["Jazz", "Modal"],
    "ArtistItems": [{"Id": "ar1", "Name": "Miles Davis"}, {"Id": "ar2", "Name": "John Coltrane"}],
    "UserData": {"IsFavorite": True, "PlayCount": 3},
    "MediaSources": [{"Size": 9000000, "Path": "/music/01.flac", "Bitrate": 320000}],
}


class TestTicks:
    def test_factors(self):
        assert TICKS_PER_SECOND == 10_000_000
        assert PLAYLIST_TICKS_PER_SECOND == 1_000_000

    def test_conversion(self):
        assert ticks_to_seconds(1_800_000_000) == 180
        assert ticks_to_seconds(180_000_000, PLAYLIST_TICKS_PER_SECOND) == 180
        assert ticks_to_seconds(None) == 0


class TestTrack:
    def test_field_mapping(self):
        track = to_track(AUDIO)

        assert track.duration == 562
        assert track.parent_id == "al1"
        assert track.album_id == "al1"
        assert track.genre == "Jazz"
        assert track.favorite is True
        assert track.play_count == 3
        assert track.size == 9000000
        assert track.file_path == "/music/01.flac"
        assert track.bit_rate == 320

    def test_artists_stay_aligned(self):
        track = to_track(AUDIO)

        assert track.artist_ids == ["ar1", "ar2"]
        assert track.artist_names == ["Miles Davis", "John Coltrane"]

    def test_cover_art_falls_back_to_album(self):
        assert to_track(AUDIO).cover_art_id == "al1"

    def test_cover_art_uses_own_image(self):
        item = {**AUDIO, "ImageTags": {"Primary": "tag"}}

        assert to_track(item).cover_art_id == "t1"

    def test_sparse_item(self):
        track = to_track({"Id": "t2"})

        assert track.genre == ""
        assert track.artist_ids == []
        assert track.favorite is False
        assert track.bit_rate == 0

    def test_none_maps_to_none(self):
        assert to_track(None) is None
        assert to_album(None) is None
        assert to_playlist(None, "john") is None


class TestOtherEntities:
    def test_album(self):
        album = to_album({
            "Id": "al1",
            "Name": "Kind of Blue",
            "RunTimeTicks": 27_500_000_000,
            "AlbumArtists": [{"Id": "ar1", "Name": "Miles Davis"}],
            "ChildCount": 5,
            "Genres": ["Jazz"],
        })

        assert album.cover_art_id == "al1"
        assert album.duration == 2750
        assert album.artist_names == ["Miles Davis"]
        assert album.track_count == 5

    def test_artist(self):
        assert to_artist({"Id": "ar1", "Name": "Miles", "AlbumCount": 4}).album_count == 4

    def test_playlist_uses_coarser_ticks(self):
        playlist = to_playlist({"Id": "p1", "Name": "Mix", "RunTimeTicks": 600_000_000, "ChildCount": 3}, "john")

        assert playlist.duration == 600
        assert playlist.public is False
        assert playlist.owner == "john"
        assert playlist.track_count == 3

    def test_genre_counts_unsupported(self):
        genre = to_genre({"Name": "Jazz", "Id": "g1"})

        assert genre.name == "Jazz"
        assert genre.album_count == GENRE_COUNT_UNSUPPORTED
        assert genre.track_count == GENRE_COUNT_UNSUPPORTED


class TestMergeResults:
    def test_order_and_sizes(self):
        search = {
            "albums": [{"Id": "al1", "Name": "Foo", "ChildCount": 8, "AlbumArtists": [{"Id": "a", "Name": "A"}]}],
            "artists": [{"Id": "ar1", "Name": "Foo Band", "AlbumCount": 2}],
            "songs": [AUDIO],
        }

        results = merge_results(search, [{"Id": "p1", "Name": "foo mix", "ChildCount": 4}], [{"Name": "Foo Core"}])

        assert [r.type for r in results] == [
            ContentType.ALBUM, ContentType.ARTIST, ContentType.TRACK, ContentType.PLAYLIST, ContentType.GENRE,
        ]
        assert [r.size for r in results] == [8, 2, 562, 4, GENRE_COUNT_UNSUPPORTED]
        assert results[2].artist_name == "Miles Davis, John Coltrane"
        assert results[4].id == "Foo Core"
