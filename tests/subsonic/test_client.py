"""Tests for SubsonicClient.

httpx.Client is mocked; responses are real httpx.Response objects so status
and JSON handling run unmodified. No network requests are made.
"""

from typing import Any, Dict

import httpx
import pytest
from pytest_mock import MockerFixture

from mediaprovider.subsonic.client import SubsonicClient
from mediaprovider.subsonic.exceptions import (
    SubsonicAuthenticationError,
    SubsonicError,
    SubsonicNotFoundError,
)
from mediaprovider.subsonic.models import SubsonicConfig


@pytest.fixture
def client(mocker: MockerFixture) -> SubsonicClient:
    """SubsonicClient with a mocked httpx.Client."""
    config = SubsonicConfig(
        url="https://music.example.com",
        username="testuser",
        password="testpass",
        client_name="mediaprovider-test",
    )
    mocker.patch("httpx.Client", return_value=mocker.MagicMock(spec=httpx.Client))
    return SubsonicClient(config)


def ok(payload: Dict[str, Any]) -> httpx.Response:
    """A successful subsonic-response envelope around payload."""
    body = {"subsonic-response": {"status": "ok", "version": "1.16.1", **payload}}
    return httpx.Response(200, json=body, request=httpx.Request("GET", "https://music.example.com/rest"))


def failed(code: int, message: str) -> httpx.Response:
    body = {"subsonic-response": {"status": "failed", "error": {"code": code, "message": message}}}
    return httpx.Response(200, json=body, request=httpx.Request("GET", "https://music.example.com/rest"))


def sent_params(client: SubsonicClient) -> Dict[str, Any]:
    return client.client.get.call_args.kwargs["params"]


class TestRequests:
    def test_ping_sends_auth_and_version(self, client: SubsonicClient):
        client.client.get.return_value = ok({})

        assert client.ping() is True

        url = client.client.get.call_args.args[0]
        params = sent_params(client)
        assert url == "https://music.example.com/rest/ping"
        assert {"u", "t", "s"} <= set(params)
        assert params["c"] == "mediaprovider-test"
        assert params["v"] == "1.16.1"
        assert params["f"] == "json"

    def test_ping_detects_opensubsonic(self, client: SubsonicClient):
        client.client.get.return_value = ok({"openSubsonic": True, "serverVersion": "0.52"})

        client.ping()

        assert client.opensubsonic is True
        assert client.opensubsonic_version == "0.52"

    def test_list_params_are_repeated(self, client: SubsonicClient):
        client.client.get.return_value = ok({})

        client.star(ids=["t1", "t2"], album_ids=["al1"])

        params = sent_params(client)
        assert params["id"] == ["t1", "t2"]
        assert params["albumId"] == ["al1"]
        assert "artistId" not in params

    def test_bool_params(self, client: SubsonicClient):
        client.client.get.return_value = ok({})

        client.update_playlist("p1", name="Mix", public=False)

        params = sent_params(client)
        assert params["public"] == "false"
        assert params["playlistId"] == "p1"
        assert "songIdToAdd" not in params


class TestErrors:
    def test_authentication_error(self, client: SubsonicClient):
        client.client.get.return_value = failed(40, "Wrong username or password")

        with pytest.raises(SubsonicAuthenticationError) as exc_info:
            client.ping()

        assert exc_info.value.code == 40

    def test_not_found(self, client: SubsonicClient):
        client.client.get.return_value = failed(70, "Album not found")

        with pytest.raises(SubsonicNotFoundError):
            client.get_album("missing")

    def test_unknown_code_is_base_error(self, client: SubsonicClient):
        client.client.get.return_value = failed(0, "Generic error")

        with pytest.raises(SubsonicError):
            client.get_genres()

    def test_http_error(self, client: SubsonicClient):
        client.client.get.return_value = httpx.Response(
            500, request=httpx.Request("GET", "https://music.example.com/rest/getGenres")
        )

        with pytest.raises(httpx.HTTPStatusError):
            client.get_genres()


class TestResponses:
    def test_get_album_normalizes_single_song(self, client: SubsonicClient):
        client.client.get.return_value = ok({"album": {"id": "al1", "name": "A", "song": {"id": "t1"}}})

        album = client.get_album("al1")

        assert album["song"] == [{"id": "t1"}]

    def test_get_artists_flattens_index(self, client: SubsonicClient):
        client.client.get.return_value = ok({
            "artists": {"index": [
                {"name": "A", "artist": [{"id": "ar1"}, {"id": "ar2"}]},
                {"name": "B", "artist": {"id": "ar3"}},
            ]}
        })

        assert [a["id"] for a in client.get_artists()] == ["ar1", "ar2", "ar3"]

    def test_search3_empty_result(self, client: SubsonicClient):
        client.client.get.return_value = ok({"searchResult3": {}})

        assert client.search3("nothing") == {"artist": [], "album": [], "song": []}

    def test_get_starred2(self, client: SubsonicClient):
        client.client.get.return_value = ok({"starred2": {"song": [{"id": "t1"}], "album": {"id": "al1"}}})

        starred = client.get_starred2()

        assert starred == {"artist": [], "album": [{"id": "al1"}], "song": [{"id": "t1"}]}

    def test_get_genres(self, client: SubsonicClient):
        client.client.get.return_value = ok({
            "genres": {"genre": [{"value": "Jazz", "songCount": 10, "albumCount": 2}]}
        })

        assert client.get_genres()[0]["value"] == "Jazz"


class TestPlaylists:
    def test_create_requires_name_or_id(self, client: SubsonicClient):
        with pytest.raises(ValueError):
            client.create_playlist(["t1"])
        with pytest.raises(ValueError):
            client.create_playlist(["t1"], name="Mix", playlist_id="p1")

    def test_replace_songs_by_id(self, client: SubsonicClient):
        client.client.get.return_value = ok({"playlist": {"id": "p1"}})

        client.create_playlist(["t1", "t2"], playlist_id="p1")

        params = sent_params(client)
        assert params["playlistId"] == "p1"
        assert params["songId"] == ["t1", "t2"]
        assert "name" not in params


class TestMedia:
    def test_cover_art_bytes(self, client: SubsonicClient):
        client.client.get.return_value = httpx.Response(
            200,
            content=b"\x89PNG",
            headers={"content-type": "image/png"},
            request=httpx.Request("GET", "https://music.example.com/rest/getCoverArt"),
        )

        assert client.get_cover_art("al-1", size=300) == b"\x89PNG"
        assert sent_params(client)["size"] == "300"

    def test_cover_art_error_envelope(self, client: SubsonicClient):
        client.client.get.return_value = failed(70, "Cover art not found")

        with pytest.raises(SubsonicNotFoundError):
            client.get_cover_art("missing")

    def test_download_track(self, client: SubsonicClient):
        client.client.get.return_value = httpx.Response(
            200,
            content=b"fLaC",
            headers={"content-type": "audio/flac"},
            request=httpx.Request("GET", "https://music.example.com/rest/download"),
        )

        assert client.download_track("t1") == b"fLaC"
        assert client.client.get.call_args.args[0] == "https://music.example.com/rest/download"
        assert sent_params(client)["id"] == "t1"

    def test_download_track_error_envelope(self, client: SubsonicClient):
        client.client.get.return_value = failed(70, "Song not found")

        with pytest.raises(SubsonicNotFoundError):
            client.download_track("missing")

    def test_stream_url(self, client: SubsonicClient):
        url = client.get_stream_url("12345")

        assert url.startswith("https://music.example.com/rest/stream?")
        assert "id=12345" in url
        assert "testpass" not in url


class TestRateLimit:
    def test_sleeps_when_window_is_full(self, mocker: MockerFixture):
        mocker.patch("httpx.Client", return_value=mocker.MagicMock(spec=httpx.Client))
        config = SubsonicConfig(url="https://music.example.com", username="u", password="p", rate_limit=2)
        client = SubsonicClient(config)
        mocker.patch("mediaprovider.subsonic.client.time.time", return_value=100.0)
        sleep = mocker.patch("mediaprovider.subsonic.client.time.sleep")

        client._apply_rate_limit()
        client._apply_rate_limit()
        sleep.assert_not_called()

        client._apply_rate_limit()
        sleep.assert_called_once_with(1.0)
