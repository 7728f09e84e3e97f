"""Tests for JellyfinClient.

The requests.Session is mocked; responses are real requests.Response objects.
"""

import json
from typing import Any

import pytest
import requests
from pytest_mock import MockerFixture

from mediaprovider.jellyfin.client import JellyfinClient
from mediaprovider.jellyfin.exceptions import (
    JellyfinAuthenticationError,
    JellyfinError,
    JellyfinNotFoundError,
)
from mediaprovider.jellyfin.models import (
    SORT_BY_COMMUNITY_RATING,
    SORT_DESC,
    Filter,
    JellyfinConfig,
    Paging,
    QueryOpts,
    Sort,
)


def make_response(status_code: int = 200, body: Any = None, content: bytes = b"") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response._content = json.dumps(body).encode() if body is not None else content
    return response


@pytest.fixture
def client(mocker: MockerFixture) -> JellyfinClient:
    """Logged-in JellyfinClient whose session is a mock."""
    config = JellyfinConfig(url="https://jf.example.com", username="john", password="secret")
    client = JellyfinClient(config)
    client.session = mocker.MagicMock(spec=requests.Session)
    client.session.headers = {}
    client.user_id = "u1"
    client.user_name = "john"
    client.token = "tok"
    return client


def last_request(client: JellyfinClient):
    call = client.session.request.call_args
    return call.args[0], call.args[1], call.kwargs


class TestLogin:
    def test_login_sets_user_and_token(self, client: JellyfinClient):
        client.user_id = client.user_name = client.token = None
        client.session.request.return_value = make_response(
            200, {"AccessToken": "abc", "User": {"Id": "u9", "Name": "John"}}
        )

        assert client.login() is True

        method, url, kwargs = last_request(client)
        assert method == "POST"
        assert url == "https://jf.example.com/Users/AuthenticateByName"
        assert kwargs["json"] == {"Username": "john", "Pw": "secret"}
        assert client.user_id == "u9"
        assert client.logged_in_user() == "John"
        assert 'Token="abc"' in client.session.headers["X-Emby-Authorization"]

    def test_login_rejected(self, client: JellyfinClient):
        client.session.request.return_value = make_response(401, content=b"Invalid user")

        with pytest.raises(JellyfinAuthenticationError):
            client.login()

    def test_requires_login_for_user_paths(self, client: JellyfinClient):
        client.user_id = None

        with pytest.raises(JellyfinAuthenticationError):
            client.get_album("al1")


class TestErrors:
    def test_not_found(self, client: JellyfinClient):
        client.session.request.return_value = make_response(404, content=b"")

        with pytest.raises(JellyfinNotFoundError) as exc_info:
            client.get_song("missing")

        assert exc_info.value.status_code == 404

    def test_other_status(self, client: JellyfinClient):
        client.session.request.return_value = make_response(500, content=b"boom")

        with pytest.raises(JellyfinError):
            client.get_playlists()


class TestQueries:
    def test_songs_query_params(self, client: JellyfinClient):
        client.session.request.return_value = make_response(200, {"Items": [{"Id": "t1"}]})
        opts = QueryOpts(
            filter=Filter(artist_id="ar1", genres=["Jazz", "Blues"]),
            sort=Sort(field=SORT_BY_COMMUNITY_RATING, mode=SORT_DESC),
            paging=Paging(limit=5),
        )

        songs = client.get_songs(opts)

        _, url, kwargs = last_request(client)
        params = kwargs["params"]
        assert songs == [{"Id": "t1"}]
        assert url == "https://jf.example.com/Users/u1/Items"
        assert params["IncludeItemTypes"] == "Audio"
        assert params["ArtistIds"] == "ar1"
        assert params["Genres"] == "Jazz|Blues"
        assert params["SortBy"] == "CommunityRating"
        assert params["SortOrder"] == "Descending"
        assert params["Limit"] == "5"

    def test_albums_filter_by_album_artist(self, client: JellyfinClient):
        client.session.request.return_value = make_response(200, {"Items": []})

        client.get_albums(QueryOpts(filter=Filter(artist_id="ar1", favorite=True)))

        params = last_request(client)[2]["params"]
        assert params["AlbumArtistIds"] == "ar1"
        assert params["IsFavorite"] == "true"
        assert "ArtistIds" not in params

    def test_search_returns_three_categories(self, client: JellyfinClient):
        client.session.request.side_effect = [
            make_response(200, {"Items": [{"Id": "ar1"}]}),
            make_response(200, {"Items": [{"Id": "al1"}]}),
            make_response(200, {"Items": [{"Id": "t1"}]}),
        ]

        result = client.search("miles", 10)

        assert result == {"albums": [{"Id": "al1"}], "artists": [{"Id": "ar1"}], "songs": [{"Id": "t1"}]}

    def test_search_with_zero_limit_returns_nothing(self, client: JellyfinClient):
        result = client.search("foo", 0)

        assert result == {"albums": [], "artists": [], "songs": []}
        client.session.request.assert_not_called()

    def test_search_limit_sent_for_every_category(self, client: JellyfinClient):
        client.session.request.return_value = make_response(200, {"Items": []})

        client.search("foo", 1)

        for call in client.session.request.call_args_list:
            assert str(call.kwargs["params"]["Limit"]) == "1"

    def test_genres(self, client: JellyfinClient):
        client.session.request.return_value = make_response(200, {"Items": [{"Name": "Jazz", "Id": "g1"}]})

        assert client.get_genres(Paging()) == [{"Name": "Jazz", "Id": "g1"}]
        assert last_request(client)[1] == "https://jf.example.com/MusicGenres"


class TestPlaylists:
    def test_remove_songs_by_entry_id(self, client: JellyfinClient):
        client.session.request.return_value = make_response(204)

        client.remove_songs_from_playlist("p1", ["e1", "e2"])

        method, url, kwargs = last_request(client)
        assert method == "DELETE"
        assert url == "https://jf.example.com/Playlists/p1/Items"
        assert kwargs["params"] == {"EntryIds": "e1,e2"}

    def test_empty_id_lists_send_nothing(self, client: JellyfinClient):
        client.remove_songs_from_playlist("p1", [])
        client.add_songs_to_playlist("p1", [])

        client.session.request.assert_not_called()

    def test_add_songs(self, client: JellyfinClient):
        client.session.request.return_value = make_response(204)

        client.add_songs_to_playlist("p1", ["t1", "t2"])

        method, _, kwargs = last_request(client)
        assert method == "POST"
        assert kwargs["params"]["Ids"] == "t1,t2"

    def test_update_metadata_posts_item_back(self, client: JellyfinClient):
        client.session.request.side_effect = [
            make_response(200, {"Id": "p1", "Name": "Old", "Overview": ""}),
            make_response(204),
        ]

        client.update_playlist_metadata("p1", "New", "Desc")

        method, url, kwargs = last_request(client)
        assert method == "POST"
        assert url == "https://jf.example.com/Items/p1"
        assert kwargs["json"] == {"Id": "p1", "Name": "New", "Overview": "Desc"}


class TestUserData:
    @pytest.mark.parametrize("favorite,method", [(True, "POST"), (False, "DELETE")])
    def test_set_favorite(self, client: JellyfinClient, favorite: bool, method: str):
        client.session.request.return_value = make_response(200, {"IsFavorite": favorite})

        client.set_favorite("t1", favorite)

        sent_method, url, _ = last_request(client)
        assert sent_method == method
        assert url == "https://jf.example.com/Users/u1/FavoriteItems/t1"


class TestMedia:
    def test_item_image(self, client: JellyfinClient):
        client.session.get.return_value = make_response(200, content=b"\xff\xd8")

        assert client.get_item_image("al1", "Primary", 300, 92) == b"\xff\xd8"
        params = client.session.get.call_args.kwargs["params"]
        assert params == {"quality": 92, "fillHeight": 300, "fillWidth": 300}

    def test_download_song_fetches_stream_url(self, client: JellyfinClient):
        client.session.get.return_value = make_response(200, content=b"OggS")

        assert client.download_song("t1") == b"OggS"
        assert client.session.get.call_args.args[0].startswith("https://jf.example.com/Audio/t1/universal?")

    def test_download_song_not_found(self, client: JellyfinClient):
        client.session.get.return_value = make_response(404, content=b"")

        with pytest.raises(JellyfinNotFoundError):
            client.download_song("missing")

    def test_stream_url(self, client: JellyfinClient):
        url = client.get_stream_url("t1")

        assert url.startswith("https://jf.example.com/Audio/t1/universal?")
        assert "api_key=tok" in url
        assert "UserId=u1" in url
