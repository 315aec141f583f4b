# JellySubChanger test scripts
from __future__ import annotations

import json
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
import responses

from conftest import SERVER, make_episode, sub
from core.jellyfin_client import ClientInfo, Credentials, authorization_header
from error_handling import NotAuthenticatedError

AUTH_RESULT = {
    "AccessToken": "tok123",
    "ServerId": "srv",
    "User": {"Id": "user1", "Name": "alice"},
}


def _query(call) -> dict:
    return parse_qs(urlsplit(call.request.url).query)


def test_authorization_header_with_and_without_token() -> None:
    info = ClientInfo(device_id="dev", client_name="Cli", device_name="Dev", version="1.2.3")

    assert authorization_header(info) == (
        'MediaBrowser Client="Cli", Device="Dev", DeviceId="dev", Version="1.2.3"'
    )
    assert authorization_header(info, "tok").endswith(', Token="tok"')


@responses.activate
def test_authenticate_returns_new_client_with_credentials(anon_client) -> None:
    responses.add(responses.POST, f"{SERVER}/Users/AuthenticateByName", json=AUTH_RESULT, status=200)

    client = anon_client.authenticate("alice", "secret")

    assert client is not anon_client
    assert anon_client.credentials is None
    assert client.credentials == Credentials("tok123", "user1", "alice", "srv")
    assert client.address == anon_client.address
    assert client.session is anon_client.session

    request = responses.calls[0].request
    assert json.loads(request.body) == {"Username": "alice", "Pw": "secret"}
    assert 'DeviceId="test-device"' in request.headers["Authorization"]
    assert "Token=" not in request.headers["Authorization"]


@responses.activate
def test_authenticate_failure_propagates_untransformed(anon_client) -> None:
    responses.add(responses.POST, f"{SERVER}/Users/AuthenticateByName", json={}, status=401)

    with pytest.raises(requests.HTTPError) as exc:
        anon_client.authenticate("alice", "wrong")

    assert exc.value.response.status_code == 401


@responses.activate
def test_search_shows_passes_term_and_series_filter(auth_client) -> None:
    hints = [{"Id": "show1", "Name": "Frieren", "Type": "Series"}]
    responses.add(responses.GET, f"{SERVER}/Search/Hints", json={"SearchHints": hints, "TotalRecordCount": 1})

    assert auth_client.search_shows("frieren") == hints

    query = _query(responses.calls[0])
    assert query["searchTerm"] == ["frieren"]
    assert query["includeItemTypes"] == ["Series"]
    assert 'Token="tok123"' in responses.calls[0].request.headers["Authorization"]


@responses.activate
def test_search_shows_empty_result(auth_client) -> None:
    responses.add(responses.GET, f"{SERVER}/Search/Hints", json={"TotalRecordCount": 0})

    assert auth_client.search_shows("nothing") == []


@responses.activate
def test_list_seasons_and_episodes(auth_client) -> None:
    seasons = [{"Id": "s1", "Name": "Season 1", "Type": "Season"}]
    episodes = [{"Id": "e1", "Name": "Pilot", "Type": "Episode"}]
    responses.add(responses.GET, f"{SERVER}/Shows/show1/Seasons", json={"Items": seasons})
    responses.add(responses.GET, f"{SERVER}/Shows/show1/Episodes", json={"Items": episodes})

    assert auth_client.list_seasons("show1") == seasons
    assert auth_client.list_episodes("show1", "s1") == episodes
    assert _query(responses.calls[1])["seasonId"] == ["s1"]


@responses.activate
def test_get_episode_uses_user_scope(auth_client) -> None:
    episode = make_episode([sub("English", 2)])
    responses.add(responses.GET, f"{SERVER}/Users/user1/Items/ep1", json=episode)

    assert auth_client.get_episode("ep1") == episode


@responses.activate
def test_remote_errors_surface(auth_client) -> None:
    responses.add(responses.GET, f"{SERVER}/Users/user1/Items/missing", status=404)

    with pytest.raises(requests.HTTPError):
        auth_client.get_episode("missing")


@responses.activate
def test_playback_reports_post_payload(auth_client) -> None:
    responses.add(responses.POST, f"{SERVER}/Sessions/Playing/Progress", status=204)
    responses.add(responses.POST, f"{SERVER}/Sessions/Playing/Stopped", status=204)
    payload = {"ItemId": "ep1", "MediaSourceId": "ep1", "SubtitleStreamIndex": 3,
               "AudioStreamIndex": 1, "PositionTicks": 10}

    auth_client.report_playback_progress(payload)
    auth_client.report_playback_stopped(payload)

    assert [c.request.url for c in responses.calls] == [
        f"{SERVER}/Sessions/Playing/Progress",
        f"{SERVER}/Sessions/Playing/Stopped",
    ]
    assert all(json.loads(c.request.body) == payload for c in responses.calls)


def test_reads_require_credentials(anon_client) -> None:
    with pytest.raises(NotAuthenticatedError):
        anon_client.search_shows("x")
    with pytest.raises(NotAuthenticatedError):
        anon_client.get_episode("ep1")
    with pytest.raises(NotAuthenticatedError):
        anon_client.report_playback_stopped({})
