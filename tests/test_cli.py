# JellySubChanger test scripts
from __future__ import annotations

from pathlib import Path

import pytest
import requests

import jelly_subchanger
from conftest import FakeClient, make_episode, sub
from core import auth_service
from core.track_service import StreamDescriptor
from error_handling import NoServersFoundError


class CliFakeClient(FakeClient):
    def search_shows(self, term):
        return [{"Id": "show1", "Name": "Frieren", "Type": "Series"}]


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(jelly_subchanger.PASSWORD_ENV, raising=False)
    monkeypatch.setattr(jelly_subchanger, "setup_logging", lambda debug=False: str(tmp_path / "test.log"))
    return tmp_path


@pytest.fixture()
def fake_client() -> CliFakeClient:
    ep1 = make_episode([sub("English", 2)], episode_id="ep1")
    ep2 = make_episode([sub("English", 5)], episode_id="ep2", IndexNumber=2)
    return CliFakeClient(episodes={"ep1": ep1, "ep2": ep2}, season_episodes=[ep1, ep2])


@pytest.fixture()
def login_calls(monkeypatch: pytest.MonkeyPatch, fake_client):
    calls = []

    def fake_login(url, username, password, settings):
        calls.append((url, username, password))
        return fake_client

    monkeypatch.setattr(auth_service, "login", fake_login)
    return calls


BASE = ["--server", "jf.local", "--username", "alice", "--password", "pw"]


def test_search_prints_shows(workdir, login_calls, capsys) -> None:
    assert jelly_subchanger.main(BASE + ["--search", "frieren"]) == 0

    out = capsys.readouterr().out
    assert "Frieren (ID: show1)" in out
    assert login_calls == [("jf.local", "alice", "pw")]


def test_set_season_defaults(workdir, login_calls, fake_client, capsys) -> None:
    rc = jelly_subchanger.main(BASE + [
        "--show", "show1", "--season", "s1", "--set-defaults",
        "--subtitle-label", "English", "--subtitle-index", "2",
    ])

    assert rc == 0
    out = capsys.readouterr().out
    assert "1/2 episode(s) changed" in out
    assert len(fake_client.reports) == 2


def test_set_episode_defaults(workdir, login_calls, fake_client) -> None:
    rc = jelly_subchanger.main(BASE + [
        "--episode", "ep2", "--set-defaults", "--subtitle-label", "English", "--subtitle-index", "5",
    ])

    assert rc == 0
    assert fake_client.reports[0][1]["SubtitleStreamIndex"] == 5


def test_list_streams(workdir, login_calls, capsys) -> None:
    assert jelly_subchanger.main(BASE + ["--episode", "ep1", "--list-streams"]) == 0
    assert "Index: 2 | English" in capsys.readouterr().out


def test_password_from_environment(workdir, login_calls, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(jelly_subchanger.PASSWORD_ENV, "envpw")

    jelly_subchanger.main(["--server", "jf.local", "--username", "alice", "--search", "x"])

    assert login_calls[0][2] == "envpw"


def test_set_defaults_needs_a_stream(workdir, login_calls) -> None:
    with pytest.raises(SystemExit) as exc:
        jelly_subchanger.main(BASE + ["--episode", "ep1", "--set-defaults"])

    assert exc.value.code == 2
    assert login_calls == []


def test_half_specified_stream_is_rejected(workdir, login_calls) -> None:
    with pytest.raises(SystemExit):
        jelly_subchanger.main(BASE + ["--episode", "ep1", "--set-defaults", "--subtitle-label", "English"])


def test_list_seasons_needs_show(workdir, login_calls) -> None:
    with pytest.raises(SystemExit):
        jelly_subchanger.main(BASE + ["--list-seasons"])


def test_remote_errors_exit_nonzero(workdir, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    def no_servers(url, username, password, settings):
        raise NoServersFoundError(url)

    monkeypatch.setattr(auth_service, "login", no_servers)

    assert jelly_subchanger.main(BASE + ["--search", "x"]) == 1
    assert "No available servers found" in capsys.readouterr().err


def test_auth_failure_exit_nonzero(workdir, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    def rejected(url, username, password, settings):
        response = requests.Response()
        response.status_code = 401
        raise requests.HTTPError("401", response=response)

    monkeypatch.setattr(auth_service, "login", rejected)

    assert jelly_subchanger.main(BASE + ["--search", "x"]) == 1
    assert "Authentication failed" in capsys.readouterr().err


def test_remember_saves_server_and_username(workdir, login_calls) -> None:
    jelly_subchanger.main(BASE + ["--remember", "--search", "x"])

    text = (workdir / "config.ini").read_text()
    assert "jf.local" in text
    assert "alice" in text
    assert "= pw" not in text


def test_descriptor_from_args() -> None:
    assert jelly_subchanger.descriptor_from_args(None, None) is None
    assert jelly_subchanger.descriptor_from_args("English", 2) == StreamDescriptor("English", 2)
    with pytest.raises(ValueError):
        jelly_subchanger.descriptor_from_args(None, 2)
