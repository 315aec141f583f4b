# JellySubChanger test fixtures
from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from core.jellyfin_client import ClientInfo, Credentials, JellyfinClient  # noqa: E402

SERVER = "http://jf.local:8096"


def make_episode(streams, episode_id="ep1", sub_default=1, audio_default=0, position=123450000, **extra):
    episode = {
        "Id": episode_id,
        "Name": f"Episode {episode_id}",
        "Type": "Episode",
        "SeriesName": "Frieren",
        "ParentIndexNumber": 1,
        "IndexNumber": 1,
        "MediaSources": [{
            "Id": episode_id,
            "DefaultSubtitleStreamIndex": sub_default,
            "DefaultAudioStreamIndex": audio_default,
        }],
        "UserData": {"PlaybackPositionTicks": position},
        "MediaStreams": streams,
    }
    episode.update(extra)
    return episode


def sub(label, index):
    return {"Type": "Subtitle", "DisplayTitle": label, "Index": index, "Language": "eng", "Codec": "subrip"}


def aud(label, index):
    return {"Type": "Audio", "DisplayTitle": label, "Index": index, "Language": "jpn", "Codec": "aac"}


class FakeClient:
    """Stands in for JellyfinClient; records playback reports."""

    def __init__(self, episodes=None, season_episodes=None):
        self.episodes = episodes or {}
        self.season_episodes = season_episodes or []
        self.reports = []
        self.fail_on = None

    def get_episode(self, episode_id):
        return self.episodes[episode_id]

    def list_episodes(self, show_id, season_id):
        return self.season_episodes

    def report_playback_progress(self, payload):
        if self.fail_on == "progress":
            raise RuntimeError("progress failed")
        self.reports.append(("progress", dict(payload)))

    def report_playback_stopped(self, payload):
        if self.fail_on == "stopped":
            raise RuntimeError("stopped failed")
        self.reports.append(("stopped", dict(payload)))


@pytest.fixture()
def client_info() -> ClientInfo:
    return ClientInfo(device_id="test-device")


@pytest.fixture()
def anon_client(client_info) -> JellyfinClient:
    return JellyfinClient(SERVER, client_info)


@pytest.fixture()
def auth_client(client_info) -> JellyfinClient:
    credentials = Credentials(access_token="tok123", user_id="user1", user_name="alice", server_id="srv")
    return JellyfinClient(SERVER, client_info, credentials=credentials)
