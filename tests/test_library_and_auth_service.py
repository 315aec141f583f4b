# JellySubChanger test scripts
from __future__ import annotations

import pytest

from core import auth_service, library_service, server_service


def test_get_item_title_formats() -> None:
    episode = {"Type": "Episode", "Name": "Pilot", "SeriesName": "Show", "ParentIndexNumber": 2, "IndexNumber": 7}
    assert library_service.get_item_title(episode) == "Show S02E07 - Pilot"
    assert library_service.get_item_title({"Type": "Episode", "Name": "Special"}) == "Unknown Show S00E00 - Special"
    assert library_service.get_item_title({"Type": "Series", "Name": "Show", "ProductionYear": 2020}) == "Show (2020)"
    assert library_service.get_item_title({"Type": "Season", "Name": "Season 1"}) == "Season 1"
    assert library_service.get_item_title({"Id": "abc"}) == "abc"


def test_summarize_item_accepts_search_hint_item_id() -> None:
    hint = {"ItemId": "show1", "Name": "Show", "Type": "Series"}
    assert library_service.summarize_item(hint)["id"] == "show1"


def test_login_resolves_then_authenticates(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    class Resolved:
        def authenticate(self, username, password):
            calls.append(("authenticate", username, password))
            return "authenticated-client"

    def fake_resolve(url, client_info, timeout):
        calls.append(("resolve", url, client_info.device_id, timeout))
        return Resolved()

    monkeypatch.setattr(server_service, "resolve", fake_resolve)
    settings = {"device_id": "dev", "client_name": "", "device_name": "Box", "discovery_timeout": 3}

    assert auth_service.login("jf.local", "alice", "pw", settings) == "authenticated-client"
    assert calls == [("resolve", "jf.local", "dev", 3), ("authenticate", "alice", "pw")]


def test_build_client_info_falls_back_to_defaults() -> None:
    info = auth_service.build_client_info({"device_id": "dev", "client_name": "", "device_name": "Box"})

    assert info.device_id == "dev"
    assert info.client_name == "Jellyfin Subtitle Changer"
    assert info.device_name == "Box"
