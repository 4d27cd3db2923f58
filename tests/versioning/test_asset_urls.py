# This file tests public asset URL construction.
# It exists to keep slash handling and the version query parameter consistent.
# A missing base URL must degrade to a local path rather than fail.
# These helpers are shared by version resolution and the purge client.

from __future__ import annotations

from src.versioning.asset_urls import build_asset_url, clean_object_path, local_fallback_url


def test_joins_base_and_path_without_double_slashes() -> None:
    assert build_asset_url("/img/a.png", base_url="https://cdn.example.com/") == "https://cdn.example.com/img/a.png"


def test_appends_encoded_version() -> None:
    url = build_asset_url("a.png", base_url="https://cdn.example.com", version="1.0.0+build 7")

    assert url == "https://cdn.example.com/a.png?v=1.0.0%2Bbuild+7"


def test_missing_base_url_falls_back_to_local_path() -> None:
    assert build_asset_url("img/a.png", base_url=None, version="3") == "/img/a.png?v=3"


def test_use_local_ignores_base_url() -> None:
    assert build_asset_url("a.png", base_url="https://cdn.example.com", use_local=True) == "/a.png"


def test_path_helpers() -> None:
    assert clean_object_path("/x/y.png") == "x/y.png"
    assert clean_object_path("x/y.png") == "x/y.png"
    assert local_fallback_url("x/y.png") == "/x/y.png"
