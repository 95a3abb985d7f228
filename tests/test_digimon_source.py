"""Tests for fetching and caching the remote Digimon catalogue."""

import asyncio

import httpx
import pytest

from app.config import settings
from app.db import digimon_source
from app.db.digimon_source import (
    DigimonSourceError,
    cache_info,
    clear_cache,
    fetch_digimons,
    load_digimons,
    parse_digimons,
    refresh_digimons,
)


class TestParseDigimons:
    """Payload validation."""

    def test_upstream_img_key_maps_to_image_url(self):
        (record,) = parse_digimons([{"name": "Agumon", "img": "https://x/agumon.jpg", "level": "Rookie"}])
        assert record.name == "Agumon"
        assert record.level == "Rookie"
        assert record.image_url == "https://x/agumon.jpg"

    def test_missing_image_becomes_none(self):
        records = parse_digimons([
            {"name": "Agumon", "level": "Rookie"},
            {"name": "Gabumon", "img": "  ", "level": "Rookie"},
        ])
        assert [r.image_url for r in records] == [None, None]

    def test_malformed_entries_are_skipped(self):
        records = parse_digimons([
            {"name": "Agumon", "img": "https://x/a.jpg", "level": "Rookie"},
            "not an object",
            {"img": "https://x/b.jpg", "level": "Rookie"},
            {"name": "", "img": "https://x/c.jpg", "level": "Rookie"},
            {"name": "Gabumon", "img": "https://x/d.jpg"},
            {"name": "Greymon", "img": "https://x/e.jpg", "level": "Champion"},
        ])
        assert [r.name for r in records] == ["Agumon", "Greymon"]

    def test_non_array_payload_raises(self):
        with pytest.raises(DigimonSourceError):
            parse_digimons({"error": "nope"})


class TestFetchDigimons:
    """HTTP behaviour against a fake upstream."""

    def test_fetch_returns_all_records(self, fake_api):
        records = asyncio.run(fetch_digimons())
        assert len(records) == 8
        assert records[0].name == "Koromon"
        assert fake_api.calls == 1

    def test_fetch_uses_given_client(self, fake_api):
        async def run():
            async with fake_api.client() as client:
                return await fetch_digimons(client)

        assert len(asyncio.run(run())) == 8

    def test_retries_server_errors(self, fake_api):
        fake_api.responses = [httpx.Response(503), httpx.Response(500)]
        records = asyncio.run(fetch_digimons())
        assert len(records) == 8
        assert fake_api.calls == 3

    def test_retries_timeouts_and_rate_limits(self, fake_api):
        fake_api.responses = [httpx.ReadTimeout("timed out"), httpx.Response(429)]
        assert len(asyncio.run(fetch_digimons())) == 8
        assert fake_api.calls == 3

    def test_gives_up_after_retries(self, fake_api):
        fake_api.responses = [httpx.Response(502) for _ in range(settings.FETCH_RETRIES)]
        with pytest.raises(DigimonSourceError, match="after 3 attempts"):
            asyncio.run(fetch_digimons())
        assert fake_api.calls == settings.FETCH_RETRIES

    def test_client_error_is_not_retried(self, fake_api):
        fake_api.responses = [httpx.Response(404)]
        with pytest.raises(DigimonSourceError, match="HTTP error"):
            asyncio.run(fetch_digimons())
        assert fake_api.calls == 1

    def test_connection_error(self, fake_api):
        fake_api.responses = [httpx.ConnectError("connection refused")]
        with pytest.raises(DigimonSourceError):
            asyncio.run(fetch_digimons())

    def test_invalid_json(self, fake_api):
        fake_api.responses = [httpx.Response(200, text="<html>down</html>")]
        with pytest.raises(DigimonSourceError, match="Invalid JSON"):
            asyncio.run(fetch_digimons())


class TestLoadDigimons:
    """In-memory cache behaviour."""

    def test_fetches_once(self, fake_api):
        first = asyncio.run(load_digimons())
        second = asyncio.run(load_digimons())
        assert first is second
        assert fake_api.calls == 1
        assert cache_info()["count"] == 8
        assert cache_info()["fresh"] is True

    def test_concurrent_loads_share_one_fetch(self, fake_api):
        async def run():
            return await asyncio.gather(*(load_digimons() for _ in range(5)))

        results = asyncio.run(run())
        assert all(len(r) == 8 for r in results)
        assert fake_api.calls == 1

    def test_failure_is_not_cached(self, fake_api):
        fake_api.responses = [httpx.Response(404)]
        with pytest.raises(DigimonSourceError):
            asyncio.run(load_digimons())
        assert cache_info()["count"] == 0

        assert len(asyncio.run(load_digimons())) == 8
        assert fake_api.calls == 2

    def test_clear_cache_forces_refetch(self, fake_api):
        asyncio.run(load_digimons())
        clear_cache()
        asyncio.run(load_digimons())
        assert fake_api.calls == 2

    def test_stale_cache_is_refetched(self, fake_api, monkeypatch):
        asyncio.run(load_digimons())
        monkeypatch.setattr(digimon_source, "_loaded_at", digimon_source._loaded_at - settings.CACHE_TTL - 1)
        asyncio.run(load_digimons())
        assert fake_api.calls == 2

    def test_zero_ttl_never_expires(self, fake_api, monkeypatch):
        monkeypatch.setattr(settings, "CACHE_TTL", 0)
        asyncio.run(load_digimons())
        monkeypatch.setattr(digimon_source, "_loaded_at", digimon_source._loaded_at - 10**6)
        asyncio.run(load_digimons())
        assert fake_api.calls == 1


class TestRefreshDigimons:
    """Forced refetch keeps the old catalogue when it fails."""

    def test_refresh_replaces_catalogue(self, fake_api):
        asyncio.run(load_digimons())
        fake_api.payload = fake_api.payload[:2]
        assert len(asyncio.run(refresh_digimons())) == 2
        assert cache_info()["count"] == 2

    def test_failed_refresh_keeps_previous_catalogue(self, fake_api):
        before = asyncio.run(load_digimons())
        loaded_at = cache_info()["loaded_at"]
        fake_api.responses = [httpx.Response(404)]

        with pytest.raises(DigimonSourceError):
            asyncio.run(refresh_digimons())

        assert asyncio.run(load_digimons()) is before
        assert cache_info()["loaded_at"] == loaded_at
        assert fake_api.calls == 2
