"""Shared fixtures: a fake Digimon API and per-test state resets."""

import asyncio

import httpx
import pytest

from app.api.v1.endpoints.digimon import limiter
from app.config import settings
from app.db import digimon_source
from app.models.digimon import Digimon

SAMPLE_DIGIMON = [
    {"name": "Koromon", "img": "https://digimon.shadowsmith.com/img/koromon.jpg", "level": "In Training"},
    {"name": "Tsunomon", "img": "https://digimon.shadowsmith.com/img/tsunomon.jpg", "level": "In Training"},
    {"name": "Agumon", "img": "https://digimon.shadowsmith.com/img/agumon.jpg", "level": "Rookie"},
    {"name": "Gabumon", "img": "https://digimon.shadowsmith.com/img/gabumon.jpg", "level": "Rookie"},
    {"name": "Greymon", "img": "https://digimon.shadowsmith.com/img/greymon.jpg", "level": "Champion"},
    {"name": "Garurumon", "img": "https://digimon.shadowsmith.com/img/garurumon.jpg", "level": "Champion"},
    {"name": "MetalGreymon", "img": "https://digimon.shadowsmith.com/img/metalgreymon.jpg", "level": "Ultimate"},
    {"name": "WarGreymon", "img": "https://digimon.shadowsmith.com/img/wargreymon.jpg", "level": "Mega"},
]


class FakeDigimonApi:
    """httpx transport handler standing in for the Digimon API.

    Queued ``responses`` (httpx.Response objects or exceptions to raise) are
    served first; after that every request gets ``payload`` with HTTP 200.
    """

    def __init__(self, payload=None):
        self.payload = SAMPLE_DIGIMON if payload is None else payload
        self.responses: list = []
        self.calls = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.responses:
            queued = self.responses.pop(0)
            if isinstance(queued, Exception):
                raise queued
            return queued
        return httpx.Response(200, json=self.payload)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture(autouse=True)
def fake_api(monkeypatch):
    """Route all upstream traffic to a fake API and reset cached state."""
    api = FakeDigimonApi()
    monkeypatch.setattr(digimon_source, "_build_client", api.client)
    monkeypatch.setattr(digimon_source, "_lock", asyncio.Lock())
    monkeypatch.setattr(settings, "RETRY_BACKOFF", 0.0)
    monkeypatch.setattr(settings, "FETCH_RETRIES", 3)
    monkeypatch.setattr(settings, "CACHE_TTL", 3600)
    digimon_source.clear_cache()

    storage = getattr(limiter, "_storage", None)
    if storage is not None and hasattr(storage, "reset"):
        storage.reset()

    yield api
    digimon_source.clear_cache()


@pytest.fixture
def records() -> list[Digimon]:
    """The sample payload as validated Digimon records."""
    return [Digimon.model_validate(item) for item in SAMPLE_DIGIMON]
