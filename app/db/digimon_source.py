"""Data access layer for loading Digimon records from the remote Digimon API.

The catalogue is fetched once and kept in memory. ``CACHE_TTL`` bounds how long
a fetched catalogue is served before the next request refetches it; a failed
fetch is never cached.
"""

import asyncio
import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from app.config import settings
from app.models.digimon import Digimon

logger = logging.getLogger(__name__)


class DigimonSourceError(Exception):
    """Error fetching or parsing Digimon data from the remote API."""


# ---------------------------------------------------------------------------
# Module-level cache state
# ---------------------------------------------------------------------------
_records: tuple[Digimon, ...] | None = None
_loaded_at: float | None = None
_lock = asyncio.Lock()


def _build_client() -> httpx.AsyncClient:
    """Return a new HTTP client for the Digimon API."""
    return httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)


async def _get_json(client: httpx.AsyncClient, url: str) -> Any:
    """GET ``url`` with retry logic and return the decoded JSON body.

    Timeouts, 429 and 5xx responses are retried with exponential backoff.
    Any other failure raises :class:`DigimonSourceError` immediately.
    """
    last_error: Exception | None = None

    for attempt in range(settings.FETCH_RETRIES):
        if attempt:
            await asyncio.sleep(settings.RETRY_BACKOFF * 2 ** (attempt - 1))
        try:
            response = await client.get(url)

            if response.status_code == 429:
                logger.warning("Rate limited by %s, attempt %d", url, attempt + 1)
                last_error = DigimonSourceError("rate limited (HTTP 429)")
                continue

            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            logger.warning("Timeout fetching %s, attempt %d", url, attempt + 1)
            last_error = e

        except httpx.HTTPStatusError as e:
            if e.response.status_code >= 500:
                logger.warning(
                    "Server error %d from %s, attempt %d",
                    e.response.status_code,
                    url,
                    attempt + 1,
                )
                last_error = e
            else:
                raise DigimonSourceError(f"HTTP error: {e}") from e

        except httpx.HTTPError as e:
            raise DigimonSourceError(f"Request to {url} failed: {e}") from e

        except ValueError as e:
            raise DigimonSourceError(f"Invalid JSON from {url}: {e}") from e

    raise DigimonSourceError(
        f"Failed to fetch {url} after {settings.FETCH_RETRIES} attempts: {last_error}"
    )


def parse_digimons(raw: Any) -> tuple[Digimon, ...]:
    """Validate a decoded API payload into Digimon records.

    The payload must be a JSON array. Malformed entries are skipped with a
    warning rather than failing the whole load.
    """
    if not isinstance(raw, list):
        raise DigimonSourceError(
            f"Expected a JSON array of Digimon, got {type(raw).__name__}"
        )

    records = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning("Skipping entry %d: not an object", index)
            continue
        try:
            records.append(Digimon.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping entry %d (%r): %s", index, item.get("name"), e.errors()[0]["msg"])
    return tuple(records)


async def fetch_digimons(client: httpx.AsyncClient | None = None) -> tuple[Digimon, ...]:
    """Fetch all Digimon from the remote API, bypassing the cache."""
    url = settings.DIGIMON_API_URL
    if client is not None:
        raw = await _get_json(client, url)
    else:
        async with _build_client() as own_client:
            raw = await _get_json(own_client, url)

    records = parse_digimons(raw)
    logger.info("Fetched %d Digimon from %s", len(records), url)
    return records


def _is_fresh() -> bool:
    if _records is None or _loaded_at is None:
        return False
    if settings.CACHE_TTL <= 0:
        return True
    return time.monotonic() - _loaded_at < settings.CACHE_TTL


async def load_digimons() -> tuple[Digimon, ...]:
    """Return the cached Digimon catalogue, fetching it when missing or stale."""
    if _is_fresh():
        return _records

    async with _lock:
        # Another request may have filled the cache while we waited.
        if _is_fresh():
            return _records
        return await _fetch_and_store()


async def refresh_digimons() -> tuple[Digimon, ...]:
    """Refetch the catalogue, replacing the cache only when the fetch succeeds.

    On failure the previous catalogue keeps being served and the error is
    re-raised.
    """
    async with _lock:
        return await _fetch_and_store()


async def _fetch_and_store() -> tuple[Digimon, ...]:
    """Fetch and cache the catalogue; callers must hold ``_lock``."""
    global _records, _loaded_at

    try:
        records = await fetch_digimons()
    except DigimonSourceError as e:
        logger.error("Error fetching Digimon: %s", e)
        raise
    _records = records
    _loaded_at = time.monotonic()
    return _records


def clear_cache() -> None:
    """Clear the Digimon catalogue cache."""
    global _records, _loaded_at
    _records = None
    _loaded_at = None


def cache_info() -> dict:
    """Return the cached record count and load time (monotonic seconds)."""
    return {
        "count": len(_records) if _records is not None else 0,
        "loaded_at": _loaded_at,
        "fresh": _is_fresh(),
    }
