"""Digimon API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings
from app.models.digimon import (
    DigimonDetailResponse,
    DigimonListResponse,
    ErrorResponse,
    LevelListResponse,
    RefreshResponse,
)
from app.services.digimon_service import (
    ALL_LEVELS,
    get_digimon_by_name,
    get_levels,
    refresh_catalog,
    search_digimons,
)

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

_UPSTREAM_ERROR = {503: {"model": ErrorResponse, "description": "Digimon API unavailable"}}


@router.get(
    "/digimon",
    response_model=DigimonListResponse,
    responses={429: {"model": ErrorResponse}, **_UPSTREAM_ERROR},
    summary="Search Digimon",
    description="Retrieve all Digimon, optionally filtered by name substring and level.",
)
@limiter.limit(settings.RATE_LIMIT)
async def list_digimon(
    request: Request,
    search: str = Query("", max_length=100, description="Case-insensitive name substring"),
    level: str = Query(ALL_LEVELS, description="Exact level, or 'all'"),
) -> DigimonListResponse:
    """Get Digimon matching the name and level filters."""
    result = await search_digimons(search, level)
    logger.info(
        "Returning %d of %d Digimon (search=%r, level=%r)",
        result.count,
        result.total,
        result.search,
        result.level,
    )
    return DigimonListResponse(
        data=result.records,
        count=result.count,
        total=result.total,
        search=result.search,
        level=result.level,
    )


@router.get(
    "/digimon/levels",
    response_model=LevelListResponse,
    responses={429: {"model": ErrorResponse}, **_UPSTREAM_ERROR},
    summary="List Digimon levels",
    description="Distinct level categories present in the catalogue, in first-seen order.",
)
@limiter.limit(settings.RATE_LIMIT)
async def list_levels(request: Request) -> LevelListResponse:
    """Get the distinct level categories."""
    levels = await get_levels()
    return LevelListResponse(data=levels, count=len(levels))


@router.post(
    "/digimon/refresh",
    response_model=RefreshResponse,
    responses={429: {"model": ErrorResponse}, **_UPSTREAM_ERROR},
    summary="Refresh the catalogue",
    description="Fetch the catalogue again from the Digimon API. The cached catalogue is kept if the fetch fails.",
)
@limiter.limit(settings.RATE_LIMIT)
async def refresh(request: Request) -> RefreshResponse:
    """Refetch the catalogue from the upstream API."""
    records = await refresh_catalog()
    logger.info("Catalogue refreshed: %d Digimon", len(records))
    return RefreshResponse(total=len(records))


@router.get(
    "/digimon/{name}",
    response_model=DigimonDetailResponse,
    responses={404: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, **_UPSTREAM_ERROR},
    summary="Get Digimon by name",
    description="Retrieve a specific Digimon by name (case-insensitive).",
)
@limiter.limit(settings.RATE_LIMIT)
async def digimon_by_name(
    request: Request,
    name: str,
) -> DigimonDetailResponse:
    """Get a specific Digimon by name."""
    digimon = await get_digimon_by_name(name)
    if digimon is None:
        raise HTTPException(status_code=404, detail=f"Digimon '{name}' not found")
    return DigimonDetailResponse(data=digimon)


@router.get(
    "/health",
    summary="Health check",
    description="Check that the API is running.",
)
@limiter.limit(settings.RATE_LIMIT)
async def health_check(request: Request) -> dict:
    """Health check endpoint, never touches the upstream API."""
    return {"status": "healthy"}
