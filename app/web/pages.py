"""Server-rendered explorer page."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from app.db.digimon_source import DigimonSourceError
from app.dependencies import get_locale
from app.services.digimon_service import ALL_LEVELS, build_filter_result, get_catalog, unique_levels
from app.web.render import render_page

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_SEARCH_LENGTH = 100


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def explorer_page(
    q: str = Query(""),
    level: str = Query(ALL_LEVELS),
    locale: str = Depends(get_locale),
) -> HTMLResponse:
    """Render the Digimon grid filtered by name and level."""
    q = q[:MAX_SEARCH_LENGTH]
    try:
        records = await get_catalog()
    except DigimonSourceError:
        logger.warning("Rendering explorer page without data")
        return HTMLResponse(render_page(locale, [], None, search=q.strip(), level=level))

    # Level options and grid come from the same snapshot.
    result = build_filter_result(records, q, level)
    return HTMLResponse(
        render_page(locale, unique_levels(records), result, search=result.search, level=result.level)
    )
