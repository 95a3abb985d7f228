"""Shared FastAPI dependencies."""

from fastapi import Header

from app.config import settings

SUPPORTED_LOCALES = {"id", "en"}


def resolve_locale(accept_language: str | None) -> str:
    """Pick a supported locale from an Accept-Language value."""
    if accept_language:
        lang = accept_language.strip().split(",")[0].split(";")[0].split("-")[0].lower()
        if lang in SUPPORTED_LOCALES:
            return lang
    return settings.DEFAULT_LOCALE if settings.DEFAULT_LOCALE in SUPPORTED_LOCALES else "id"


async def get_locale(accept_language: str | None = Header(None)) -> str:
    """Extract locale from Accept-Language header, defaulting to Indonesian."""
    return resolve_locale(accept_language)
