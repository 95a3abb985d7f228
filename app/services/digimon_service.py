"""Business logic for searching and filtering Digimon."""

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from app.db.digimon_source import load_digimons, refresh_digimons
from app.models.digimon import Digimon

logger = logging.getLogger(__name__)

ALL_LEVELS = "all"


@dataclass(frozen=True)
class FilterResult:
    """Records that survived filtering, plus the filters that produced them."""

    records: list[Digimon]
    total: int
    search: str = ""
    level: str = ALL_LEVELS

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        """True when the catalogue has records but none matched."""
        return self.total > 0 and not self.records


def _normalize_search(search: str | None) -> str:
    return (search or "").strip()


def _normalize_level(level: str | None) -> str:
    return level or ALL_LEVELS


def filter_by_name(records: Iterable[Digimon], search: str | None) -> list[Digimon]:
    """Keep records whose name contains ``search`` (case-insensitive)."""
    term = _normalize_search(search).lower()
    if not term:
        return list(records)
    return [d for d in records if term in d.name.lower()]


def filter_by_level(records: Iterable[Digimon], level: str | None) -> list[Digimon]:
    """Keep records whose level equals ``level``; ``all`` keeps everything."""
    level = _normalize_level(level)
    if level == ALL_LEVELS:
        return list(records)
    return [d for d in records if d.level == level]


def filter_digimons(
    records: Sequence[Digimon],
    search: str | None = None,
    level: str | None = None,
) -> list[Digimon]:
    """Apply the name and level filters together, preserving order."""
    return filter_by_level(filter_by_name(records, search), level)


def unique_levels(records: Iterable[Digimon]) -> list[str]:
    """Return distinct levels in the order they first appear."""
    return list(dict.fromkeys(d.level for d in records))


def find_by_name(records: Iterable[Digimon], name: str) -> Digimon | None:
    """Return the first record whose name matches ``name`` (case-insensitive)."""
    lower = name.strip().lower()
    for digimon in records:
        if digimon.name.lower() == lower:
            return digimon
    return None


# ---------------------------------------------------------------------------
# Catalogue accessors
# ---------------------------------------------------------------------------

async def get_catalog() -> tuple[Digimon, ...]:
    """Return every Digimon from the source."""
    return await load_digimons()


async def refresh_catalog() -> tuple[Digimon, ...]:
    """Refetch the catalogue; the previous one is kept if the fetch fails."""
    return await refresh_digimons()


def build_filter_result(
    records: Sequence[Digimon],
    search: str | None = None,
    level: str | None = None,
) -> FilterResult:
    """Filter one catalogue snapshot and record the filters applied."""
    filtered = filter_digimons(records, search, level)
    logger.debug(
        "Filtered %d of %d Digimon (search=%r, level=%r)",
        len(filtered),
        len(records),
        search,
        level,
    )
    return FilterResult(
        records=filtered,
        total=len(records),
        search=_normalize_search(search),
        level=_normalize_level(level),
    )


async def search_digimons(search: str | None = None, level: str | None = None) -> FilterResult:
    """Return the catalogue filtered by name and level."""
    return build_filter_result(await load_digimons(), search, level)


async def get_levels() -> list[str]:
    """Return the distinct level categories in the catalogue."""
    return unique_levels(await load_digimons())


async def get_digimon_by_name(name: str) -> Digimon | None:
    """Return a single Digimon by name (case-insensitive)."""
    return find_by_name(await load_digimons(), name)
