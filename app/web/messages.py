"""Localised UI copy for the explorer page."""

MESSAGES: dict[str, dict[str, str]] = {
    "id": {
        "title": "Digimon Explorer",
        "tagline": "explore digimon world find your favorite digimon",
        "search_placeholder": "Cari Digimon...",
        "all_levels": "Semua Level",
        "level_label": "Filter berdasarkan level",
        "search_button": "Cari",
        "showing": "Menampilkan {count} dari {total} Digimon",
        "not_found_title": "Tidak ada Digimon ditemukan",
        "not_found_hint": "Coba ubah kata kunci pencarian atau filter level",
        "reset": "Reset Filter",
        "load_error": "Gagal memuat data Digimon. Silakan coba lagi nanti.",
        "data_from": "Data dari",
    },
    "en": {
        "title": "Digimon Explorer",
        "tagline": "explore the digimon world and find your favorite digimon",
        "search_placeholder": "Search Digimon...",
        "all_levels": "All Levels",
        "level_label": "Filter by level",
        "search_button": "Search",
        "showing": "Showing {count} of {total} Digimon",
        "not_found_title": "No Digimon found",
        "not_found_hint": "Try a different search term or level filter",
        "reset": "Reset Filter",
        "load_error": "Could not load Digimon data. Please try again later.",
        "data_from": "Data from",
    },
}


def get_messages(locale: str) -> dict[str, str]:
    """Return the message table for ``locale``, falling back to Indonesian."""
    return MESSAGES.get(locale, MESSAGES["id"])
