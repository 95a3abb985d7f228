"""HTML rendering for the Digimon explorer page."""

import html
import json
from typing import Sequence

from app.config import settings
from app.models.digimon import Digimon
from app.services.digimon_service import ALL_LEVELS, FilterResult
from app.web.messages import get_messages

DIGIMON_API_HOME = "https://digimon-api.vercel.app/"


def _e(value: object) -> str:
    return html.escape(str(value), quote=True)


def build_image_html(digimon: Digimon) -> str:
    """Image tag that swaps to the placeholder when the image fails to load."""
    placeholder = settings.PLACEHOLDER_IMAGE_URL
    src = digimon.image_url or placeholder
    # onerror is cleared first so a broken placeholder cannot loop
    onerror = f"this.onerror=null;this.src={json.dumps(placeholder)};"
    return (
        f'<img src="{_e(src)}" alt="{_e(digimon.name)}" loading="lazy" '
        f'onerror="{_e(onerror)}">'
    )


def build_card_html(digimon: Digimon) -> str:
    """One grid card: image, name and level badge."""
    return (
        '<article class="card">'
        f'<div class="card-image">{build_image_html(digimon)}</div>'
        '<div class="card-body">'
        f'<h2 class="card-title">{_e(digimon.name)}</h2>'
        f'<span class="badge">{_e(digimon.level)}</span>'
        "</div>"
        "</article>"
    )


def build_level_options_html(levels: Sequence[str], selected: str, all_label: str) -> str:
    options = [(ALL_LEVELS, all_label)] + [(level, level) for level in levels]
    parts = []
    for value, label in options:
        attr = " selected" if value == selected else ""
        parts.append(f'<option value="{_e(value)}"{attr}>{_e(label)}</option>')
    return "".join(parts)


SEARCH_DEBOUNCE_MS = 400

# Submit after typing pauses; keep the caret at the end after the reload.
SEARCH_ONINPUT = (
    "clearTimeout(this._t);"
    f"this._t=setTimeout(()=>this.form.submit(),{SEARCH_DEBOUNCE_MS});"
)
SEARCH_ONFOCUS = "this.setSelectionRange(this.value.length,this.value.length);"


def build_filter_form_html(levels: Sequence[str], search: str, level: str, msg: dict) -> str:
    autofocus = " autofocus" if search else ""
    return (
        '<form class="filters" method="get" action="/" role="search">'
        f'<input type="search" name="q" value="{_e(search)}" maxlength="100" '
        f'placeholder="{_e(msg["search_placeholder"])}" autocomplete="off"'
        f' oninput="{_e(SEARCH_ONINPUT)}" onfocus="{_e(SEARCH_ONFOCUS)}"{autofocus}>'
        f'<select name="level" aria-label="{_e(msg["level_label"])}" onchange="this.form.submit()">'
        f'{build_level_options_html(levels, level, msg["all_levels"])}'
        "</select>"
        f'<button type="submit">{_e(msg["search_button"])}</button>'
        "</form>"
    )


def build_results_html(result: FilterResult, msg: dict) -> str:
    """Result count line followed by the grid or the not-found block."""
    info = msg["showing"].format(count=result.count, total=result.total)
    parts = [f'<p class="results-info">{_e(info)}</p>']

    if result.records:
        cards = "".join(build_card_html(d) for d in result.records)
        parts.append(f'<section class="grid">{cards}</section>')
    elif result.is_empty:
        parts.append(
            '<section class="no-results">'
            f'<h3>{_e(msg["not_found_title"])}</h3>'
            f'<p>{_e(msg["not_found_hint"])}</p>'
            f'<a class="button-outline" href="/">{_e(msg["reset"])}</a>'
            "</section>"
        )
    return "".join(parts)


def build_error_html(msg: dict) -> str:
    return f'<section class="load-error" role="alert"><p>{_e(msg["load_error"])}</p></section>'


def render_page(
    locale: str,
    levels: Sequence[str],
    result: FilterResult | None,
    search: str = "",
    level: str = ALL_LEVELS,
) -> str:
    """Render the full explorer page.

    ``result`` is None when the catalogue could not be loaded.
    """
    msg = get_messages(locale)
    body = build_results_html(result, msg) if result is not None else build_error_html(msg)
    return f"""<!DOCTYPE html>
<html lang="{_e(locale)}">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{_e(msg["title"])}</title>
<link rel="stylesheet" href="/static/styles.css">
</head>
<body>
<header class="site-header">
<h1>{_e(msg["title"])}</h1>
<p class="tagline">{_e(msg["tagline"])}</p>
</header>
<main>
{build_filter_form_html(levels, search, level, msg)}
{body}
</main>
<footer class="site-footer">
<p>{_e(msg["data_from"])} <a href="{DIGIMON_API_HOME}" target="_blank" rel="noopener noreferrer">Digimon API</a></p>
</footer>
</body>
</html>
"""
