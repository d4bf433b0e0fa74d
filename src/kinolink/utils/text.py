"""Text normalization utilities for title and person-name matching."""

import re
import unicodedata

from kinolink.utils.romanization import transliterate

_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")


def fold_text(text: str | None) -> str:
    """
    Fold text to a comparable ASCII-ish form.

    - Unicode decomposition with combining marks stripped: "Kachyňa" → "kachyna"
    - Lowercase
    - Only letters, digits and whitespace kept: "Kar-wai" → "karwai"
    - Whitespace collapsed

    Args:
        text: Raw text

    Returns:
        Folded text, empty string for empty input
    """
    if not text:
        return ""

    decomposed = unicodedata.normalize("NFD", text)
    kept = []
    for ch in decomposed:
        if unicodedata.category(ch) == "Mn":
            continue
        if ch.isalnum() or ch.isspace():
            kept.append(ch.lower())

    return re.sub(r"\s+", " ", "".join(kept)).strip()


def normalise_name(name: str | None) -> str:
    """
    Normalize a person name or title for cross-source comparison.

    Czech transcriptions of Japanese and Korean names are first rewritten
    in English romanization ("Tacuja Jošihara" → "tatsuya yoshihara"), then
    the result is folded with fold_text. Western names are only folded.

    Args:
        name: Name as written by any source

    Returns:
        Normalized name
    """
    if not name or not name.strip():
        return ""

    return fold_text(transliterate(name.lower()))


def sort_tokens(normalised: str) -> str:
    """
    Make a normalized name independent of word order.

    "wong karwai" and "karwai wong" both become "karwai wong".
    """
    return " ".join(sorted(normalised.split()))


def normalise_title(title: str | None) -> str:
    """
    Normalize a film title for equality checks between sources.

    Unlike names, titles lose their whitespace too, so "Spider-Man" and
    "Spider Man" compare equal.
    """
    return fold_text(title).replace(" ", "")


def extract_year(value: str | None) -> str | None:
    """
    Extract the first four-digit year from free text.

    Examples:
        "1970" → "1970"
        "1969–1970" → "1969"
        "(TV Movie 2004)" → "2004"
        "unknown" → None
    """
    if not value:
        return None
    match = _YEAR_PATTERN.search(value)
    return match.group(1) if match else None


def extract_years(value: str | None) -> list[str]:
    """Extract every four-digit year from free text, in order of appearance."""
    if not value:
        return []
    return _YEAR_PATTERN.findall(value)


def split_origin(origin: str | None) -> list[str]:
    """
    Split a catalog origin string into country names.

    "Československo / Francie, Itálie" → ["Československo", "Francie", "Itálie"]
    """
    if not origin:
        return []
    return [part.strip() for part in re.split(r"[/,]", origin) if part.strip()]
