# =============================================================================
# lib/slugs.py - URL Slug Generation
# =============================================================================
# Builds the URL slugs used for directory profiles.
#
# - People: "<name>-<fragment>", where the fragment is the last six
#   alphanumerics of the Luma api_id. Two people with the same name get
#   different slugs without a collision check.
# - Companies: the normalized name, with "&" spelled out as "and".
#
# Slugs are stored on the row when it is written, so lookups are a plain
# equality match.
# =============================================================================

import hashlib
import re
import unicodedata

FRAGMENT_LENGTH = 6

_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def slugify(text: str | None, spell_ampersand: bool = False) -> str:
    """
    Normalize free text into a lowercase, dash-separated slug.

    Periods are dropped outright so "Dr. Jane" becomes "dr-jane" rather
    than "dr--jane". Accented letters are folded to ASCII; anything else
    outside [A-Za-z0-9_ -] becomes a separator.

    Returns an empty string when nothing usable is left.

    Example:
        slugify("José O'Neil")                 -> "jose-o-neil"
        slugify("Smith & Sons", True)          -> "smith-and-sons"
    """
    if not text:
        return ""

    value = text.replace(".", "")
    if spell_ampersand:
        value = value.replace("&", " and ")

    value = unicodedata.normalize("NFKD", value)
    value = "".join(ch for ch in value if not unicodedata.combining(ch))

    value = _NON_WORD.sub(" ", value).lower().strip()
    value = _WHITESPACE.sub("-", value)
    value = _DASHES.sub("-", value)
    return value.strip("-")


def id_fragment(identifier: str | None, fallback_seed: str = "") -> str:
    """
    Short stable fragment of an external identifier.

    Takes the last six lowercase alphanumerics of the identifier. An
    identifier with none falls back to a hash of `fallback_seed`, so the
    fragment is never empty.
    """
    cleaned = _NON_ALNUM.sub("", (identifier or "").lower())
    if cleaned:
        return cleaned[-FRAGMENT_LENGTH:]
    return hashlib.sha1(fallback_seed.encode("utf-8")).hexdigest()[:FRAGMENT_LENGTH]


def person_slug(name: str | None, api_id: str | None) -> str:
    """
    Slug for a directory person.

    Example:
        person_slug("Jane Doe", "usr-8fK2mQ")   -> "jane-doe-8fk2mq"
        person_slug(None, "usr-8fK2mQ")         -> "u-8fk2mq"
    """
    fragment = id_fragment(api_id, fallback_seed=name or "")
    base = slugify(name)
    if not base:
        return f"u-{fragment}"
    return f"{base}-{fragment}"


def company_slug(name: str | None, fallback_id: str | None = None) -> str:
    """
    Slug for a company.

    Falls back to "company-<fragment of id>" for names made only of
    punctuation or non-Latin script.
    """
    base = slugify(name, spell_ampersand=True)
    if base:
        return base
    return f"company-{id_fragment(fallback_id, fallback_seed=name or '')}"


def slug_fragment(slug: str) -> str | None:
    """
    The id fragment at the end of a person slug, or None if it has none.

    Example:
        slug_fragment("jane-doe-8fk2mq")   -> "8fk2mq"
    """
    _, sep, tail = (slug or "").rpartition("-")
    if not sep or len(tail) != FRAGMENT_LENGTH or _NON_ALNUM.search(tail):
        return None
    return tail
