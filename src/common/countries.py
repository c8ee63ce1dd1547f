"""Country name to slug resolution using pycountry and custom aliases."""

import pycountry

# Maps lowercase alias → ISO 3166-1 alpha-2 code
CUSTOM_ALIASES: dict[str, str] = {
    # United Kingdom variations
    "uk": "GB",
    "u.k.": "GB",
    "britain": "GB",
    "great britain": "GB",
    "england": "GB",
    "the uk": "GB",
    "the united kingdom": "GB",

    # United States variations
    "us": "US",
    "u.s.": "US",
    "usa": "US",
    "u.s.a.": "US",
    "america": "US",
    "the us": "US",
    "the usa": "US",
    "the united states": "US",
}

_country_index: dict[str, str] | None = None


def _build_country_index() -> dict[str, str]:
    """Build a lookup index from all country names/codes to alpha-2 codes."""
    index: dict[str, str] = {}

    for country in pycountry.countries:
        alpha2 = country.alpha_2
        index[country.name.lower()] = alpha2
        if hasattr(country, "common_name"):
            index[country.common_name.lower()] = alpha2
        if hasattr(country, "official_name"):
            index[country.official_name.lower()] = alpha2
        index[country.alpha_2.lower()] = alpha2
        index[country.alpha_3.lower()] = alpha2

    # Custom aliases override pycountry on conflict
    for alias, code in CUSTOM_ALIASES.items():
        index[alias] = code

    return index


def _get_country_index() -> dict[str, str]:
    """Get or build the country index (cached)."""
    global _country_index
    if _country_index is None:
        _country_index = _build_country_index()
    return _country_index


def get_country_slug(country: str | None) -> str:
    """
    Resolve a country name to its slug (ISO alpha-2 code, upper case).

    Args:
        country: Country name or alias (e.g., "Canada", "USA", "UK")

    Returns:
        Slug such as "CA", or an empty string if the country is not recognized.
    """
    if not country:
        return ""
    return _get_country_index().get(country.strip().lower(), "")
