"""Per-country proxy endpoints."""

import random

# slug -> (host, first port, last port)
PROXY_POOLS: dict[str, tuple[str, int, int]] = {
    "US": ("us.smartproxy.com", 10001, 10010),
    "CA": ("ca.smartproxy.com", 20001, 20010),
    "GB": ("gb.smartproxy.com", 30001, 30010),
}


def select_proxy(country_slug: str, username: str, password: str) -> str:
    """Return a credentialed proxy URL on a random port of the country's pool.

    Returns an empty string when the slug has no pool.
    """
    pool = PROXY_POOLS.get(country_slug.upper()) if country_slug else None
    if pool is None:
        return ""
    host, first_port, last_port = pool
    port = random.randint(first_port, last_port)
    return f"http://{username}:{password}@{host}:{port}"
