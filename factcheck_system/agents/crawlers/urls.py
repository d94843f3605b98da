"""URL helpers for search result handling, using yarl for parsing."""

from yarl import URL


def extract_domain(url: str) -> str:
    """Hostname of a URL, lowercased with any www. prefix stripped.

    Returns an empty string for unparseable URLs.
    """
    try:
        host = URL(url).host or ""
    except (ValueError, TypeError):
        return ""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def unwrap_redirect(href: str, param: str = "uddg") -> str:
    """Recover the outbound URL from a search engine redirect link.

    Links like ``//duckduckgo.com/l/?uddg=https%3A%2F%2Ftfl.gov.uk%2F`` carry
    the target in a query parameter; anything else is returned unchanged.
    """
    if not href or f"{param}=" not in href:
        return href
    if href.startswith("//"):
        href = "https:" + href
    try:
        target = URL(href).query.get(param)
    except (ValueError, TypeError):
        return href
    return target or href
