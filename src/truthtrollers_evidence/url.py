"""URL handling utilities."""

import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def extract_domain(url: str) -> str | None:
    """Extract domain name from URL.

    Args:
        url: The URL to extract the domain from.

    Returns:
        The lowercased domain without a 'www.' prefix, or None if the URL
        has no network location.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        logger.warning(f"Could not parse url {url}")
        return None
    domain = (parsed.hostname or "").lower()
    if not domain:
        return None
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def domain_matches(domain: str | None, patterns: list[str]) -> bool:
    """Whether ``domain`` equals or is a subdomain of any pattern.

    Patterns are bare domains such as ``"reuters.com"``; a leading dot or
    ``www.`` is ignored.
    """
    if not domain:
        return False
    domain = domain.lower()
    for pattern in patterns:
        p = pattern.lower().lstrip(".")
        if p.startswith("www."):
            p = p[4:]
        if p and (domain == p or domain.endswith("." + p)):
            return True
    return False
