"""
Domain Normalization Utilities

Every join in the gap engine keys on a normalized domain string, so the
primary domain and every competitor must pass through the same function
before any map lookup or equality check:

- normalize_domain: strip scheme and "www." only (keeps path and case)
- extract_domain: hostname of a URL, "www." removed
- normalize_domain_key: lower-cased hostname for cache keys and equality
- competitor_key: lower-cased normalized domain used to key competitor rankings
"""

import re
import logging
from typing import Iterable, List, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_PREFIX_PATTERN = re.compile(r"^(?:https?://|www\.)", re.IGNORECASE)


def normalize_domain(url_or_domain: Optional[str]) -> str:
    """
    Strip leading "http://", "https://" and "www." prefixes.

    The remainder is returned unchanged, including any path. Prefixes are
    stripped repeatedly so the result is stable under re-normalization.

    Args:
        url_or_domain: Domain or URL (e.g., "https://www.example.com")

    Returns:
        Normalized domain (e.g., "example.com"), "" for empty input
    """
    if not url_or_domain or not isinstance(url_or_domain, str):
        return ""

    value = url_or_domain.strip()
    while True:
        stripped = _PREFIX_PATTERN.sub("", value, count=1)
        if stripped == value:
            return value
        value = stripped


def extract_domain(url: Optional[str]) -> str:
    """
    Extract the hostname from a URL, removing protocol and "www." prefix.

    URLs without a scheme are parsed as https. Falls back to prefix
    stripping when the hostname cannot be parsed.
    """
    if not url:
        return ""

    candidate = url.strip()
    if not candidate.lower().startswith(("http://", "https://")):
        candidate = "https://" + candidate

    try:
        hostname = urlparse(candidate).hostname
    except ValueError as e:
        logger.debug(f"Could not parse '{url}' as URL: {e}")
        hostname = None

    if not hostname:
        return normalize_domain(url).split("/")[0]

    return normalize_domain(hostname)


def normalize_domain_key(url: Optional[str]) -> str:
    """Lower-cased, trimmed hostname used for cache keys and comparisons."""
    return extract_domain(url).lower().strip()


def competitor_key(domain: Optional[str]) -> str:
    """Key under which a competitor's rankings are stored and looked up."""
    return normalize_domain(domain).rstrip("/").lower()


def are_same_domains(domain1: str, domain2: str) -> bool:
    """Check if two domains are the same after normalization."""
    return normalize_domain_key(domain1) == normalize_domain_key(domain2)


def clean_competitor_list(
    competitors: Iterable[Optional[str]],
    primary_domain: Optional[str] = None,
) -> List[str]:
    """
    Normalize a competitor list for analysis.

    Drops empty entries, duplicates and the primary domain itself while
    keeping the caller's order. Domains come back as competitor keys.

    Args:
        competitors: Raw competitor domains or URLs
        primary_domain: Primary domain to exclude (optional)

    Returns:
        Ordered list of unique normalized competitor domains
    """
    primary_key = normalize_domain_key(primary_domain) if primary_domain else None
    seen = set()
    cleaned = []

    for raw in competitors:
        if not raw or not str(raw).strip():
            continue

        key = competitor_key(str(raw))
        if not key:
            continue

        if primary_key and key == primary_key:
            logger.info(f"Ignoring competitor {raw}: same as primary domain")
            continue
        if key in seen:
            continue

        seen.add(key)
        cleaned.append(key)

    return cleaned
