"""Utility modules for gapscope."""

from .config import Settings, get_settings
from .domain import (
    normalize_domain,
    extract_domain,
    normalize_domain_key,
    are_same_domains,
    clean_competitor_list,
    competitor_key,
)
from .keywords import categorize_keyword_intent

__all__ = [
    "Settings",
    "get_settings",
    # Domains
    "normalize_domain",
    "extract_domain",
    "normalize_domain_key",
    "are_same_domains",
    "clean_competitor_list",
    "competitor_key",
    # Keywords
    "categorize_keyword_intent",
]
