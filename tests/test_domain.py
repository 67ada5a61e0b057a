"""
Tests for domain normalization and keyword text helpers.
"""

import pytest

from gapscope.utils import (
    are_same_domains,
    categorize_keyword_intent,
    clean_competitor_list,
    competitor_key,
    extract_domain,
    normalize_domain,
    normalize_domain_key,
)


class TestNormalizeDomain:
    """Test prefix stripping."""

    @pytest.mark.parametrize("raw,expected", [
        ("https://www.example.com", "example.com"),
        ("http://example.com", "example.com"),
        ("www.example.com", "example.com"),
        ("example.com", "example.com"),
        ("https://example.com/blog", "example.com/blog"),
        ("  https://www.example.com  ", "example.com"),
        ("HTTPS://WWW.Example.com", "Example.com"),
    ])
    def test_strips_prefixes(self, raw, expected):
        assert normalize_domain(raw) == expected

    @pytest.mark.parametrize("raw", [
        "https://www.example.com",
        "www.https://example.com",
        "https://https://www.www.example.com",
        "http://",
        "",
        "   ",
        "sub.www.example.com",
    ])
    def test_idempotent(self, raw):
        """Normalizing twice gives the same result as normalizing once."""
        once = normalize_domain(raw)
        assert normalize_domain(once) == once

    def test_empty_and_none(self):
        assert normalize_domain("") == ""
        assert normalize_domain(None) == ""

    def test_inner_www_kept(self):
        assert normalize_domain("shop.www.example.com") == "shop.www.example.com"


class TestExtractDomain:
    """Test hostname extraction."""

    def test_full_url(self):
        assert extract_domain("https://www.example.com/path?q=1") == "example.com"

    def test_bare_domain(self):
        assert extract_domain("example.com") == "example.com"

    def test_bare_domain_with_path(self):
        assert extract_domain("www.example.com/blog") == "example.com"

    def test_empty(self):
        assert extract_domain("") == ""

    def test_key_is_lowercase(self):
        assert normalize_domain_key("https://WWW.Example.COM/") == "example.com"

    def test_same_domains(self):
        assert are_same_domains("https://www.example.com", "EXAMPLE.com/about")
        assert not are_same_domains("example.com", "example.org")


class TestCleanCompetitorList:
    """Test competitor list cleanup."""

    def test_removes_empty_duplicates_and_primary(self):
        cleaned = clean_competitor_list(
            ["https://rival.com/", "", "  ", "www.rival.com", "example.com", "other.com"],
            primary_domain="https://www.example.com",
        )
        assert cleaned == ["rival.com", "other.com"]

    def test_keeps_order(self):
        assert clean_competitor_list(["b.com", "a.com", "c.com"]) == ["b.com", "a.com", "c.com"]

    def test_case_insensitive_duplicates(self):
        assert clean_competitor_list(["Rival.com", "rival.com"]) == ["rival.com"]

    def test_returns_competitor_keys(self):
        assert clean_competitor_list(["https://www.Rival.COM/", "http://"]) == ["rival.com"]
        assert competitor_key("https://www.Rival.COM/") == "rival.com"


class TestKeywordIntent:
    """Test intent tagging."""

    @pytest.mark.parametrize("keyword,intent", [
        ("how to fix a widget", "informational"),
        ("widget login", "navigational"),
        ("best widgets", "commercial"),
        ("buy widgets", "transactional"),
        ("widget vs gadget", "commercial"),
    ])
    def test_patterns(self, keyword, intent):
        assert categorize_keyword_intent(keyword, 50) == intent

    def test_pattern_order(self):
        """Informational patterns win over transactional ones."""
        assert categorize_keyword_intent("what does a widget cost", 50) == "informational"

    def test_fallback_by_difficulty(self):
        assert categorize_keyword_intent("blue widgets", 20) == "informational"
        assert categorize_keyword_intent("blue widgets", 40) == "commercial"
