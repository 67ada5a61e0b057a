"""
Tests for the ranking record store (merge step).
"""

import pytest

from gapscope.gaps import (
    DataSource,
    InvalidDomainInput,
    KeywordRecord,
    NoKeywordData,
    RankingRecordStore,
    merge_keyword_data,
)


class TestMergeKeywordData:
    """Test merging primary and competitor keyword lists."""

    def test_every_keyword_once(self, primary_keywords, competitor_results):
        records = merge_keyword_data("example.com", primary_keywords, competitor_results)

        keywords = [r.keyword for r in records]
        assert sorted(keywords) == sorted({"widget reviews", "widget history", "widget pricing"})
        assert len(keywords) == len(set(keywords))

    def test_primary_rank_kept(self, primary_keywords, competitor_results):
        records = {r.keyword: r for r in merge_keyword_data("example.com", primary_keywords, competitor_results)}

        assert records["widget reviews"].primary_rank == 5
        assert records["widget reviews"].primary_url == "https://example.com/reviews"
        assert records["widget pricing"].primary_rank is None

    def test_competitor_domains_normalized(self, primary_keywords, competitor_results):
        records = {r.keyword: r for r in merge_keyword_data("example.com", primary_keywords, competitor_results)}

        pricing = records["widget pricing"]
        assert pricing.competitor_ranks == {"rival.com": 3, "other.com": 14}
        assert pricing.competitor_urls["rival.com"] == "https://rival.com/pricing"
        assert records["widget reviews"].competitor_rank("rival.com") == 8

    def test_new_keyword_takes_competitor_metrics(self, primary_keywords, competitor_results):
        records = {r.keyword: r for r in merge_keyword_data("example.com", primary_keywords, competitor_results)}

        pricing = records["widget pricing"]
        assert pricing.monthly_search_volume == 1200
        assert pricing.competition_index == 25

    def test_data_source(self, primary_keywords, competitor_results):
        records = {r.keyword: r for r in merge_keyword_data("example.com", primary_keywords, competitor_results)}

        assert records["widget reviews"].data_source == DataSource.API
        assert records["widget pricing"].data_source == DataSource.API

    def test_sample_record_becomes_mixed(self):
        records = merge_keyword_data(
            "example.com",
            [{"keyword": "widgets", "position": 40, "rankingUrl": "/widgets"}],
            [{"domain": "rival.com", "keywords": [
                {"keyword": "widgets", "position": 2, "rankingUrl": "https://rival.com/widgets"},
            ]}],
        )
        assert records[0].data_source == DataSource.MIXED

    def test_empty_input_raises(self):
        with pytest.raises(NoKeywordData):
            merge_keyword_data("example.com", [], [{"domain": "rival.com", "keywords": []}])

    def test_empty_primary_domain_raises(self, primary_keywords):
        with pytest.raises(InvalidDomainInput):
            merge_keyword_data("https://", primary_keywords, [])

    def test_malformed_rows_skipped(self):
        records = merge_keyword_data(
            "example.com",
            [{"keyword": "widgets", "position": 3}, {"position": 4}, {"keyword": "gadgets", "volume": "lots"}],
            [],
        )
        assert [r.keyword for r in records] == ["widgets"]

    def test_keyword_text_not_folded(self):
        records = merge_keyword_data(
            "example.com",
            [{"keyword": "Widgets"}, {"keyword": "widgets"}],
            [],
        )
        assert len(records) == 2


class TestRankingRecordStore:
    """Test the store directly."""

    def test_later_competitor_entry_overwrites(self):
        store = RankingRecordStore("example.com")
        store.add_primary([KeywordRecord(keyword="widgets", primary_rank=12)])
        store.add_competitor("rival.com", [{"keyword": "widgets", "position": 9}])
        store.add_competitor("rival.com", [{"keyword": "widgets", "position": 4}])

        record = store.records()[0]
        assert record.competitor_ranks == {"rival.com": 4}
        assert record.primary_rank == 12

    def test_invalid_competitor_ignored(self):
        store = RankingRecordStore("example.com")
        store.add_competitor("", [{"keyword": "widgets", "position": 9}])
        assert len(store) == 0

    def test_out_of_range_rank_is_none(self):
        store = RankingRecordStore("example.com")
        store.add_competitor("rival.com", [{"keyword": "widgets", "position": 0}])
        assert store.records()[0].competitor_ranks == {"rival.com": None}

    def test_contains(self):
        store = RankingRecordStore("www.example.com")
        store.add_primary([{"keyword": "widgets"}])
        assert "widgets" in store
        assert store.primary_domain == "example.com"
