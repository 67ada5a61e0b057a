"""
Tests for gap / shared / missing classification.
"""

from gapscope.gaps import KeywordRecord, classify_keywords, ranks_well


COMPETITORS = ["rival.com", "other.com"]


class TestRanksWell:

    def test_threshold(self):
        assert ranks_well(1)
        assert ranks_well(30)
        assert not ranks_well(31)
        assert not ranks_well(None)
        assert not ranks_well(0)


class TestClassifyKeywords:
    """Test keyword classification."""

    def test_gap_for_competitor_in_top_30(self, make_record):
        result = classify_keywords(
            [make_record("widget pricing", ranks={"rival.com": 3})], "example.com", COMPETITORS
        )
        assert len(result.gap_candidates) == 1
        candidate = result.gap_candidates[0]
        assert candidate.competitor == "rival.com"
        assert candidate.competitor_rank == 3
        assert not result.shared_candidates
        assert not result.missing_candidates

    def test_only_qualifying_competitor_produces_gap(self, make_record):
        """A competitor at rank 40 does not produce a gap."""
        result = classify_keywords(
            [make_record("seo tools", ranks={"a.com": 2, "b.com": 40})], "example.com", ["a.com", "b.com"]
        )
        assert [c.competitor for c in result.gap_candidates] == ["a.com"]

    def test_repeated_competitor_counted_once(self, make_record):
        result = classify_keywords(
            [make_record("widget pricing", ranks={"rival.com": 3})],
            "example.com",
            ["rival.com", "https://www.rival.com", "Rival.com"],
        )
        assert [c.competitor for c in result.gap_candidates] == ["rival.com"]

    def test_low_volume_nobody_ranks_is_excluded(self, make_record):
        result = classify_keywords(
            [make_record("obscure term", volume=50, competition=80)], "example.com", COMPETITORS
        )
        assert result.summary() == {
            "gap_pairs": 0, "gap_keywords": 0, "shared": 0, "missing": 0, "skipped": 0,
        }

    def test_missing_needs_volume_over_100(self, make_record):
        result = classify_keywords(
            [make_record("widget history", volume=101), make_record("widget facts", volume=100)],
            "example.com",
            COMPETITORS,
        )
        assert [r.keyword for r in result.missing_candidates] == ["widget history"]

    def test_shared_when_both_rank(self, make_record):
        result = classify_keywords(
            [make_record("widget reviews", primary_rank=5, ranks={"rival.com": 8})], "example.com", COMPETITORS
        )
        assert [r.keyword for r in result.shared_candidates] == ["widget reviews"]
        assert not result.gap_candidates

    def test_primary_ranking_alone_is_nothing(self, make_record):
        result = classify_keywords(
            [make_record("widget brand", primary_rank=2)], "example.com", COMPETITORS
        )
        assert not result.gap_candidates
        assert not result.shared_candidates
        assert not result.missing_candidates

    def test_primary_outside_top_30_is_a_gap(self, make_record):
        result = classify_keywords(
            [make_record("cheap widgets", primary_rank=45, ranks={"other.com": 12})], "example.com", COMPETITORS
        )
        assert [c.competitor for c in result.gap_candidates] == ["other.com"]

    def test_unlisted_competitor_ignored(self, make_record):
        result = classify_keywords(
            [make_record("widget parts", volume=50, ranks={"stranger.com": 1})], "example.com", COMPETITORS
        )
        assert not result.gap_candidates
        assert not result.missing_candidates

    def test_competitor_order_follows_list(self, make_record):
        record = make_record("widget guide", ranks={"other.com": 4, "rival.com": 9})
        result = classify_keywords([record], "example.com", COMPETITORS)
        assert [c.competitor for c in result.gap_candidates] == ["rival.com", "other.com"]

    def test_classifications_disjoint(self, sample_records):
        result = classify_keywords(sample_records, "example.com", COMPETITORS)

        gap_keywords = {c.record.keyword for c in result.gap_candidates}
        shared = {r.keyword for r in result.shared_candidates}
        missing = {r.keyword for r in result.missing_candidates}

        assert not gap_keywords & shared
        assert not gap_keywords & missing
        assert not shared & missing

    def test_malformed_records_skipped(self, make_record):
        result = classify_keywords(
            [{"volume": 10}, "not a record", make_record("widget pricing", ranks={"rival.com": 3}),
             {"keyword": "dict record", "competitor_ranks": {"rival.com": 7}}],
            "example.com",
            COMPETITORS,
        )
        assert result.skipped == 2
        assert [c.record.keyword for c in result.gap_candidates] == ["widget pricing", "dict record"]

    def test_record_with_empty_keyword_skipped(self):
        result = classify_keywords([KeywordRecord(keyword="")], "example.com", COMPETITORS)
        assert result.skipped == 1
