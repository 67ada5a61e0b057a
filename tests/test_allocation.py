"""
Tests for the per-competitor fairness allocator.
"""

from gapscope.gaps import allocate, allocate_gaps, classify_keywords
from gapscope.gaps.allocation import cap_total
from gapscope.gaps.classifier import GapCandidate


def _candidates(make_record, competitor, count, start=0):
    return [
        GapCandidate(make_record(f"{competitor} keyword {i}", ranks={competitor: 5}), competitor, 5)
        for i in range(start, start + count)
    ]


class TestAllocateGaps:
    """Test per-competitor caps."""

    def test_cap_per_competitor(self, make_record):
        candidates = _candidates(make_record, "big.com", 20) + _candidates(make_record, "small.com", 3)

        buckets = allocate_gaps(candidates, ["big.com", "small.com"], 5, "example.com")

        assert len(buckets["big.com"]) == 5
        assert len(buckets["small.com"]) == 3

    def test_big_competitor_does_not_crowd_out_small(self, make_record):
        """The small competitor's candidates come last but are all kept."""
        candidates = _candidates(make_record, "big.com", 50) + _candidates(make_record, "small.com", 2)

        gaps = allocate(candidates, ["big.com", "small.com"], 10, "example.com")

        assert sum(1 for g in gaps if g.competitor == "small.com") == 2
        assert sum(1 for g in gaps if g.competitor == "big.com") == 10

    def test_keeps_classifier_order(self, make_record):
        candidates = _candidates(make_record, "big.com", 5)
        gaps = allocate(candidates, ["big.com"], 3, "example.com")
        assert [g.keyword for g in gaps] == ["big.com keyword 0", "big.com keyword 1", "big.com keyword 2"]

    def test_flattened_in_competitor_order(self, make_record):
        candidates = (
            _candidates(make_record, "b.com", 1)
            + _candidates(make_record, "a.com", 1)
            + _candidates(make_record, "b.com", 1, start=1)
        )
        gaps = allocate(candidates, ["a.com", "b.com"], 5, "example.com")
        assert [g.competitor for g in gaps] == ["a.com", "b.com", "b.com"]

    def test_repeated_competitor_gets_one_bucket(self, make_record):
        buckets = allocate_gaps(
            _candidates(make_record, "a.com", 3), ["a.com", "www.A.com", "a.com"], 2, "example.com"
        )
        assert list(buckets) == ["a.com"]
        assert len(buckets["a.com"]) == 2

    def test_every_competitor_has_a_bucket(self, make_record):
        buckets = allocate_gaps(_candidates(make_record, "a.com", 1), ["a.com", "quiet.com"], 5, "example.com")
        assert buckets["quiet.com"] == []

    def test_zero_target(self, make_record):
        assert allocate(_candidates(make_record, "a.com", 4), ["a.com"], 0, "example.com") == []

    def test_fairness_bound_over_classified_records(self, sample_records):
        classification = classify_keywords(sample_records, "example.com", ["rival.com", "other.com"])
        gaps = allocate(classification.gap_candidates, ["rival.com", "other.com"], 1, "example.com")

        for competitor in ("rival.com", "other.com"):
            assert sum(1 for g in gaps if g.competitor == competitor) <= 1


class TestCapTotal:

    def test_caps(self):
        assert cap_total([1, 2, 3, 4], 2) == [1, 2]
        assert cap_total([1, 2], 5) == [1, 2]
        assert cap_total([1, 2], -1) == []
