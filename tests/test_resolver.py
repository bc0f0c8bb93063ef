"""
Tests for grouping, ranking and confidence.
"""

import pytest
from medicate.models import Group, RankedGroup, RawCandidate
from medicate.resolver import (
    aggregate,
    confidence_from_gap,
    group_candidates,
    pick_best,
    rank_groups,
    score_all,
)


def ranked(score: float, name: str = "x") -> RankedGroup:
    return RankedGroup(group=Group(name=name), final_score=score)


class TestGrouping:
    """Candidates are grouped by case-insensitive cleaned name."""

    def test_case_insensitive_groups(self, make_scored):
        groups = group_candidates([
            make_scored("Panadol Extra", 50),
            make_scored("PANADOL EXTRA", 40),
            make_scored("Efferalgan", 30),
        ])

        assert [g.name for g in groups] == ["Panadol Extra", "Efferalgan"]
        assert groups[0].count == 2
        assert groups[0].total_score == 90

    def test_best_member_is_max_score(self, make_scored):
        groups = group_candidates([
            make_scored("Panadol", 10, link="https://a"),
            make_scored("Panadol", 30, link="https://b"),
            make_scored("Panadol", 20, link="https://c"),
        ])
        assert groups[0].sample_url == "https://b"

    def test_first_member_wins_score_tie(self, make_scored):
        groups = group_candidates([
            make_scored("Panadol", 30, link="https://first"),
            make_scored("Panadol", 30, link="https://second"),
        ])
        assert groups[0].sample_url == "https://first"

    def test_best_member_may_be_negative(self, make_scored):
        groups = group_candidates([make_scored("Bộ quà", -12.5, link="https://a")])
        assert groups[0].best.score == -12.5
        assert groups[0].sample_url == "https://a"


class TestRanking:
    """final_score = average + 3 per member, sorted descending."""

    def test_repetition_beats_single_listing(self, make_scored):
        """Two 50/40 listings of one name outrank a single 45."""
        result = aggregate([
            make_scored("Panadol Extra", 50, link="https://nhathuoclongchau.com/a"),
            make_scored("Panadol Extra", 40, link="https://pharmacity.vn/b"),
            make_scored("Panadol Extra 500mg", 45, link="https://tiki.vn/c"),
        ])

        assert result.name == "Panadol Extra"
        assert result.candidates[0].final_score == pytest.approx(51)
        assert result.candidates[1].final_score == pytest.approx(48)
        assert result.confidence == 0.60
        assert result.sample_url == "https://nhathuoclongchau.com/a"

    def test_stable_on_ties(self, make_scored):
        groups = group_candidates([
            make_scored("First", 20),
            make_scored("Second", 20),
            make_scored("Third", 25),
        ])
        names = [r.name for r in rank_groups(groups)]
        assert names == ["Third", "First", "Second"]

    def test_at_most_five_alternatives(self, make_scored):
        result = aggregate([make_scored(f"Product {i}", i * 10) for i in range(7)])

        assert len(result.candidates) == 5
        scores = [c.final_score for c in result.candidates]
        assert scores == sorted(scores, reverse=True)
        assert result.name == "Product 6"


class TestConfidence:
    """Confidence buckets from the gap between the top two groups."""

    def test_single_group(self):
        assert confidence_from_gap(ranked(10), None) == 0.96

    @pytest.mark.parametrize("best,second,expected", [
        (70.0, 50.0, 0.97),
        (69.99, 50.0, 0.90),
        (60.0, 50.0, 0.90),
        (59.99, 50.0, 0.80),
        (55.0, 50.0, 0.80),
        (54.99, 50.0, 0.60),
        (50.0, 50.0, 0.60),
    ])
    def test_gap_boundaries(self, best, second, expected):
        assert confidence_from_gap(ranked(best), ranked(second)) == expected

    def test_single_candidate_resolution(self, make_scored):
        result = aggregate([make_scored("Panadol", -40)])
        assert result.confidence == 0.96


class TestAggregate:
    """Resolution output."""

    def test_empty_input(self):
        assert aggregate([]) is None
        assert pick_best([]) is None

    def test_all_titles_empty_after_cleaning(self):
        items = [
            RawCandidate(title="", link="https://a", snippet="thuốc"),
            RawCandidate(title="| Nhà thuốc Long Châu", link="https://b", snippet=""),
            RawCandidate(title=" - . ", link="https://c", snippet=""),
        ]
        assert score_all(items) == []
        assert pick_best(items) is None

    def test_missing_sample_url(self, make_scored):
        result = aggregate([make_scored("Panadol", 10, link="")])
        assert result.sample_url is None
        assert result.to_dict()["candidates"][0]["sampleUrl"] is None

    def test_to_dict_shape(self, make_scored):
        result = aggregate([
            make_scored("Panadol", 40, link="https://a"),
            make_scored("Efferalgan", 10, link="https://b"),
        ])
        assert result.to_dict() == {
            "name": "Panadol",
            "confidence": 0.97,
            "sampleUrl": "https://a",
            "candidates": [
                {"name": "Panadol", "score": 43, "sampleUrl": "https://a"},
                {"name": "Efferalgan", "score": 13, "sampleUrl": "https://b"},
            ],
        }


class TestPickBest:
    """Full pipeline over raw search items."""

    def test_search_results(self, search_items):
        result = pick_best(search_items)

        assert result.name == "Panadol Extra viên nén"
        assert result.confidence == 0.97
        assert result.sample_url == "https://nhathuoclongchau.com.vn/thuoc/panadol-extra"
        assert len(result.candidates) == 3
        assert result.candidates[0].group.count == 3

    def test_accepts_plain_dicts(self):
        items = [
            {"title": "Paracetamol 500mg viên nén | Nhà thuốc Long Châu",
             "link": "https://nhathuoclongchau.com/abc",
             "snippet": "Thuốc giảm đau paracetamol 500mg"},
            {"title": None, "link": None},
        ]
        result = pick_best(items)

        assert result.name == "Paracetamol 500mg viên nén"
        assert result.confidence == 0.96
        assert result.candidates[0].final_score == pytest.approx(111 + 3)

    def test_order_independent_winner(self, search_items):
        assert pick_best(list(reversed(search_items))).name == "Panadol Extra viên nén"
