"""
TerpTaster Backend - Terpene Match Scoring Unit Tests
=====================================================

What:  Tests for the pure scoring functions (both variants) and the shared
       rounding/grading helpers.
How:   Plain function calls over the small three-terpene dataset from
       conftest (Myrcene: Earthy/Musky, Limonene: Citrus/Lemon,
       Pinene: Pine/Woody). No database, no HTTP.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from terptaster.services.scoring import (
    letter_grade,
    percentage_of,
    score_palate,
    score_terpene_matches,
)


class TestPercentageOf:
    """Integer percentage with halves rounded up."""

    @pytest.mark.parametrize(
        "correct,total,expected",
        [
            (0, 0, 0),
            (0, 5, 0),
            (5, 5, 100),
            (1, 2, 50),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),      # 12.5 rounds up
            (5, 8, 63),      # 62.5 rounds up
            (179, 200, 90),  # 89.5 rounds up
        ],
    )
    def test_values(self, correct, total, expected):
        assert percentage_of(correct, total) == expected

    def test_zero_total_never_divides(self):
        assert percentage_of(3, 0) == 0


class TestLetterGrade:

    @pytest.mark.parametrize(
        "percentage,grade",
        [
            (100, "A"), (90, "A"), (89, "B"), (80, "B"), (79, "C"),
            (70, "C"), (69, "D"), (60, "D"), (59, "F"), (0, "F"),
        ],
    )
    def test_thresholds_are_inclusive(self, percentage, grade):
        assert letter_grade(percentage) == grade


class TestScoreTerpeneMatches:
    """Per-terpene variant: denominator is the number of distinct selected terpenes."""

    def test_empty_selection_scores_zero(self, small_dataset):
        card = score_terpene_matches(small_dataset, [], ["Earthy", "Citrus"], ["Pine"])
        assert card.percentage == 0
        assert card.grade == "F"
        assert card.correct_matches == 0
        assert card.total_possible_matches == 0
        assert card.matched_terpenes == ()

    def test_half_matched_is_fifty_percent_f(self, small_dataset):
        card = score_terpene_matches(small_dataset, ["Myrcene", "Limonene"], ["Earthy"], [])
        assert card.correct_matches == 1
        assert card.total_possible_matches == 2
        assert card.percentage == 50
        assert card.grade == "F"
        assert card.matched_terpenes == ("Myrcene",)

    def test_inhale_and_exhale_both_count(self, small_dataset):
        card = score_terpene_matches(small_dataset, ["Myrcene", "Limonene"], ["Earthy"], ["Citrus"])
        assert card.correct_matches == 2
        assert card.percentage == 100
        assert card.grade == "A"

    def test_unrelated_flavor_does_not_match(self, small_dataset):
        card = score_terpene_matches(small_dataset, ["Myrcene"], ["Citrus"], [])
        assert card.correct_matches == 0
        assert card.percentage == 0
        assert card.grade == "F"

    def test_no_flavors_with_selection_scores_zero(self, small_dataset):
        card = score_terpene_matches(small_dataset, ["Myrcene", "Pinene"], [], [])
        assert card.correct_matches == 0
        assert card.total_possible_matches == 2
        assert card.grade == "F"

    def test_two_of_three_is_d(self, small_dataset):
        card = score_terpene_matches(
            small_dataset, ["Myrcene", "Limonene", "Pinene"], ["Musky", "Woody"], []
        )
        assert card.percentage == 67
        assert card.grade == "D"

    def test_unknown_terpene_counts_but_never_matches(self, small_dataset):
        card = score_terpene_matches(small_dataset, ["Myrcene", "Terpinolene"], ["Earthy"], [])
        assert card.correct_matches == 1
        assert card.total_possible_matches == 2
        assert card.percentage == 50

    def test_duplicate_selections_collapse(self, small_dataset):
        card = score_terpene_matches(small_dataset, ["Myrcene", "Myrcene"], ["Earthy"], [])
        assert card.total_possible_matches == 1
        assert card.percentage == 100

    def test_matched_terpenes_follow_dataset_order(self, small_dataset):
        card = score_terpene_matches(
            small_dataset, ["Pinene", "Myrcene", "Limonene"], ["Woody", "Lemon", "Earthy"], []
        )
        assert card.matched_terpenes == ("Myrcene", "Limonene", "Pinene")

    def test_order_independent(self, small_dataset):
        first = score_terpene_matches(
            small_dataset, ["Myrcene", "Limonene", "Pinene"], ["Earthy", "Pine"], ["Lemon"]
        )
        second = score_terpene_matches(
            small_dataset, ["Pinene", "Limonene", "Myrcene"], ["Lemon"], ["Pine", "Earthy"]
        )
        assert first == second

    def test_idempotent(self, small_dataset):
        args = (small_dataset, ["Myrcene", "Limonene"], ["Earthy"], ["Citrus"])
        assert score_terpene_matches(*args) == score_terpene_matches(*args)

    def test_adding_flavors_never_lowers_correct_matches(self, small_dataset):
        selected = ["Myrcene", "Limonene", "Pinene"]
        before = score_terpene_matches(small_dataset, selected, ["Earthy"], [])
        after = score_terpene_matches(small_dataset, selected, ["Earthy", "Grape"], ["Woody"])
        assert after.correct_matches >= before.correct_matches
        assert after.total_possible_matches == before.total_possible_matches

    def test_result_is_frozen(self, small_dataset):
        card = score_terpene_matches(small_dataset, ["Myrcene"], ["Earthy"], [])
        with pytest.raises(PydanticValidationError):
            card.percentage = 0


class TestScorePalate:
    """Per-flavor variant: denominator is the number of distinct tasted flavors."""

    def test_flavor_in_both_phases_counts_once(self, small_dataset):
        card = score_palate(small_dataset, ["Myrcene"], ["Earthy", "Citrus"], ["Earthy"])
        assert card.total_flavors == 2
        assert card.correct_flavors == 1
        assert card.percentage == 50
        assert card.grade == "F"
        assert card.matched_flavors == ("Earthy",)
        assert card.unmatched_flavors == ("Citrus",)
        assert card.total_possible_terpenes == 1

    def test_differs_from_per_terpene_variant(self, small_dataset):
        selected = ["Myrcene", "Limonene", "Pinene"]
        terpene_card = score_terpene_matches(small_dataset, selected, ["Earthy"], [])
        palate_card = score_palate(small_dataset, selected, ["Earthy"], [])
        assert terpene_card.percentage == 33
        assert palate_card.percentage == 100
        assert palate_card.grade == "A"

    def test_no_tasted_flavors_scores_zero(self, small_dataset):
        card = score_palate(small_dataset, ["Myrcene"], [], [])
        assert card.percentage == 0
        assert card.grade == "F"
        assert card.total_flavors == 0

    def test_unknown_flavor_is_unmatched(self, small_dataset):
        card = score_palate(small_dataset, ["Myrcene"], ["Grape", "Musky"], [])
        assert card.matched_flavors == ("Musky",)
        assert card.unmatched_flavors == ("Grape",)

    def test_flavor_lists_are_sorted(self, small_dataset):
        card = score_palate(
            small_dataset, ["Myrcene", "Limonene", "Pinene"], ["Woody", "Citrus"], ["Earthy", "Grape"]
        )
        assert card.matched_flavors == ("Citrus", "Earthy", "Woody")
        assert card.unmatched_flavors == ("Grape",)
        assert card.percentage == 75
        assert card.grade == "C"

    def test_empty_selection_matches_nothing(self, small_dataset):
        card = score_palate(small_dataset, [], ["Earthy"], [])
        assert card.correct_flavors == 0
        assert card.total_possible_terpenes == 0
        assert card.grade == "F"
