"""
TerpTaster Backend - Terpene Match Scoring
==========================================

What:  Grades how well the flavors a taster perceived back up the terpenes
       they claim to detect.
How:   Pure functions over (selection, inhale flavors, exhale flavors,
       dataset). No I/O, no logging, no shared mutable state, so they are
       safe to call from any number of concurrent requests.
Who:   Score routes, the review score route, and tests.

Two scoring variants exist and give different numbers for the same input:

    score_terpene_matches()  per terpene
        denominator = distinct selected terpenes
        a terpene counts when ANY tasted flavor is one of its possible flavors

    score_palate()           per flavor
        denominator = distinct tasted flavors
        a flavor counts when ANY terpene associated with it is selected

Example (Myrcene: Earthy/Musky, Limonene: Citrus/Lemon):
    selected = [Myrcene, Limonene], tasted = [Earthy, Pepper]
    per terpene → 1 of 2 → 50% F
    per flavor  → 1 of 2 → 50% F
    selected = [Myrcene], tasted = [Earthy, Musky, Citrus]
    per terpene → 1 of 1 → 100% A
    per flavor  → 2 of 3 → 67% D

Selected names that are not in the dataset still count in the per-terpene
denominator and can never match.
"""

from typing import Iterable, Tuple

from terptaster.schemas.terpene import PalateScoreCard, TerpeneScoreCard
from terptaster.services.terpene_dataset import TerpeneDataset

# Inclusive lower bounds, checked top-down; anything below 60 is an F
GRADE_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


def percentage_of(correct: int, total: int) -> int:
    """
    `correct / total * 100` rounded half up to an int; 0 when total is 0.

    Integer arithmetic keeps exact halves exact: 1/8 → 12.5 → 13.
    """
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def letter_grade(percentage: int) -> str:
    """Map a rounded percentage to A/B/C/D/F."""
    for threshold, letter in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return letter
    return "F"


def score_terpene_matches(
    dataset: TerpeneDataset,
    selected_terpenes: Iterable[str],
    inhale_flavors: Iterable[str],
    exhale_flavors: Iterable[str],
) -> TerpeneScoreCard:
    """
    Per-terpene score card.

    Args:
        dataset:            Loaded terpene reference data.
        selected_terpenes:  Terpenes the taster claims are present.
        inhale_flavors:     Flavors perceived on the inhale.
        exhale_flavors:     Flavors perceived on the exhale.

    Returns:
        TerpeneScoreCard; matched terpenes are listed in dataset order.
    """
    tasted = set(inhale_flavors) | set(exhale_flavors)
    selection = set(selected_terpenes)

    matched = {
        name for name in selection
        if not tasted.isdisjoint(dataset.possible_flavors(name))
    }
    percentage = percentage_of(len(matched), len(selection))

    return TerpeneScoreCard(
        percentage=percentage,
        grade=letter_grade(percentage),
        correct_matches=len(matched),
        total_possible_matches=len(selection),
        matched_terpenes=tuple(t.name for t in dataset.terpenes if t.name in matched),
    )


def score_palate(
    dataset: TerpeneDataset,
    selected_terpenes: Iterable[str],
    inhale_flavors: Iterable[str],
    exhale_flavors: Iterable[str],
) -> PalateScoreCard:
    """
    Per-flavor score card (the palate score shown on the master review form).

    A tasted flavor that is missing from the flavor index is always counted
    as unmatched.
    """
    tasted = set(inhale_flavors) | set(exhale_flavors)
    selection = set(selected_terpenes)

    matched = sorted(
        flavor for flavor in tasted
        if not selection.isdisjoint(dataset.terpenes_for_flavor(flavor))
    )
    unmatched = sorted(tasted.difference(matched))
    percentage = percentage_of(len(matched), len(tasted))

    return PalateScoreCard(
        percentage=percentage,
        grade=letter_grade(percentage),
        correct_flavors=len(matched),
        total_flavors=len(tasted),
        total_possible_terpenes=len(selection),
        matched_flavors=tuple(matched),
        unmatched_flavors=tuple(unmatched),
    )
