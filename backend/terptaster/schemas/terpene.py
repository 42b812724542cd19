"""
TerpTaster Backend - Terpene & Scoring Schemas
==============================================

What:  Pydantic models for the terpene reference data and the two score cards.
How:   Field names are snake_case in Python and camelCase on the wire
       (`alias_generator=to_camel`). Requests accept either spelling, and
       FastAPI serializes responses by alias. The camelCase wire names match
       the terpene data file and the score card contract the frontend reads.

Immutability:
    Terpene and both score cards are frozen. A score card is the result of a
    pure computation and is never updated after it is built.
"""

from typing import List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Grade = Literal["A", "B", "C", "D", "F"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _FrozenCamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ══════════════════════════════════════════════════════════════════════════
# Reference Data
# ══════════════════════════════════════════════════════════════════════════


class Terpene(_FrozenCamelModel):
    """
    One terpene from the reference dataset.

    Only `name` and `possible_flavors` take part in scoring. `effects`,
    `fun_fact` and `notable_strains` are display data (hints in the training
    game, detail cards in the UI).
    """
    name: str = Field(min_length=1, description="Unique terpene name")
    possible_flavors: Tuple[str, ...] = Field(
        default=(),
        description="Flavors/aromas associated with this terpene, in dataset order",
    )
    effects: str = Field(default="", description="Reported effects")
    fun_fact: str = Field(default="", description="Trivia shown as a hint")
    notable_strains: Tuple[str, ...] = Field(
        default=(),
        description="Strains known for this terpene",
    )


class TerpeneDataFile(BaseModel):
    """Top-level shape of terpenes.json: `{"terpenes": [...]}`."""
    terpenes: List[Terpene] = Field(min_length=1)


class TerpeneListResponse(_CamelModel):
    """Returned by GET /api/terpenes."""
    terpenes: List[Terpene]
    count: int


class NameListResponse(_CamelModel):
    """Returned by GET /api/terpenes/names (sorted)."""
    names: List[str]


class FlavorListResponse(_CamelModel):
    """Returned by GET /api/terpenes/flavors (sorted, unique)."""
    flavors: List[str]


class ExpectedFlavorsRequest(_CamelModel):
    """Body for POST /api/terpenes/expected-flavors."""
    selected_terpenes: List[str] = Field(default_factory=list)


class ExpectedFlavorsResponse(_CamelModel):
    """Flavors a taster should expect from the selected terpenes."""
    selected_terpenes: List[str]
    flavors: List[str]


# ══════════════════════════════════════════════════════════════════════════
# Scoring
# ══════════════════════════════════════════════════════════════════════════


class ScoreRequest(_CamelModel):
    """
    Input for both scoring endpoints.

    Example:
        {
            "selectedTerpenes": ["Myrcene", "Limonene"],
            "inhaleFlavors": ["Earthy"],
            "exhaleFlavors": ["Citrus"]
        }

    Lists may contain duplicates and arrive in any order; the scorer treats
    them as sets. Non-string entries are rejected here with a 422.
    """
    selected_terpenes: List[str] = Field(default_factory=list)
    inhale_flavors: List[str] = Field(default_factory=list)
    exhale_flavors: List[str] = Field(default_factory=list)


class TerpeneScoreCard(_FrozenCamelModel):
    """
    Per-terpene score: how many selected terpenes are corroborated by at least
    one tasted flavor.

    Invariants:
        0 <= percentage <= 100
        correct_matches <= total_possible_matches
        total_possible_matches == number of distinct selected names
    """
    percentage: int = Field(ge=0, le=100)
    grade: Grade
    correct_matches: int = Field(ge=0)
    total_possible_matches: int = Field(ge=0)
    matched_terpenes: Tuple[str, ...] = Field(
        default=(),
        description="Matched terpene names in dataset order",
    )


class PalateScoreCard(_FrozenCamelModel):
    """
    Per-flavor score: how many distinct tasted flavors belong to at least one
    selected terpene. The denominator is the number of tasted flavors, so this
    card and TerpeneScoreCard usually disagree for the same input.
    """
    percentage: int = Field(ge=0, le=100)
    grade: Grade
    correct_flavors: int = Field(ge=0)
    total_flavors: int = Field(ge=0)
    total_possible_terpenes: int = Field(ge=0)
    matched_flavors: Tuple[str, ...] = ()
    unmatched_flavors: Tuple[str, ...] = ()


class ReviewScoreResponse(_CamelModel):
    """Both score cards for a stored review (GET /api/reviews/{id}/score)."""
    review_id: int
    terpene_score: TerpeneScoreCard
    palate_score: PalateScoreCard
