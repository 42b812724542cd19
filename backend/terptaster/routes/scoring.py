"""
TerpTaster Backend - Terpene Scoring Routes
===========================================

What:  POST /api/score/terpenes and POST /api/score/palate.
How:   Both take the same body and run one scoring variant over the shared
       terpene dataset. Bodies and cards use camelCase keys; snake_case keys
       are accepted in requests too.
"""

from fastapi import APIRouter, Depends

from terptaster.schemas.common import ErrorResponse
from terptaster.schemas.terpene import PalateScoreCard, ScoreRequest, TerpeneScoreCard
from terptaster.services.scoring import score_palate, score_terpene_matches
from terptaster.services.terpene_dataset import TerpeneDataset, get_terpene_dataset

router = APIRouter(prefix="/api/score", tags=["Scoring"])


@router.post(
    "/terpenes",
    response_model=TerpeneScoreCard,
    responses={503: {"description": "Terpene data not loaded", "model": ErrorResponse}},
    summary="Per-terpene match score",
    description=(
        "Grades the share of selected terpenes that at least one inhale or "
        "exhale flavor corroborates."
    ),
)
async def score_terpenes(
    body: ScoreRequest,
    dataset: TerpeneDataset = Depends(get_terpene_dataset),
) -> TerpeneScoreCard:
    return score_terpene_matches(
        dataset, body.selected_terpenes, body.inhale_flavors, body.exhale_flavors
    )


@router.post(
    "/palate",
    response_model=PalateScoreCard,
    responses={503: {"description": "Terpene data not loaded", "model": ErrorResponse}},
    summary="Per-flavor palate score",
    description=(
        "Grades the share of distinct tasted flavors that belong to at least "
        "one selected terpene."
    ),
)
async def score_palate_route(
    body: ScoreRequest,
    dataset: TerpeneDataset = Depends(get_terpene_dataset),
) -> PalateScoreCard:
    return score_palate(
        dataset, body.selected_terpenes, body.inhale_flavors, body.exhale_flavors
    )
