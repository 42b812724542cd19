"""
TerpTaster Backend - Review Route Handlers
==========================================

What:  Review CRUD, search, statistics and per-review score cards.
How:   Extracts query/body input, delegates to ReviewService, sets
       pagination and caching headers.

Caching Strategy:
    - POST/DELETE: never cached
    - GET /api/search: public, 5 minutes
    - GET /api/stats: public, 1 hour
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from terptaster.config import settings
from terptaster.database import get_db_session
from terptaster.schemas.common import ErrorResponse
from terptaster.schemas.review import (
    BasicReviewCreate,
    ReviewCreate,
    ReviewCreatedResponse,
    ReviewDeletedResponse,
    ReviewResponse,
    SearchParams,
    SearchResponse,
    StatsResponse,
)
from terptaster.schemas.terpene import ReviewScoreResponse
from terptaster.services.review_service import review_service
from terptaster.services.terpene_dataset import TerpeneDataset, get_terpene_dataset

router = APIRouter(prefix="/api", tags=["Reviews"])

ERROR_RESPONSES = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/reviews",
    status_code=201,
    response_model=ReviewCreatedResponse,
    responses=ERROR_RESPONSES,
    summary="Submit a master review",
    description=(
        "Stores every field present in the body. strain, location, reviewed_by "
        "and overall_score are required. camelCase and snake_case keys are accepted."
    ),
)
async def create_review(
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ReviewCreatedResponse:
    review = await review_service.create_review(db, body)
    return ReviewCreatedResponse(message="Master review submitted!", review=review)


@router.post(
    "/basic-reviews",
    status_code=201,
    response_model=ReviewCreatedResponse,
    responses=ERROR_RESPONSES,
    summary="Submit a basic review",
)
async def create_basic_review(
    body: BasicReviewCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ReviewCreatedResponse:
    review = await review_service.create_basic_review(db, body)
    return ReviewCreatedResponse(message="Basic review submitted!", review=review)


@router.get(
    "/reviews",
    response_model=List[ReviewResponse],
    responses={500: ERROR_RESPONSES[500]},
    summary="List reviews (newest first)",
)
async def list_reviews(
    response: Response,
    limit: int = Query(
        default=settings.search_default_limit,
        ge=1,
        le=settings.search_max_limit,
        description="Items per page",
    ),
    offset: int = Query(default=0, ge=0, description="Items to skip"),
    db: AsyncSession = Depends(get_db_session),
) -> List[ReviewResponse]:
    reviews, total = await review_service.list_reviews(db, limit=limit, offset=offset)
    response.headers["X-Total-Count"] = str(total)
    return reviews


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    responses={404: {"description": "Review not found", "model": ErrorResponse}},
    summary="Get one review",
)
async def get_review(
    review_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ReviewResponse:
    return await review_service.get_review(db, review_id)


@router.get(
    "/reviews/{review_id}/score",
    response_model=ReviewScoreResponse,
    responses={
        404: {"description": "Review not found", "model": ErrorResponse},
        503: {"description": "Terpene data not loaded", "model": ErrorResponse},
    },
    summary="Score cards for a stored review",
    description=(
        "Runs both scoring variants over the review's known terpenes and "
        "inhale/exhale flavors. Computed on every call, never stored."
    ),
)
async def score_review(
    review_id: int,
    db: AsyncSession = Depends(get_db_session),
    dataset: TerpeneDataset = Depends(get_terpene_dataset),
) -> ReviewScoreResponse:
    return await review_service.score_review(db, dataset, review_id)


@router.delete(
    "/reviews/{review_id}",
    response_model=ReviewDeletedResponse,
    responses={404: {"description": "Review not found", "model": ErrorResponse}},
    summary="Delete a review",
)
async def delete_review(
    review_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ReviewDeletedResponse:
    return await review_service.delete_review(db, review_id)


@router.get(
    "/search",
    response_model=SearchResponse,
    responses=ERROR_RESPONSES,
    summary="Search reviews",
    description=(
        "Case-insensitive substring search on strain, location, reviewer and "
        "terpene (known, lab-reported, inhale and exhale lists), with optional "
        "inclusive score bounds. At least one text filter is required."
    ),
)
async def search_reviews(
    response: Response,
    strain: Optional[str] = Query(default=None),
    location: Optional[str] = Query(default=None),
    reviewer: Optional[str] = Query(default=None),
    terpene: Optional[str] = Query(default=None),
    min_score: Optional[float] = Query(default=None),
    max_score: Optional[float] = Query(default=None),
    limit: int = Query(default=settings.search_default_limit, ge=1, le=settings.search_max_limit),
    db: AsyncSession = Depends(get_db_session),
) -> SearchResponse:
    params = SearchParams(
        strain=strain,
        location=location,
        reviewer=reviewer,
        terpene=terpene,
        min_score=min_score,
        max_score=max_score,
        limit=limit,
    )
    result = await review_service.search(db, params)
    response.headers["Cache-Control"] = "public, max-age=300"
    return result


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses={500: ERROR_RESPONSES[500]},
    summary="Review statistics",
)
async def get_stats(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> StatsResponse:
    result = await review_service.get_stats(db)
    response.headers["Cache-Control"] = "public, max-age=3600"
    return result
