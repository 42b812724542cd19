"""
TerpTaster Backend - Review Request/Response Schemas
====================================================

What:  Pydantic models for the review, search, stats and upload endpoints.
How:   Request bodies accept both camelCase (what the master review form
       posts) and snake_case keys. Responses use the snake_case column names
       of the `weed_reviews` table.

Required fields:
    strain, location, reviewed_by and overall_score are Optional here on
    purpose. The service checks them and answers 400 "Missing required fields"
    with the list of what is missing, instead of a 422 per field.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ReviewCreate(BaseModel):
    """
    Body for POST /api/reviews (master review).

    Only fields that are present (not null) are written; everything else is
    left to the column default.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    strain: Optional[str] = None
    location: Optional[str] = None
    reviewed_by: Optional[str] = None
    overall_score: Optional[float] = None

    type: Optional[str] = None
    grower: Optional[str] = None
    weed_type: Optional[str] = None
    review_date: Optional[date] = None
    smoking_instrument: Optional[str] = None
    smoking_device: Optional[str] = None

    taste: Optional[float] = None
    taste_rating: Optional[float] = None
    smell: Optional[str] = None
    smell_rating: Optional[float] = None
    bag_appeal: Optional[str] = None
    bag_appeal_rating: Optional[float] = None
    looks: Optional[float] = None
    break_style: Optional[str] = None
    high: Optional[str] = None
    high_rating: Optional[float] = None
    previous_rating: Optional[float] = None

    thc: Optional[float] = None
    terps_percent: Optional[float] = None
    terpene_percent: Optional[float] = None

    second_time_consistency: Optional[bool] = None
    grand_champ: Optional[bool] = None
    chest_punch: Optional[bool] = None
    throat_hitter: Optional[bool] = None
    head_feel: Optional[bool] = None
    body_feel: Optional[bool] = None

    known_terps: Optional[List[str]] = None
    inhale_terps: Optional[List[str]] = None
    exhale_terps: Optional[List[str]] = None
    terpenes: Optional[List[str]] = None
    flower_color: Optional[List[str]] = None
    grow_style: Optional[List[str]] = None
    photos: Optional[List[str]] = None

    notes: Optional[str] = None


class BasicReviewCreate(BaseModel):
    """Body for POST /api/basic-reviews. The review date is always today."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    strain: Optional[str] = None
    location: Optional[str] = None
    reviewed_by: Optional[str] = None
    overall_score: Optional[float] = None
    notes: Optional[str] = None
    photos: List[str] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReviewResponse(BaseModel):
    """One row of `weed_reviews`, column names as-is."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    strain: str
    location: str
    reviewed_by: str
    overall_score: float

    type: Optional[str] = None
    grower: Optional[str] = None
    weed_type: Optional[str] = None
    review_date: Optional[date] = None
    smoking_instrument: Optional[str] = None
    smoking_device: Optional[str] = None

    taste: Optional[float] = None
    taste_rating: Optional[float] = None
    smell: Optional[str] = None
    smell_rating: Optional[float] = None
    bag_appeal: Optional[str] = None
    bag_appeal_rating: Optional[float] = None
    looks: Optional[float] = None
    break_style: Optional[str] = None
    high: Optional[str] = None
    high_rating: Optional[float] = None
    previous_rating: Optional[float] = None

    thc: Optional[float] = None
    terps_percent: Optional[float] = None
    terpene_percent: Optional[float] = None

    second_time_consistency: Optional[bool] = None
    grand_champ: Optional[bool] = None
    chest_punch: Optional[bool] = None
    throat_hitter: Optional[bool] = None
    head_feel: Optional[bool] = None
    body_feel: Optional[bool] = None

    known_terps: Optional[List[str]] = None
    inhale_terps: Optional[List[str]] = None
    exhale_terps: Optional[List[str]] = None
    terpenes: Optional[List[str]] = None
    flower_color: Optional[List[str]] = None
    grow_style: Optional[List[str]] = None
    photos: Optional[List[str]] = None

    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class ReviewCreatedResponse(BaseModel):
    """Returned with 201 by both create endpoints."""
    message: str
    review: ReviewResponse


class ReviewDeletedResponse(BaseModel):
    message: str = "Review deleted successfully"
    deleted_review: ReviewResponse


class SearchParams(BaseModel):
    """Echo of the filters a search ran with."""
    strain: Optional[str] = None
    location: Optional[str] = None
    reviewer: Optional[str] = None
    terpene: Optional[str] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    limit: int = 50


class SearchResponse(BaseModel):
    """Returned by GET /api/search. `total` is the number of rows returned."""
    results: List[ReviewResponse]
    total: int
    search_params: SearchParams


class StrainStat(BaseModel):
    strain: str
    review_count: int
    avg_score: float


class ReviewerStat(BaseModel):
    reviewed_by: str
    review_count: int


class MonthStat(BaseModel):
    month: date = Field(description="First day of the month")
    reviews: int


class StatsResponse(BaseModel):
    """Returned by GET /api/stats."""
    total_reviews: int
    average_score: float = Field(description="Mean overall score, 2 decimal places (0 if no reviews)")
    top_strains: List[StrainStat]
    top_reviewers: List[ReviewerStat]
    reviews_by_month: List[MonthStat] = Field(description="Last 12 months, newest first")


class PopularTerpene(BaseModel):
    """One row of GET /api/terpenes/popular."""
    terpene: str
    frequency: int
    avg_score: float


class UploadedPhoto(BaseModel):
    """A stored photo. `size` is the size of the original upload in bytes."""
    filename: str
    original_name: str
    url: str
    size: int


class UploadResponse(BaseModel):
    message: str = "Photos uploaded successfully!"
    files: List[UploadedPhoto]
