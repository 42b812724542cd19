"""
TerpTaster Backend - Review Service
===================================

What:  Business logic for strain reviews: create (master and basic forms),
       list, fetch, delete, search, statistics, popular terpenes, and the
       derived score cards of a stored review.
How:   Async SQLAlchemy queries against `weed_reviews`. ORM rows are turned
       into Pydantic responses here, so routes never see ORM objects.
Who:   /api/reviews, /api/basic-reviews, /api/search, /api/stats and
       /api/terpenes/popular route handlers.

Error Handling Strategy:
    Application errors (ValidationError, NotFoundError) propagate as-is.
    SQLAlchemy failures are logged with their type and wrapped in
    DatabaseError, which the global handler turns into a generic 500.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Text, desc, func, or_, select, union_all
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from terptaster.exceptions import DatabaseError, NotFoundError, ValidationError
from terptaster.models.review import Review
from terptaster.schemas.review import (
    BasicReviewCreate,
    MonthStat,
    PopularTerpene,
    ReviewCreate,
    ReviewDeletedResponse,
    ReviewerStat,
    ReviewResponse,
    SearchParams,
    SearchResponse,
    StatsResponse,
    StrainStat,
)
from terptaster.schemas.terpene import ReviewScoreResponse
from terptaster.services.scoring import score_palate, score_terpene_matches
from terptaster.services.terpene_dataset import TerpeneDataset

logger = logging.getLogger(__name__)

REQUIRED_REVIEW_FIELDS = ("strain", "location", "reviewed_by", "overall_score")

TOP_STRAINS_LIMIT = 10
TOP_REVIEWERS_LIMIT = 10
POPULAR_TERPENES_LIMIT = 20
STATS_MONTHS = 12


def missing_required_fields(payload: Dict[str, Any]) -> List[str]:
    """Required fields that are absent, null or blank strings."""
    missing = []
    for field in REQUIRED_REVIEW_FIELDS:
        value = payload.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


def months_ago(today: date, months: int) -> date:
    """Same day `months` calendar months earlier, clamped to the month's end."""
    year, month = divmod(today.year * 12 + today.month - 1 - months, 12)
    month += 1
    for day in (today.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    raise ValueError(f"Cannot step back {months} months from {today}")


def _round2(value: Optional[Any]) -> float:
    return round(float(value), 2) if value is not None else 0.0


class ReviewService:
    """
    Stateless review operations; every method takes the request's session.

    The session dependency commits on success, so methods only `flush()`.
    """

    # ── Create ────────────────────────────────────────────────────────────

    async def create_review(self, db: AsyncSession, payload: ReviewCreate) -> ReviewResponse:
        """
        Insert a master review. Only fields present in the body are written.

        Raises:
            ValidationError: a required field is missing (→ 400)
            DatabaseError:   insert failed (→ 500)
        """
        data = payload.model_dump(exclude_none=True)
        self._check_required(data)

        try:
            review = Review(**data)
            db.add(review)
            await db.flush()
            logger.info("Master review %s created for strain '%s'", review.id, review.strain)
            return ReviewResponse.model_validate(review)
        except SQLAlchemyError as e:
            logger.error("Master review insert failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the review. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def create_basic_review(
        self, db: AsyncSession, payload: BasicReviewCreate
    ) -> ReviewResponse:
        """Insert a basic review dated today."""
        data = payload.model_dump()
        self._check_required(data)

        try:
            review = Review(
                strain=payload.strain,
                location=payload.location,
                reviewed_by=payload.reviewed_by,
                overall_score=payload.overall_score,
                notes=payload.notes,
                photos=list(payload.photos),
                review_date=date.today(),
            )
            db.add(review)
            await db.flush()
            logger.info("Basic review %s created for strain '%s'", review.id, review.strain)
            return ReviewResponse.model_validate(review)
        except SQLAlchemyError as e:
            logger.error("Basic review insert failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the review. Please try again.",
                context={"error_type": type(e).__name__},
            )

    def _check_required(self, data: Dict[str, Any]) -> None:
        missing = missing_required_fields(data)
        if missing:
            raise ValidationError(message="Missing required fields", missing_fields=missing)

    # ── Read ──────────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, review_id: int) -> Review:
        result = await db.execute(select(Review).where(Review.id == review_id))
        review = result.scalar_one_or_none()
        if review is None:
            raise NotFoundError(resource="review", resource_id=str(review_id))
        return review

    async def get_review(self, db: AsyncSession, review_id: int) -> ReviewResponse:
        """
        Raises:
            NotFoundError: no review with this id (→ 404)
        """
        try:
            return ReviewResponse.model_validate(await self._load(db, review_id))
        except SQLAlchemyError as e:
            logger.error("Database error fetching review %s: %s", review_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the review. Please try again.",
                context={"review_id": review_id},
            )

    async def list_reviews(
        self, db: AsyncSession, limit: int = 50, offset: int = 0
    ) -> Tuple[List[ReviewResponse], int]:
        """
        One page of reviews, newest review date first, plus the total count.

        Reviews without a date sort last; ties break on id (newest first).
        """
        try:
            query = (
                select(Review)
                .order_by(Review.review_date.desc().nulls_last(), Review.id.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await db.execute(query)
            reviews = [ReviewResponse.model_validate(r) for r in result.scalars().all()]

            count_result = await db.execute(select(func.count(Review.id)))
            total = count_result.scalar() or 0
            return reviews, total
        except SQLAlchemyError as e:
            logger.error("Database error listing reviews: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve reviews. Please try again.",
                context={"error_type": type(e).__name__},
            )

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_review(self, db: AsyncSession, review_id: int) -> ReviewDeletedResponse:
        """Delete a review and return it as it was."""
        try:
            review = await self._load(db, review_id)
            snapshot = ReviewResponse.model_validate(review)
            await db.delete(review)
            await db.flush()
            logger.info("Review %s deleted", review_id)
            return ReviewDeletedResponse(deleted_review=snapshot)
        except SQLAlchemyError as e:
            logger.error("Database error deleting review %s: %s", review_id, str(e))
            raise DatabaseError(
                message="Could not delete the review. Please try again.",
                context={"review_id": review_id},
            )

    # ── Search ────────────────────────────────────────────────────────────

    async def search(self, db: AsyncSession, params: SearchParams) -> SearchResponse:
        """
        Filtered search.

        Text filters are case-insensitive substring matches; `terpene` is
        matched against known_terps, terpenes, inhale_terps and exhale_terps.
        Score bounds are inclusive.

        Raises:
            ValidationError: none of strain/location/reviewer/terpene given
        """
        if not any((params.strain, params.location, params.reviewer, params.terpene)):
            raise ValidationError(
                message=(
                    "At least one search parameter is required "
                    "(strain, location, reviewer, or terpene)"
                ),
            )

        conditions = []
        if params.strain:
            conditions.append(Review.strain.icontains(params.strain, autoescape=True))
        if params.location:
            conditions.append(Review.location.icontains(params.location, autoescape=True))
        if params.reviewer:
            conditions.append(Review.reviewed_by.icontains(params.reviewer, autoescape=True))
        if params.terpene:
            conditions.append(
                or_(
                    *(
                        func.array_to_string(column, " ", type_=Text).icontains(
                            params.terpene, autoescape=True
                        )
                        for column in (
                            Review.known_terps,
                            Review.terpenes,
                            Review.inhale_terps,
                            Review.exhale_terps,
                        )
                    )
                )
            )
        if params.min_score is not None:
            conditions.append(Review.overall_score >= params.min_score)
        if params.max_score is not None:
            conditions.append(Review.overall_score <= params.max_score)

        logger.debug("Review search: %s", params.model_dump(exclude_none=True))

        try:
            query = (
                select(Review)
                .where(*conditions)
                .order_by(
                    Review.review_date.desc().nulls_last(),
                    Review.overall_score.desc(),
                )
                .limit(params.limit)
            )
            result = await db.execute(query)
            reviews = [ReviewResponse.model_validate(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Search failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Search failed. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Search returned %d reviews", len(reviews))
        return SearchResponse(results=reviews, total=len(reviews), search_params=params)

    # ── Analytics ─────────────────────────────────────────────────────────

    async def get_stats(self, db: AsyncSession, today: Optional[date] = None) -> StatsResponse:
        """
        Review totals, top strains and reviewers, and monthly counts.

        `today` fixes the end of the 12-month window (defaults to the current
        date).
        """
        since = months_ago(today or date.today(), STATS_MONTHS)
        review_count = func.count(Review.id).label("review_count")
        avg_score = func.avg(Review.overall_score).label("avg_score")
        month = func.date_trunc("month", Review.review_date).label("month")

        try:
            total = (await db.execute(select(func.count(Review.id)))).scalar() or 0
            average = (await db.execute(select(func.avg(Review.overall_score)))).scalar()

            strains = await db.execute(
                select(Review.strain, review_count, avg_score)
                .group_by(Review.strain)
                .order_by(desc("review_count"), desc("avg_score"))
                .limit(TOP_STRAINS_LIMIT)
            )
            reviewers = await db.execute(
                select(Review.reviewed_by, review_count)
                .group_by(Review.reviewed_by)
                .order_by(desc("review_count"))
                .limit(TOP_REVIEWERS_LIMIT)
            )
            months = await db.execute(
                select(month, func.count(Review.id).label("reviews"))
                .where(Review.review_date >= since)
                .group_by(month)
                .order_by(desc("month"))
            )
        except SQLAlchemyError as e:
            logger.error("Stats query failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not compute statistics. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return StatsResponse(
            total_reviews=total,
            average_score=_round2(average),
            top_strains=[
                StrainStat(strain=row.strain, review_count=row.review_count, avg_score=_round2(row.avg_score))
                for row in strains
            ],
            top_reviewers=[
                ReviewerStat(reviewed_by=row.reviewed_by, review_count=row.review_count)
                for row in reviewers
            ],
            reviews_by_month=[
                MonthStat(month=_as_date(row.month), reviews=row.reviews)
                for row in months
            ],
        )

    async def popular_terpenes(self, db: AsyncSession) -> List[PopularTerpene]:
        """
        Most frequent terpene names across known_terps and lab-reported
        terpenes, with the average overall score of the reviews naming them.
        """
        known = select(
            func.unnest(Review.known_terps).label("terpene"), Review.overall_score
        ).where(Review.known_terps.is_not(None))
        reported = select(
            func.unnest(Review.terpenes).label("terpene"), Review.overall_score
        ).where(Review.terpenes.is_not(None))
        terpene_data = union_all(known, reported).subquery("terpene_data")

        frequency = func.count().label("frequency")
        avg_score = func.avg(terpene_data.c.overall_score).label("avg_score")
        query = (
            select(terpene_data.c.terpene, frequency, avg_score)
            .where(terpene_data.c.terpene.is_not(None), terpene_data.c.terpene != "")
            .group_by(terpene_data.c.terpene)
            .order_by(desc("frequency"), desc("avg_score"))
            .limit(POPULAR_TERPENES_LIMIT)
        )

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Popular terpenes query failed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not compute terpene statistics. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [
            PopularTerpene(terpene=row.terpene, frequency=row.frequency, avg_score=_round2(row.avg_score))
            for row in result
        ]

    # ── Scoring ───────────────────────────────────────────────────────────

    async def score_review(
        self, db: AsyncSession, dataset: TerpeneDataset, review_id: int
    ) -> ReviewScoreResponse:
        """
        Both score cards for a stored review.

        known_terps is the selection; inhale_terps and exhale_terps are the
        tasted flavors. Nothing is written back: scores are always derived.
        """
        review = await self.get_review(db, review_id)
        selected = review.known_terps or []
        inhale = review.inhale_terps or []
        exhale = review.exhale_terps or []
        return ReviewScoreResponse(
            review_id=review.id,
            terpene_score=score_terpene_matches(dataset, selected, inhale, exhale),
            palate_score=score_palate(dataset, selected, inhale, exhale),
        )


def _as_date(value: Any) -> date:
    """date_trunc returns a timestamp on PostgreSQL; keep only the date."""
    return value.date() if hasattr(value, "date") else value


# ── Singleton Instance ────────────────────────────────────────────────────
review_service = ReviewService()
