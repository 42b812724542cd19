"""
TerpTaster Backend - Review SQLAlchemy Model
============================================

What:  ORM model for the `weed_reviews` table in PostgreSQL.
Who:   ReviewService for CRUD/search/stats, Alembic for schema management.

Table Design:
    - Integer primary key: reviews are addressed as /api/reviews/{id}
    - TEXT[] columns (known_terps, inhale_terps, exhale_terps, terpenes,
      flower_color, grow_style, photos) hold multi-select form values;
      search and the popular-terpenes report read them with unnest() and
      array_to_string()
    - Every column except strain, location, reviewed_by and overall_score
      is optional: the master form submits only what the reviewer filled in,
      the basic form only a handful of fields

    Index on review_date DESC: listing and search both order by it.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, Date, Float, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from terptaster.database import Base


class Review(Base):
    """
    One strain review.

    Terpene-related columns:
        known_terps   terpenes the reviewer believes are present (the selection)
        inhale_terps  flavors tasted on the inhale
        exhale_terps  flavors tasted on the exhale
        terpenes      lab-reported or label terpenes
    The score route feeds the first three to the terpene scorer.
    """

    __tablename__ = "weed_reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Identity ──────────────────────────────────────────────────────────
    strain: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    reviewed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(100))
    grower: Mapped[Optional[str]] = mapped_column(String(255))
    weed_type: Mapped[Optional[str]] = mapped_column(String(100))
    review_date: Mapped[Optional[date]] = mapped_column(
        Date, server_default=text("CURRENT_DATE")
    )

    # ── Consumption ───────────────────────────────────────────────────────
    smoking_instrument: Mapped[Optional[str]] = mapped_column(String(255))
    smoking_device: Mapped[Optional[str]] = mapped_column(String(255))

    # ── Sensory Ratings ───────────────────────────────────────────────────
    taste: Mapped[Optional[float]] = mapped_column(Float)
    taste_rating: Mapped[Optional[float]] = mapped_column(Float)
    smell: Mapped[Optional[str]] = mapped_column(Text)
    smell_rating: Mapped[Optional[float]] = mapped_column(Float)
    bag_appeal: Mapped[Optional[str]] = mapped_column(Text)
    bag_appeal_rating: Mapped[Optional[float]] = mapped_column(Float)
    looks: Mapped[Optional[float]] = mapped_column(Float)
    break_style: Mapped[Optional[str]] = mapped_column(Text)
    high: Mapped[Optional[str]] = mapped_column(Text)
    high_rating: Mapped[Optional[float]] = mapped_column(Float)
    overall_score: Mapped[float] = mapped_column(Float, nullable=False)
    previous_rating: Mapped[Optional[float]] = mapped_column(Float)

    # ── Potency ───────────────────────────────────────────────────────────
    thc: Mapped[Optional[float]] = mapped_column(Float)
    terps_percent: Mapped[Optional[float]] = mapped_column(Float)
    terpene_percent: Mapped[Optional[float]] = mapped_column(Float)

    # ── Feel ──────────────────────────────────────────────────────────────
    second_time_consistency: Mapped[Optional[bool]] = mapped_column(Boolean)
    grand_champ: Mapped[Optional[bool]] = mapped_column(Boolean)
    chest_punch: Mapped[Optional[bool]] = mapped_column(Boolean)
    throat_hitter: Mapped[Optional[bool]] = mapped_column(Boolean)
    head_feel: Mapped[Optional[bool]] = mapped_column(Boolean)
    body_feel: Mapped[Optional[bool]] = mapped_column(Boolean)

    # ── Multi-select Arrays ───────────────────────────────────────────────
    known_terps: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text))
    inhale_terps: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text))
    exhale_terps: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text))
    terpenes: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text))
    flower_color: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text))
    grow_style: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text))
    photos: Mapped[Optional[List[str]]] = mapped_column(
        ARRAY(Text), server_default=text("'{}'")
    )

    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_weed_reviews_review_date", text("review_date DESC")),
        Index("idx_weed_reviews_strain", "strain"),
    )
    # Fetch server defaults (review_date, photos, created_at) with the INSERT
    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, strain='{self.strain}', reviewed_by='{self.reviewed_by}')>"
