"""Create weed_reviews table

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates the `weed_reviews` table that stores strain reviews.
How:   Integer identity key, TEXT[] columns for the multi-select form
       fields, DATE review_date defaulting to today.

Rollback: downgrade() drops the table (all reviews are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TEXT_ARRAY = postgresql.ARRAY(sa.Text())


def upgrade() -> None:
    """Create weed_reviews with its indexes. See terptaster/models/review.py."""
    op.create_table(
        "weed_reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),

        # Identity
        sa.Column("strain", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("reviewed_by", sa.String(255), nullable=False),
        sa.Column("type", sa.String(100), nullable=True),
        sa.Column("grower", sa.String(255), nullable=True),
        sa.Column("weed_type", sa.String(100), nullable=True),
        sa.Column(
            "review_date",
            sa.Date(),
            server_default=sa.text("CURRENT_DATE"),
            nullable=True,
        ),

        # Consumption
        sa.Column("smoking_instrument", sa.String(255), nullable=True),
        sa.Column("smoking_device", sa.String(255), nullable=True),

        # Sensory ratings
        sa.Column("taste", sa.Float(), nullable=True),
        sa.Column("taste_rating", sa.Float(), nullable=True),
        sa.Column("smell", sa.Text(), nullable=True),
        sa.Column("smell_rating", sa.Float(), nullable=True),
        sa.Column("bag_appeal", sa.Text(), nullable=True),
        sa.Column("bag_appeal_rating", sa.Float(), nullable=True),
        sa.Column("looks", sa.Float(), nullable=True),
        sa.Column("break_style", sa.Text(), nullable=True),
        sa.Column("high", sa.Text(), nullable=True),
        sa.Column("high_rating", sa.Float(), nullable=True),
        sa.Column("overall_score", sa.Float(), nullable=False),
        sa.Column("previous_rating", sa.Float(), nullable=True),

        # Potency
        sa.Column("thc", sa.Float(), nullable=True),
        sa.Column("terps_percent", sa.Float(), nullable=True),
        sa.Column("terpene_percent", sa.Float(), nullable=True),

        # Feel
        sa.Column("second_time_consistency", sa.Boolean(), nullable=True),
        sa.Column("grand_champ", sa.Boolean(), nullable=True),
        sa.Column("chest_punch", sa.Boolean(), nullable=True),
        sa.Column("throat_hitter", sa.Boolean(), nullable=True),
        sa.Column("head_feel", sa.Boolean(), nullable=True),
        sa.Column("body_feel", sa.Boolean(), nullable=True),

        # Multi-select arrays
        sa.Column("known_terps", TEXT_ARRAY, nullable=True),
        sa.Column("inhale_terps", TEXT_ARRAY, nullable=True),
        sa.Column("exhale_terps", TEXT_ARRAY, nullable=True),
        sa.Column("terpenes", TEXT_ARRAY, nullable=True),
        sa.Column("flower_color", TEXT_ARRAY, nullable=True),
        sa.Column("grow_style", TEXT_ARRAY, nullable=True),
        sa.Column("photos", TEXT_ARRAY, server_default=sa.text("'{}'"), nullable=True),

        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        sa.PrimaryKeyConstraint("id"),
    )

    # Listing and search order by review_date DESC
    op.create_index(
        "idx_weed_reviews_review_date",
        "weed_reviews",
        [sa.text("review_date DESC")],
    )
    op.create_index("idx_weed_reviews_strain", "weed_reviews", ["strain"])


def downgrade() -> None:
    op.drop_index("idx_weed_reviews_strain", table_name="weed_reviews")
    op.drop_index("idx_weed_reviews_review_date", table_name="weed_reviews")
    op.drop_table("weed_reviews")
