"""Initial schema: profiles, subscriptions and content catalog

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-01 09:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c2a7b9d10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SUBSCRIPTION_STATUS_VALUES = ("active", "grace_period", "expired")
PLAN_TYPE_VALUES = ("monthly", "yearly")
CATEGORY_TYPE_VALUES = ("card", "story", "play", "awareness", "bedtime")
CONTENT_TYPE_VALUES = (
    "story",
    "card",
    "game-coloring",
    "game-matching",
    "game-counting",
    "game-drawing",
    "game-find-shape",
    "game-what-hear",
    "awareness",
    "bedtime",
)


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""

    # ------------------------------------------------------------------
    # 1. Premium state
    # ------------------------------------------------------------------
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "is_premium",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        sa.Column("subscription_expiry", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
    )

    op.create_table(
        "subscriptions",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("original_transaction_id", sa.String(length=255), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*SUBSCRIPTION_STATUS_VALUES, name="subscription_status"),
            nullable=False,
            server_default="active",
        ),
        sa.Column(
            "plan_type",
            sa.Enum(*PLAN_TYPE_VALUES, name="plan_type"),
            nullable=False,
            server_default="monthly",
        ),
        *_timestamp_columns(),
        sa.UniqueConstraint(
            "original_transaction_id",
            name="uq_subscriptions_original_transaction_id",
        ),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"])
    op.create_index(
        "idx_subscriptions_user_status",
        "subscriptions",
        ["user_id", "status"],
    )

    # ------------------------------------------------------------------
    # 2. Content catalog
    # ------------------------------------------------------------------
    op.create_table(
        "categories",
        _id_column(),
        sa.Column(
            "type",
            sa.Enum(*CATEGORY_TYPE_VALUES, name="category_type"),
            nullable=False,
        ),
        sa.Column("key", sa.String(length=100), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("background_image_url", sa.String(length=500), nullable=True),
        sa.Column("background_color", sa.String(length=50), nullable=True),
        sa.Column(
            "show_item_image",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        sa.Column("text_position", sa.String(length=20), nullable=True),
        sa.Column("text_orientation", sa.String(length=20), nullable=True),
        sa.Column("text_size", sa.String(length=20), nullable=True),
        sa.Column("display_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
    )

    op.create_table(
        "contents",
        _id_column(),
        sa.Column(
            "category_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "type",
            sa.Enum(*CONTENT_TYPE_VALUES, name="content_type"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("background_image_url", sa.String(length=500), nullable=True),
        sa.Column("audio_file_url", sa.String(length=500), nullable=True),
        sa.Column("text_content", sa.Text(), nullable=True),
        sa.Column("capture_text", sa.String(length=255), nullable=True),
        sa.Column("display_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
    )
    op.create_index(
        "idx_contents_category_order",
        "contents",
        ["category_id", "display_order"],
    )

    op.create_table(
        "child_profiles",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("avatar_type", sa.String(length=50), nullable=True),
        sa.Column("background_color", sa.String(length=50), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
    )
    op.create_index("ix_child_profiles_user_id", "child_profiles", ["user_id"])

    op.create_table(
        "favorites",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "child_profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("child_profiles.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "content_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("contents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_favorites_user_id", "favorites", ["user_id"])


def downgrade() -> None:
    """Downgrade database schema."""

    op.drop_index("ix_favorites_user_id", table_name="favorites")
    op.drop_table("favorites")
    op.drop_index("ix_child_profiles_user_id", table_name="child_profiles")
    op.drop_table("child_profiles")
    op.drop_index("idx_contents_category_order", table_name="contents")
    op.drop_table("contents")
    op.drop_table("categories")
    op.drop_index("idx_subscriptions_user_status", table_name="subscriptions")
    op.drop_index("ix_subscriptions_user_id", table_name="subscriptions")
    op.drop_table("subscriptions")
    op.drop_table("profiles")

    op.execute("DROP TYPE IF EXISTS content_type")
    op.execute("DROP TYPE IF EXISTS category_type")
    op.execute("DROP TYPE IF EXISTS plan_type")
    op.execute("DROP TYPE IF EXISTS subscription_status")
