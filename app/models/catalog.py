"""
Catalog Models
==============

SQLAlchemy models for the children's content catalog: categories, content
items, child profiles and favorites.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    enum_values,
)

# =============================================================================
# Enums
# =============================================================================

class CategoryType(str, Enum):
    """How a category is presented in the app."""
    CARD = "card"
    STORY = "story"
    PLAY = "play"
    AWARENESS = "awareness"
    BEDTIME = "bedtime"


class ContentType(str, Enum):
    """Kind of content item."""
    STORY = "story"
    CARD = "card"
    GAME_COLORING = "game-coloring"
    GAME_MATCHING = "game-matching"
    GAME_COUNTING = "game-counting"
    GAME_DRAWING = "game-drawing"
    GAME_FIND_SHAPE = "game-find-shape"
    GAME_WHAT_HEAR = "game-what-hear"
    AWARENESS = "awareness"
    BEDTIME = "bedtime"


# =============================================================================
# Models
# =============================================================================

class Category(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Content category shown on the home screen."""

    __tablename__ = "categories"

    type: Mapped[CategoryType] = mapped_column(
        SQLEnum(CategoryType, name="category_type", values_callable=enum_values),
        nullable=False,
    )
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    background_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    background_color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    show_item_image: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    text_position: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    text_orientation: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    text_size: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    contents: Mapped[list["Content"]] = relationship(
        "Content",
        back_populates="category",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Category(key={self.key}, type={self.type})>"


class Content(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """A story, card or game belonging to a category."""

    __tablename__ = "contents"

    category_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[ContentType] = mapped_column(
        SQLEnum(ContentType, name="content_type", values_callable=enum_values),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    background_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    audio_file_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    text_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    capture_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[Optional[dict]] = mapped_column(
        "metadata",
        JSONB,
        nullable=True,
        default=dict,
    )

    category: Mapped["Category"] = relationship(
        "Category",
        back_populates="contents",
    )

    __table_args__ = (
        Index("idx_contents_category_order", "category_id", "display_order"),
    )

    def __repr__(self) -> str:
        return f"<Content(title={self.title}, type={self.type})>"


class ChildProfile(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """A child using the app under a parent account."""

    __tablename__ = "child_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    background_color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<ChildProfile(user_id={self.user_id}, name={self.name})>"


class Favorite(Base, UUIDPrimaryKeyMixin):
    """A content item marked as favorite."""

    __tablename__ = "favorites"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
    )
    child_profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("child_profiles.id", ondelete="CASCADE"),
        nullable=True,
    )
    content_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("contents.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, content_id={self.content_id})>"
