"""
Database Models
===============

SQLAlchemy ORM models for all database entities.

All models are imported here to ensure they are registered
with SQLAlchemy's metadata for migrations and relationships.
"""

from app.models.profile import Profile
from app.models.subscription import (
    Subscription,
    SubscriptionStatus,
    PlanType,
)
from app.models.catalog import (
    Category,
    CategoryType,
    ChildProfile,
    Content,
    ContentType,
    Favorite,
)

__all__ = [
    # Profile
    "Profile",
    # Subscription
    "Subscription",
    "SubscriptionStatus",
    "PlanType",
    # Catalog
    "Category",
    "CategoryType",
    "ChildProfile",
    "Content",
    "ContentType",
    "Favorite",
]
