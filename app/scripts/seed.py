#!/usr/bin/env python
"""
Seed the content catalog with sample data.

Usage:
    python -m app.scripts.seed

This script:
1. WIPES favorites, contents and categories
2. Inserts sample categories and their content items
3. Creates (or resets the password of) the demo auth user
4. Creates a demo child profile for that user if none is active
"""
from __future__ import annotations

import asyncio
import logging
import sys
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.crud import CRUDRepository
from app.db.session import close_db, get_session_factory
from app.models.catalog import (
    Category,
    CategoryType,
    ChildProfile,
    Content,
    ContentType,
    Favorite,
)
from app.services.supabase_admin import SupabaseAdminClient

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://placehold.co/600x400"
PLACEHOLDER_BACKGROUND = "https://placehold.co/1200x800"

DEMO_USER_EMAIL = "test@demo.com"
DEMO_USER_PASSWORD = "password123"

# ============================================================================
# CATALOG DATA
# ============================================================================
CATEGORIES = [
    {
        "type": CategoryType.BEDTIME,
        "key": "uyku-masallari",
        "name": "Uyku Masalları",
        "description": "Uyumadan önce dinlenecek güzel masallar",
        "image_url": PLACEHOLDER_IMAGE,
        "background_color": "bg-blue-400",
        "show_item_image": True,
        "text_position": "bottom",
        "text_orientation": "horizontal",
        "text_size": "medium",
        "display_order": 1,
    },
    {
        "type": CategoryType.CARD,
        "key": "meslekler",
        "name": "Meslekleri Tanıyalım",
        "description": "Farklı meslekleri öğrenelim",
        "image_url": PLACEHOLDER_IMAGE,
        "background_color": "bg-green-400",
        "show_item_image": True,
        "text_position": "bottom",
        "text_orientation": "horizontal",
        "text_size": "medium",
        "display_order": 2,
    },
    {
        "type": CategoryType.PLAY,
        "key": "matematik",
        "name": "Eğlenceli Matematik",
        "description": "Matematik oyunları ve aktiviteler",
        "image_url": PLACEHOLDER_IMAGE,
        "background_color": "bg-purple-400",
        "show_item_image": True,
        "text_position": "center",
        "text_orientation": "horizontal",
        "text_size": "medium",
        "display_order": 3,
    },
]

# Content items keyed by the category they belong to
CONTENTS_BY_CATEGORY = {
    "uyku-masallari": [
        {
            "type": ContentType.STORY,
            "title": "Ayıcık ve Yıldızlar",
            "slug": "ayicik-ve-yildizlar",
            "image_url": PLACEHOLDER_IMAGE,
            "background_image_url": PLACEHOLDER_BACKGROUND,
            "audio_file_url": PLACEHOLDER_IMAGE,
            "text_content": "Bir varmış bir yokmuş, evvel zaman içinde...",
            "capture_text": "Ayıcık ve Yıldızlar",
            "display_order": 1,
            "metadata_": {"page_count": 10, "duration_minutes": 5},
        },
        {
            "type": ContentType.STORY,
            "title": "Büyülü Orman",
            "slug": "buyulu-orman",
            "image_url": PLACEHOLDER_IMAGE,
            "background_image_url": PLACEHOLDER_BACKGROUND,
            "audio_file_url": PLACEHOLDER_IMAGE,
            "text_content": "Büyülü ormanda yaşayan sevimli hayvanların hikayesi...",
            "capture_text": "Büyülü Orman",
            "display_order": 2,
            "metadata_": {"page_count": 12, "duration_minutes": 6},
        },
    ],
    "meslekler": [
        {
            "type": ContentType.CARD,
            "title": "İtfaiyeci",
            "slug": "itfaiyeci",
            "image_url": PLACEHOLDER_IMAGE,
            "text_content": "İtfaiyeciler yangınları söndürür ve insanları kurtarır.",
            "capture_text": "İtfaiyeci",
            "display_order": 1,
            "metadata_": {"description": "İtfaiyecilerin ne yaptığını öğrenelim"},
        },
        {
            "type": ContentType.CARD,
            "title": "Doktor",
            "slug": "doktor",
            "image_url": PLACEHOLDER_IMAGE,
            "text_content": "Doktorlar hastaları iyileştirir ve sağlığımızı korur.",
            "capture_text": "Doktor",
            "display_order": 2,
            "metadata_": {"description": "Doktorların ne yaptığını öğrenelim"},
        },
    ],
    "matematik": [
        {
            "type": ContentType.GAME_COUNTING,
            "title": "Sayıları Sayalım",
            "slug": "sayilari-sayalim",
            "image_url": PLACEHOLDER_IMAGE,
            "display_order": 1,
            "metadata_": {
                "difficulty": "easy",
                "instructions": "Ekrandaki nesneleri sayın",
                "svg_id": "counting-template-1",
            },
        },
    ],
}

DEMO_CHILD_PROFILE = {
    "name": "Test Çocuk",
    "avatar_type": "boy",
    "background_color": "bg-blue-100",
    "is_active": True,
}


class SeedError(Exception):
    """A seed step failed."""


@dataclass
class SeedSummary:
    categories: int
    contents: int
    user_id: str
    user_created: bool
    child_profile_created: bool


def build_contents(category_ids: dict[str, uuid.UUID]) -> list[dict]:
    """Attach category ids to the content rows."""
    rows = []
    for key, items in CONTENTS_BY_CATEGORY.items():
        if key not in category_ids:
            raise SeedError(f"Category not found: {key}")
        rows.extend({**item, "category_id": category_ids[key]} for item in items)
    return rows


async def wipe_catalog(session: AsyncSession) -> None:
    """Delete catalog rows, children before parents."""
    for model in (Favorite, Content, Category):
        deleted = await CRUDRepository(session, model).delete_all()
        print(f"   - {model.__tablename__}: {deleted} row(s) deleted")
    await session.commit()


async def insert_catalog(session: AsyncSession) -> tuple[int, int]:
    """Insert categories then contents; returns both counts."""
    categories = await CRUDRepository(session, Category).insert_many(CATEGORIES)
    category_ids = {category.key: category.id for category in categories}

    contents = await CRUDRepository(session, Content).insert_many(
        build_contents(category_ids)
    )
    await session.commit()
    return len(categories), len(contents)


async def ensure_demo_user(admin: SupabaseAdminClient) -> tuple[str, bool]:
    """Create the demo auth user, or reset its password if it exists."""
    existing = await admin.find_user_by_email(DEMO_USER_EMAIL)
    if existing:
        print("⚠️  Demo user already exists, resetting password...")
        await admin.update_user_by_id(existing["id"], {"password": DEMO_USER_PASSWORD})
        return existing["id"], False

    user = await admin.create_user(DEMO_USER_EMAIL, DEMO_USER_PASSWORD, email_confirm=True)
    return user["id"], True


async def ensure_child_profile(session: AsyncSession, user_id: str) -> bool:
    """Create the demo child profile unless an active one exists."""
    profiles = CRUDRepository(session, ChildProfile)
    user_uuid = uuid.UUID(user_id)

    if await profiles.find_one(user_id=user_uuid, deleted_at=None):
        return False

    await profiles.insert({"user_id": user_uuid, **DEMO_CHILD_PROFILE})
    await session.commit()
    return True


async def seed(session: AsyncSession, admin: SupabaseAdminClient) -> SeedSummary:
    """Run every seed step in order."""
    print("🧹 Wiping catalog...")
    await wipe_catalog(session)

    print("📁 Inserting categories and contents...")
    category_count, content_count = await insert_catalog(session)
    print(f"✅ {category_count} categories, {content_count} contents inserted")

    print("👤 Ensuring demo user...")
    user_id, user_created = await ensure_demo_user(admin)

    print("👶 Ensuring demo child profile...")
    child_created = await ensure_child_profile(session, user_id)
    if not child_created:
        print("⚠️  Demo child profile already exists")

    return SeedSummary(
        categories=category_count,
        contents=content_count,
        user_id=user_id,
        user_created=user_created,
        child_profile_created=child_created,
    )


async def main() -> int:
    print("🌱 Seeding database...")
    try:
        async with get_session_factory()() as session:
            summary = await seed(session, SupabaseAdminClient())
    except Exception:
        logger.exception("Seed failed")
        return 1
    finally:
        await close_db()

    print("\n🎉 Seed complete!")
    print("\n📋 Summary:")
    print(f"   - {summary.categories} categories inserted")
    print(f"   - {summary.contents} contents inserted")
    print(f"   - Demo user: {DEMO_USER_EMAIL} / {DEMO_USER_PASSWORD}")
    print(f"   - User ID: {summary.user_id}")
    return 0


def run() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
