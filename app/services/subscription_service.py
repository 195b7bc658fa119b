"""
Subscription Service
====================

Premium status and subscription records for App Store purchases.

Handles:
- Plan and expiry derivation for verified receipts
- Premium flag updates on the user's profile
- Subscription upserts keyed by the original transaction id
- Applying App Store notifications via the notification rules

Each write commits on its own. A failure between the premium update and
the subscription upsert leaves the two records out of step; nothing is
rolled back. The upsert is a read followed by a write, so two concurrent
notifications for the same transaction can race.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ErrorCodes, StoreError
from app.core.notification_rules import NotificationRule, resolve_notification
from app.db.crud import CRUDRepository
from app.models.profile import Profile
from app.models.subscription import PlanType, Subscription, SubscriptionStatus
from app.services.receipt_validator import ReceiptValidationResult
from app.utils.helpers import from_epoch_ms, utc_now

logger = logging.getLogger(__name__)

PLAN_DURATION_DAYS = {
    PlanType.MONTHLY: 30,
    PlanType.YEARLY: 365,
}

# asyncpg raises OSError subclasses (e.g. ConnectionRefusedError) before
# SQLAlchemy can wrap them when a connection is first opened
STORE_FAILURES = (SQLAlchemyError, OSError)


class SubscriptionService:
    """Service for subscription state operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.profiles = CRUDRepository(db, Profile)
        self.subscriptions = CRUDRepository(db, Subscription)

    # -------------------------------------------------------------------------
    # Product → Plan Mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def derive_plan_type(product_id: str) -> PlanType:
        """Map a product identifier to its plan (case-sensitive match)."""
        if "yearly" in product_id or "annual" in product_id:
            return PlanType.YEARLY
        return PlanType.MONTHLY

    @staticmethod
    def compute_expiry(
        plan_type: PlanType,
        expires_date_ms: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> datetime:
        """Use the validator's expiry when present, else one plan period from now."""
        if expires_date_ms:
            return from_epoch_ms(expires_date_ms)
        now = now or utc_now()
        return now + timedelta(days=PLAN_DURATION_DAYS[plan_type])

    # -------------------------------------------------------------------------
    # Store Writes
    # -------------------------------------------------------------------------

    async def update_user_premium_status(
        self,
        user_id: uuid.UUID,
        is_premium: bool,
        subscription_expiry: Optional[datetime] = None,
    ) -> None:
        """
        Set the premium flag (and expiry, when given) on the user's profile.

        Raises:
            StoreError: If the update fails.
        """
        values: dict = {"is_premium": is_premium}
        if subscription_expiry is not None:
            values["subscription_expiry"] = subscription_expiry

        try:
            updated = await self.profiles.update_where(values, id=user_id)
            await self.db.commit()
        except STORE_FAILURES as e:
            await self.db.rollback()
            raise StoreError(
                ErrorCodes.STORE_PROFILE_UPDATE_FAILED,
                f"Failed to update user premium status: {e}",
            ) from e

        if not updated:
            logger.warning("No profile row for user %s, premium flag not stored", user_id)

    async def upsert_subscription(
        self,
        user_id: uuid.UUID,
        original_transaction_id: str,
        status: SubscriptionStatus,
        plan_type: PlanType,
    ) -> None:
        """
        Create or update the subscription for ``original_transaction_id``.

        Raises:
            StoreError: If the lookup or write fails.
        """
        try:
            existing = await self.subscriptions.find_one(
                original_transaction_id=original_transaction_id
            )
        except STORE_FAILURES as e:
            await self.db.rollback()
            raise StoreError(
                ErrorCodes.STORE_SUBSCRIPTION_UPDATE_FAILED,
                f"Failed to look up subscription: {e}",
            ) from e

        if existing is not None:
            try:
                await self.subscriptions.update_where(
                    {
                        "status": status,
                        "plan_type": plan_type,
                        "updated_at": utc_now(),
                    },
                    original_transaction_id=original_transaction_id,
                )
                await self.db.commit()
            except STORE_FAILURES as e:
                await self.db.rollback()
                raise StoreError(
                    ErrorCodes.STORE_SUBSCRIPTION_UPDATE_FAILED,
                    f"Failed to update subscription: {e}",
                ) from e
            logger.info(
                "Updated subscription %s: status=%s plan=%s",
                original_transaction_id,
                status.value,
                plan_type.value,
            )
            return

        try:
            await self.subscriptions.insert(
                {
                    "user_id": user_id,
                    "original_transaction_id": original_transaction_id,
                    "status": status,
                    "plan_type": plan_type,
                }
            )
            await self.db.commit()
        except STORE_FAILURES as e:
            await self.db.rollback()
            raise StoreError(
                ErrorCodes.STORE_SUBSCRIPTION_CREATE_FAILED,
                f"Failed to create subscription: {e}",
            ) from e
        logger.info(
            "Created subscription %s for user %s: status=%s plan=%s",
            original_transaction_id,
            user_id,
            status.value,
            plan_type.value,
        )

    # -------------------------------------------------------------------------
    # Purchase Activation
    # -------------------------------------------------------------------------

    async def activate_purchase(
        self,
        user_id: uuid.UUID,
        product_id: str,
        validation: ReceiptValidationResult,
    ) -> tuple[PlanType, datetime]:
        """
        Record a validated purchase: premium flag first, then the subscription.

        Returns:
            The derived plan type and the expiry that was stored.
        """
        plan_type = self.derive_plan_type(product_id)
        expiry = self.compute_expiry(plan_type, validation.expires_date)

        await self.update_user_premium_status(user_id, True, expiry)
        await self.upsert_subscription(
            user_id=user_id,
            original_transaction_id=validation.original_transaction_id,
            status=SubscriptionStatus.ACTIVE,
            plan_type=plan_type,
        )
        return plan_type, expiry

    # -------------------------------------------------------------------------
    # Notification Handling
    # -------------------------------------------------------------------------

    async def handle_subscription_notification(
        self,
        user_id: uuid.UUID,
        notification_type: str,
        original_transaction_id: Optional[str] = None,
    ) -> NotificationRule:
        """
        Apply the state change a notification implies.

        The premium flag is written when the rule sets one; the subscription
        is upserted only when the rule sets a status and a transaction id is
        known. The plan is recorded as monthly since the notification alone
        does not carry it.
        """
        rule = resolve_notification(notification_type)

        if not rule.changes_state:
            logger.info("Unhandled notification type: %s", notification_type)
            return rule

        if rule.is_premium is not None:
            await self.update_user_premium_status(user_id, rule.is_premium)

        if rule.status is not None and original_transaction_id:
            await self.upsert_subscription(
                user_id=user_id,
                original_transaction_id=original_transaction_id,
                status=rule.status,
                plan_type=PlanType.MONTHLY,
            )

        return rule
