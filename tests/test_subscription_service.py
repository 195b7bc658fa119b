"""
Subscription Service Tests
==========================

Tests for SubscriptionService including:
- Plan derivation and expiry computation
- Premium flag updates
- Subscription upsert (insert vs update)
- Store failure wrapping
- Notification handling
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
import uuid

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import ErrorCodes, StoreError
from app.models.subscription import PlanType, Subscription, SubscriptionStatus
from app.services.receipt_validator import ReceiptValidationResult
from app.services.subscription_service import SubscriptionService


USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
TRANSACTION_ID = "1000000123456789"


def _existing_subscription() -> Subscription:
    return Subscription(
        user_id=USER_ID,
        original_transaction_id=TRANSACTION_ID,
        status=SubscriptionStatus.ACTIVE,
        plan_type=PlanType.MONTHLY,
    )


# ---------------------------------------------------------------------------
# Plan / expiry
# ---------------------------------------------------------------------------

class TestDerivePlanType:

    @pytest.mark.parametrize(
        "product_id",
        ["com.app.premium.yearly", "pro_annual", "yearly"],
    )
    def test_yearly(self, product_id):
        assert SubscriptionService.derive_plan_type(product_id) == PlanType.YEARLY

    @pytest.mark.parametrize(
        "product_id",
        ["com.app.premium.monthly", "weekly_pass", "", "com.app.YEARLY"],
    )
    def test_monthly(self, product_id):
        # Matching is case-sensitive
        assert SubscriptionService.derive_plan_type(product_id) == PlanType.MONTHLY


class TestComputeExpiry:

    NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_monthly_is_thirty_days(self):
        expiry = SubscriptionService.compute_expiry(PlanType.MONTHLY, now=self.NOW)
        assert expiry == self.NOW + timedelta(days=30)

    def test_yearly_is_365_days(self):
        expiry = SubscriptionService.compute_expiry(PlanType.YEARLY, now=self.NOW)
        assert expiry == self.NOW + timedelta(days=365)

    def test_validator_expiry_wins(self):
        expires_ms = 1_800_000_000_000
        expiry = SubscriptionService.compute_expiry(
            PlanType.YEARLY, expires_date_ms=expires_ms, now=self.NOW
        )
        assert expiry == datetime.fromtimestamp(1_800_000_000, tz=timezone.utc)


# ---------------------------------------------------------------------------
# Premium flag
# ---------------------------------------------------------------------------

class TestUpdateUserPremiumStatus:

    @pytest.mark.asyncio
    async def test_updates_and_commits(self, make_session):
        db = make_session()
        service = SubscriptionService(db)
        expiry = datetime(2026, 2, 1, tzinfo=timezone.utc)

        await service.update_user_premium_status(USER_ID, True, expiry)

        stmt = db.execute.await_args.args[0]
        assert stmt.is_update
        assert stmt.table.name == "profiles"
        params = stmt.compile().params
        assert params["is_premium"] is True
        assert params["subscription_expiry"] == expiry
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expiry_left_untouched_when_not_given(self, make_session):
        db = make_session()
        service = SubscriptionService(db)

        await service.update_user_premium_status(USER_ID, False)

        params = db.execute.await_args.args[0].compile().params
        assert params["is_premium"] is False
        assert "subscription_expiry" not in params

    @pytest.mark.asyncio
    async def test_missing_profile_is_not_an_error(self, make_session, caplog):
        db = make_session(rowcount=0)
        service = SubscriptionService(db)

        await service.update_user_premium_status(USER_ID, True)

        assert "No profile row" in caplog.text

    @pytest.mark.asyncio
    async def test_store_failure_raises_store_error(self, make_session):
        db = make_session()
        db.execute.side_effect = SQLAlchemyError("timeout")
        service = SubscriptionService(db)

        with pytest.raises(StoreError) as exc_info:
            await service.update_user_premium_status(USER_ID, True)

        assert exc_info.value.status_code == 500
        assert exc_info.value.code == ErrorCodes.STORE_PROFILE_UPDATE_FAILED
        assert exc_info.value.message == "Failed to update user premium status: timeout"
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connection_refused_raises_store_error(self, make_session):
        db = make_session()
        db.execute.side_effect = ConnectionRefusedError(111, "Connect call failed")
        service = SubscriptionService(db)

        with pytest.raises(StoreError) as exc_info:
            await service.update_user_premium_status(USER_ID, True)

        assert exc_info.value.code == ErrorCodes.STORE_PROFILE_UPDATE_FAILED
        assert "Connect call failed" in exc_info.value.message


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------

class TestUpsertSubscription:

    @pytest.mark.asyncio
    async def test_inserts_when_absent(self, make_session):
        db = make_session(first=None)
        service = SubscriptionService(db)

        await service.upsert_subscription(
            USER_ID, TRANSACTION_ID, SubscriptionStatus.ACTIVE, PlanType.YEARLY
        )

        db.add.assert_called_once()
        created = db.add.call_args.args[0]
        assert created.original_transaction_id == TRANSACTION_ID
        assert created.user_id == USER_ID
        assert created.plan_type == PlanType.YEARLY
        db.flush.assert_awaited_once()
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_updates_when_present(self, make_session):
        db = make_session(first=_existing_subscription())
        service = SubscriptionService(db)

        await service.upsert_subscription(
            USER_ID, TRANSACTION_ID, SubscriptionStatus.EXPIRED, PlanType.MONTHLY
        )

        db.add.assert_not_called()
        select_stmt, update_stmt = [c.args[0] for c in db.execute.await_args_list]
        assert select_stmt.is_select
        assert update_stmt.is_update
        params = update_stmt.compile().params
        assert params["status"] == SubscriptionStatus.EXPIRED
        assert params["plan_type"] == PlanType.MONTHLY
        assert "updated_at" in params
        assert "user_id" not in params
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_insert_failure(self, make_session):
        db = make_session(first=None)
        db.flush.side_effect = SQLAlchemyError("duplicate key")
        service = SubscriptionService(db)

        with pytest.raises(StoreError) as exc_info:
            await service.upsert_subscription(
                USER_ID, TRANSACTION_ID, SubscriptionStatus.ACTIVE, PlanType.MONTHLY
            )

        assert exc_info.value.code == ErrorCodes.STORE_SUBSCRIPTION_CREATE_FAILED
        assert exc_info.value.message.startswith("Failed to create subscription")
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_failure(self, make_session):
        db = make_session(first=_existing_subscription())
        db.commit.side_effect = SQLAlchemyError("lost connection")
        service = SubscriptionService(db)

        with pytest.raises(StoreError) as exc_info:
            await service.upsert_subscription(
                USER_ID, TRANSACTION_ID, SubscriptionStatus.ACTIVE, PlanType.MONTHLY
            )

        assert exc_info.value.code == ErrorCodes.STORE_SUBSCRIPTION_UPDATE_FAILED
        assert exc_info.value.message.startswith("Failed to update subscription")

    @pytest.mark.asyncio
    async def test_lookup_connection_failure(self, make_session):
        db = make_session()
        db.execute.side_effect = OSError("Network is unreachable")
        service = SubscriptionService(db)

        with pytest.raises(StoreError) as exc_info:
            await service.upsert_subscription(
                USER_ID, TRANSACTION_ID, SubscriptionStatus.ACTIVE, PlanType.MONTHLY
            )

        assert exc_info.value.message == (
            "Failed to look up subscription: Network is unreachable"
        )


# ---------------------------------------------------------------------------
# Purchase activation
# ---------------------------------------------------------------------------

class TestActivatePurchase:

    @pytest.mark.asyncio
    async def test_premium_written_before_subscription(self, make_session):
        service = SubscriptionService(make_session())
        calls = []
        service.update_user_premium_status = AsyncMock(
            side_effect=lambda *a, **kw: calls.append("premium")
        )
        service.upsert_subscription = AsyncMock(
            side_effect=lambda *a, **kw: calls.append("subscription")
        )
        validation = ReceiptValidationResult(
            is_valid=True,
            original_transaction_id="mock_1_abcdefgh",
            product_id="com.app.premium.yearly",
        )

        plan_type, expiry = await service.activate_purchase(
            USER_ID, "com.app.premium.yearly", validation
        )

        assert calls == ["premium", "subscription"]
        assert plan_type == PlanType.YEARLY
        service.update_user_premium_status.assert_awaited_once_with(USER_ID, True, expiry)
        kwargs = service.upsert_subscription.await_args.kwargs
        assert kwargs["status"] == SubscriptionStatus.ACTIVE
        assert kwargs["original_transaction_id"] == "mock_1_abcdefgh"

    @pytest.mark.asyncio
    async def test_premium_failure_skips_subscription(self, make_session):
        service = SubscriptionService(make_session())
        service.update_user_premium_status = AsyncMock(
            side_effect=StoreError(ErrorCodes.STORE_PROFILE_UPDATE_FAILED, "down")
        )
        service.upsert_subscription = AsyncMock()
        validation = ReceiptValidationResult(
            is_valid=True,
            original_transaction_id="mock_1_abcdefgh",
            product_id="monthly",
        )

        with pytest.raises(StoreError):
            await service.activate_purchase(USER_ID, "monthly", validation)

        service.upsert_subscription.assert_not_awaited()


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class TestHandleSubscriptionNotification:

    @pytest.mark.asyncio
    async def test_expire_clears_premium_and_expires_subscription(self, make_session):
        service = SubscriptionService(make_session())
        with patch.object(service, "update_user_premium_status", AsyncMock()) as premium, \
                patch.object(service, "upsert_subscription", AsyncMock()) as upsert:
            await service.handle_subscription_notification(USER_ID, "EXPIRE", TRANSACTION_ID)

        premium.assert_awaited_once_with(USER_ID, False)
        upsert.assert_awaited_once_with(
            user_id=USER_ID,
            original_transaction_id=TRANSACTION_ID,
            status=SubscriptionStatus.EXPIRED,
            plan_type=PlanType.MONTHLY,
        )

    @pytest.mark.asyncio
    async def test_cancel_leaves_premium_flag(self, make_session):
        service = SubscriptionService(make_session())
        with patch.object(service, "update_user_premium_status", AsyncMock()) as premium, \
                patch.object(service, "upsert_subscription", AsyncMock()) as upsert:
            await service.handle_subscription_notification(USER_ID, "CANCEL", TRANSACTION_ID)

        premium.assert_not_awaited()
        assert upsert.await_args.kwargs["status"] == SubscriptionStatus.GRACE_PERIOD

    @pytest.mark.asyncio
    async def test_no_subscription_write_without_transaction_id(self, make_session):
        service = SubscriptionService(make_session())
        with patch.object(service, "update_user_premium_status", AsyncMock()) as premium, \
                patch.object(service, "upsert_subscription", AsyncMock()) as upsert:
            await service.handle_subscription_notification(USER_ID, "DID_RENEW")

        premium.assert_awaited_once_with(USER_ID, True)
        upsert.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("notification_type", ["PRICE_INCREASE", "SOMETHING_NEW"])
    async def test_no_writes_for_informational_types(self, make_session, notification_type):
        db = make_session()
        service = SubscriptionService(db)

        rule = await service.handle_subscription_notification(
            USER_ID, notification_type, TRANSACTION_ID
        )

        assert not rule.changes_state
        db.execute.assert_not_awaited()
        db.commit.assert_not_awaited()
