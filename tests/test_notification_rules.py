"""
Notification Rule Tests
=======================

Every App Store notification type maps to a premium/status outcome.
"""

import pytest

from app.core.notification_rules import (
    NOTIFICATION_RULES,
    UNKNOWN_NOTIFICATION_RULE,
    is_known_notification,
    resolve_notification,
)
from app.models.subscription import SubscriptionStatus
from app.schemas.receipt import AppleNotificationType


def test_every_notification_type_has_a_rule():
    assert set(NOTIFICATION_RULES) == {t.value for t in AppleNotificationType}


@pytest.mark.parametrize(
    "notification_type",
    ["INITIAL_BUY", "DID_RENEW", "RENEWAL_EXTENDED", "RENEWAL_EXTENSION"],
)
def test_activating_types(notification_type):
    rule = resolve_notification(notification_type)
    assert rule.is_premium is True
    assert rule.status == SubscriptionStatus.ACTIVE


@pytest.mark.parametrize("notification_type", ["CANCEL", "DID_CHANGE_RENEWAL_STATUS"])
def test_grace_period_types_keep_premium_flag(notification_type):
    rule = resolve_notification(notification_type)
    assert rule.is_premium is None
    assert rule.status == SubscriptionStatus.GRACE_PERIOD
    assert rule.changes_state


@pytest.mark.parametrize(
    "notification_type",
    ["EXPIRE", "DID_FAIL_TO_RENEW", "GRACE_PERIOD_EXPIRED", "REFUND", "REVOKE"],
)
def test_expiring_types(notification_type):
    rule = resolve_notification(notification_type)
    assert rule.is_premium is False
    assert rule.status == SubscriptionStatus.EXPIRED


@pytest.mark.parametrize("notification_type", ["DID_CHANGE_RENEWAL_PREF", "PRICE_INCREASE"])
def test_informational_types_change_nothing(notification_type):
    rule = resolve_notification(notification_type)
    assert not rule.changes_state
    assert is_known_notification(notification_type)


def test_unknown_type_changes_nothing():
    rule = resolve_notification("CONSUMPTION_REQUEST")
    assert rule is UNKNOWN_NOTIFICATION_RULE
    assert not rule.changes_state
    assert not is_known_notification("CONSUMPTION_REQUEST")
