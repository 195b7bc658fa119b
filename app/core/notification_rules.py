"""
Notification Rules
==================

Mapping from App Store notification types to the premium flag and
subscription status they imply.
"""

from dataclasses import dataclass
from typing import Optional

from app.models.subscription import SubscriptionStatus


@dataclass(frozen=True)
class NotificationRule:
    """
    Target state for a notification type.

    ``None`` means the value is left unchanged.
    """

    description: str
    is_premium: Optional[bool] = None
    status: Optional[SubscriptionStatus] = None

    @property
    def changes_state(self) -> bool:
        return self.is_premium is not None or self.status is not None


_ACTIVATE = (True, SubscriptionStatus.ACTIVE)
_GRACE = (None, SubscriptionStatus.GRACE_PERIOD)
_EXPIRE = (False, SubscriptionStatus.EXPIRED)

# Notification type -> rule
NOTIFICATION_RULES: dict[str, NotificationRule] = {
    "INITIAL_BUY": NotificationRule("Initial purchase detected", *_ACTIVATE),
    "DID_RENEW": NotificationRule("Subscription renewed", *_ACTIVATE),
    "RENEWAL_EXTENDED": NotificationRule("Renewal extended", *_ACTIVATE),
    "RENEWAL_EXTENSION": NotificationRule("Renewal extension", *_ACTIVATE),
    # Cancelled, access continues until expiry
    "CANCEL": NotificationRule("Subscription cancelled", *_GRACE),
    "DID_CHANGE_RENEWAL_STATUS": NotificationRule("Renewal status changed", *_GRACE),
    "EXPIRE": NotificationRule("Subscription expired", *_EXPIRE),
    "DID_FAIL_TO_RENEW": NotificationRule("Subscription renewal failed", *_EXPIRE),
    "GRACE_PERIOD_EXPIRED": NotificationRule("Grace period expired", *_EXPIRE),
    "REFUND": NotificationRule("Subscription refunded", *_EXPIRE),
    "REVOKE": NotificationRule("Subscription revoked", *_EXPIRE),
    "DID_CHANGE_RENEWAL_PREF": NotificationRule("Renewal preference changed"),
    "PRICE_INCREASE": NotificationRule("Price increase notification"),
}

UNKNOWN_NOTIFICATION_RULE = NotificationRule("Unknown notification type")


def resolve_notification(notification_type: str) -> NotificationRule:
    """Get the rule for a notification type; unknown types change nothing."""
    return NOTIFICATION_RULES.get(notification_type, UNKNOWN_NOTIFICATION_RULE)


def is_known_notification(notification_type: str) -> bool:
    """Check whether a notification type has an explicit rule."""
    return notification_type in NOTIFICATION_RULES
