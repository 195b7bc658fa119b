"""
Webhooks API Endpoints
======================

Receives App Store server-to-server notifications (v1).

User mapping:
    The notification identifies a subscription by its original transaction
    id only. No transaction -> user mapping is stored yet, so the handler
    logs the rule it resolved and acknowledges the notification without
    writing. ``SubscriptionService.handle_subscription_notification`` applies
    the same rule once a user id is available.

Returns 200 for every notification that passes schema validation.
"""

import logging

from fastapi import APIRouter

from app.core.notification_rules import is_known_notification, resolve_notification
from app.schemas.common import BaseResponse
from app.schemas.receipt import AppleWebhookRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/apple",
    response_model=BaseResponse[dict],
    response_model_exclude_none=True,
)
async def apple_webhook(body: AppleWebhookRequest):
    """
    Handle an App Store server notification.

    Logs the notification type, the first ``latest_receipt_info`` entry and
    the state change the type maps to.
    """
    notification_type = body.notification_type.value
    logger.info("Received Apple webhook: %s", notification_type)

    receipt = body.latest_receipt_entry
    logger.info(
        "Apple webhook details: type=%s original_transaction_id=%s product_id=%s expires_date_ms=%s",
        notification_type,
        receipt.original_transaction_id if receipt else None,
        receipt.product_id if receipt else None,
        receipt.expires_date_ms if receipt else None,
    )

    rule = resolve_notification(notification_type)
    if not is_known_notification(notification_type):
        logger.warning("Unknown notification type: %s", notification_type)
    else:
        logger.info(
            "%s (premium=%s, status=%s)",
            rule.description,
            "unchanged" if rule.is_premium is None else rule.is_premium,
            rule.status.value if rule.status else "unchanged",
        )

    if rule.changes_state:
        logger.info(
            "No user mapping for %s notification, subscription state not updated",
            notification_type,
        )

    return BaseResponse(success=True, message="Webhook processed")
