"""
Receipt Verification Endpoint
=============================

Validates an in-app purchase receipt and records premium state.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidReceiptError
from app.db.session import get_db
from app.schemas.common import BaseResponse
from app.schemas.receipt import VerifyReceiptData, VerifyReceiptRequest
from app.services.receipt_validator import mock_apple_validation
from app.services.subscription_service import SubscriptionService
from app.utils.helpers import format_datetime

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/verify-receipt",
    response_model=BaseResponse[VerifyReceiptData],
    response_model_exclude_none=True,
)
async def verify_receipt(
    body: VerifyReceiptRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """
    Verify a purchase receipt and mark the user premium.

    Writes, in order:
    1. ``profiles.is_premium`` / ``subscription_expiry`` for the user
    2. the ``subscriptions`` row for the returned transaction id (status active)
    """
    validation = await mock_apple_validation(body.receipt_data, body.product_id)

    if not validation.is_valid:
        logger.warning("Receipt rejected for user %s, product %s", body.user_id, body.product_id)
        raise InvalidReceiptError()

    subscription_service = SubscriptionService(db)
    plan_type, expiry = await subscription_service.activate_purchase(
        user_id=body.user_id,
        product_id=body.product_id,
        validation=validation,
    )

    logger.info(
        "Receipt verified: user=%s product=%s plan=%s transaction=%s",
        body.user_id,
        body.product_id,
        plan_type.value,
        validation.original_transaction_id,
    )

    return BaseResponse(
        success=True,
        data=VerifyReceiptData(
            original_transaction_id=validation.original_transaction_id,
            is_premium=True,
            subscription_expiry=format_datetime(expiry),
            plan_type=plan_type.value,
        ),
    )
