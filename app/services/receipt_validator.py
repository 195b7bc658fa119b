"""
Receipt Validator
=================

Mock App Store receipt validation.

No request is made to Apple: every receipt is reported valid and gets a
freshly synthesized transaction id. Production deployments must replace
``mock_apple_validation`` with a call to the App Store verification API.
"""

import asyncio
import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

from app.config import settings

logger = logging.getLogger(__name__)

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_DAY_MS = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class ReceiptValidationResult:
    """Outcome of validating a receipt."""

    is_valid: bool
    original_transaction_id: str
    product_id: str
    # Epoch milliseconds; None lets the caller derive expiry from the plan
    expires_date: Optional[int] = None


def generate_mock_transaction_id(now_ms: Optional[int] = None) -> str:
    """Build a ``mock_<epoch-ms>_<random base36>`` transaction id."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(8))
    return f"mock_{now_ms}_{suffix}"


async def mock_apple_validation(
    receipt_data: str,
    product_id: str,
) -> ReceiptValidationResult:
    """
    Pretend to validate a receipt with Apple.

    Args:
        receipt_data: Base64 receipt from the client (not inspected).
        product_id: Product identifier the client purchased.

    Returns:
        A successful ReceiptValidationResult. ``expires_date`` is only set
        when ``MOCK_RECEIPT_EXPIRY_DAYS`` is configured.
    """
    # Simulated network round-trip
    await asyncio.sleep(settings.MOCK_RECEIPT_DELAY_MS / 1000)

    now_ms = int(time.time() * 1000)
    expires_date = None
    if settings.MOCK_RECEIPT_EXPIRY_DAYS:
        expires_date = now_ms + settings.MOCK_RECEIPT_EXPIRY_DAYS * _DAY_MS

    result = ReceiptValidationResult(
        is_valid=True,
        original_transaction_id=generate_mock_transaction_id(now_ms),
        product_id=product_id,
        expires_date=expires_date,
    )
    logger.info(
        "Mock receipt validation: product=%s transaction=%s receipt_bytes=%d",
        product_id,
        result.original_transaction_id,
        len(receipt_data),
    )
    return result
