"""
Pydantic Schemas
================

Request/response schemas for API validation.
"""

from app.schemas.common import (
    BaseResponse,
    ErrorResponse,
    HealthResponse,
)
from app.schemas.receipt import (
    AppleNotificationType,
    AppleWebhookRequest,
    VerifyReceiptData,
    VerifyReceiptRequest,
)

__all__ = [
    "BaseResponse",
    "ErrorResponse",
    "HealthResponse",
    "AppleNotificationType",
    "AppleWebhookRequest",
    "VerifyReceiptData",
    "VerifyReceiptRequest",
]
