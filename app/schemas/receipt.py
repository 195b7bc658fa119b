"""
Receipt Schemas
===============

Pydantic schemas for receipt verification and App Store server
notifications (v1 payload).
"""

from enum import Enum
import re
from typing import Any, Optional
import uuid

from pydantic import BaseModel, Field, ValidationError, field_validator

_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\Z"
)


# ─── App Store Notification Types ────────────────────────────────────────────


class AppleNotificationType(str, Enum):
    """Notification types the App Store sends to the status URL."""

    INITIAL_BUY = "INITIAL_BUY"
    DID_RENEW = "DID_RENEW"
    DID_FAIL_TO_RENEW = "DID_FAIL_TO_RENEW"
    DID_CHANGE_RENEWAL_PREF = "DID_CHANGE_RENEWAL_PREF"
    DID_CHANGE_RENEWAL_STATUS = "DID_CHANGE_RENEWAL_STATUS"
    CANCEL = "CANCEL"
    EXPIRE = "EXPIRE"
    GRACE_PERIOD_EXPIRED = "GRACE_PERIOD_EXPIRED"
    REFUND = "REFUND"
    REVOKE = "REVOKE"
    PRICE_INCREASE = "PRICE_INCREASE"
    RENEWAL_EXTENDED = "RENEWAL_EXTENDED"
    RENEWAL_EXTENSION = "RENEWAL_EXTENSION"


class AppleEnvironment(str, Enum):
    """App Store environment that produced the notification."""

    SANDBOX = "Sandbox"
    PRODUCTION = "Production"


# ─── Receipt Verification ────────────────────────────────────────────────────


class VerifyReceiptRequest(BaseModel):
    """Request schema for ``POST /api/verify-receipt``."""

    user_id: uuid.UUID = Field(alias="userId")
    receipt_data: str = Field(alias="receiptData")
    product_id: str = Field(alias="productId")

    class Config:
        populate_by_name = True

    @field_validator("user_id", mode="before")
    @classmethod
    def validate_user_id(cls, v: Any) -> Any:
        # Only the hyphenated 8-4-4-4-12 form; braces, urn: and bare hex are rejected
        if isinstance(v, uuid.UUID):
            return v
        if not isinstance(v, str) or not _UUID_PATTERN.match(v):
            raise ValueError("userId must be a valid UUID")
        return uuid.UUID(v)

    @field_validator("receipt_data")
    @classmethod
    def validate_receipt_data(cls, v: str) -> str:
        if not v:
            raise ValueError("receiptData is required")
        return v

    @field_validator("product_id")
    @classmethod
    def validate_product_id(cls, v: str) -> str:
        if not v:
            raise ValueError("productId is required")
        return v


class VerifyReceiptData(BaseModel):
    """Payload returned after a successful verification."""

    original_transaction_id: str = Field(alias="originalTransactionId")
    is_premium: bool = Field(alias="isPremium")
    subscription_expiry: str = Field(alias="subscriptionExpiry")
    plan_type: str = Field(alias="planType")

    class Config:
        populate_by_name = True


# ─── App Store Server Notification (v1) ──────────────────────────────────────


class LatestReceiptInfo(BaseModel):
    """
    One entry of ``unified_receipt.latest_receipt_info``.

    Apple sends these as strings; numbers are accepted and kept as strings.
    """

    original_transaction_id: Optional[str] = None
    transaction_id: Optional[str] = None
    product_id: Optional[str] = None
    expires_date_ms: Optional[str] = None

    class Config:
        extra = "allow"
        coerce_numbers_to_str = True


class AppleWebhookRequest(BaseModel):
    """
    App Store server notification body.

    Only ``notification_type`` is required. ``unified_receipt`` is taken as
    sent, whatever its shape, and unknown keys are kept so new fields Apple
    adds do not break delivery.
    """

    notification_type: AppleNotificationType
    unified_receipt: Optional[Any] = None
    bid: Optional[str] = None
    bvrs: Optional[str] = None
    environment: Optional[AppleEnvironment] = None
    auto_renew_status: Optional[bool] = None
    auto_renew_status_change_date: Optional[str] = None
    auto_renew_status_change_date_ms: Optional[str] = None
    auto_renew_status_change_date_pst: Optional[str] = None
    latest_expired_receipt_info: Optional[Any] = None
    latest_receipt: Optional[str] = None
    latest_receipt_info: Optional[list[Any]] = None
    pending_renewal_info: Optional[list[Any]] = None
    password: Optional[str] = None

    class Config:
        extra = "allow"

    @property
    def latest_receipt_entry(self) -> Optional[LatestReceiptInfo]:
        """
        First entry of ``unified_receipt.latest_receipt_info``.

        None when the block is absent or the entry is not an object of
        scalar fields.
        """
        if not isinstance(self.unified_receipt, dict):
            return None
        entries = self.unified_receipt.get("latest_receipt_info")
        if not isinstance(entries, list) or not entries:
            return None
        try:
            return LatestReceiptInfo.model_validate(entries[0])
        except ValidationError:
            return None
