"""
Subscription Models
===================

SQLAlchemy model for App Store subscriptions.
"""

from enum import Enum
import uuid

from sqlalchemy import Enum as SQLEnum, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, enum_values


class SubscriptionStatus(str, Enum):
    """Subscription status values."""
    ACTIVE = "active"
    GRACE_PERIOD = "grace_period"
    EXPIRED = "expired"


class PlanType(str, Enum):
    """Billing period of the purchased product."""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Subscription(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Subscription record keyed by the store's original transaction id.

    One row per ``original_transaction_id``; later notifications overwrite
    ``status``/``plan_type``/``updated_at`` in place.
    """

    __tablename__ = "subscriptions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
    )
    original_transaction_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    status: Mapped[SubscriptionStatus] = mapped_column(
        SQLEnum(
            SubscriptionStatus,
            name="subscription_status",
            values_callable=enum_values,
        ),
        default=SubscriptionStatus.ACTIVE,
        nullable=False,
    )
    plan_type: Mapped[PlanType] = mapped_column(
        SQLEnum(PlanType, name="plan_type", values_callable=enum_values),
        default=PlanType.MONTHLY,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_subscriptions_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Subscription(original_transaction_id={self.original_transaction_id}, "
            f"status={self.status})>"
        )

    @property
    def is_active(self) -> bool:
        """Check if subscription still grants access."""
        return self.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.GRACE_PERIOD)
