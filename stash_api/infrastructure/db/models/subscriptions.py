from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from stash_api.infrastructure.db.engine import Base


class UserSubscriptionModel(Base):
    __tablename__ = "user_subscriptions"

    user_id: Mapped[str] = mapped_column(Text, primary_key=True)
    plan_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    billing_cycle: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    stripe_customer_id: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    current_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancel_at_period_end: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
