"""
SQLAlchemy ORM models (subscriptions + budget settings)
"""
from decimal import Decimal
from datetime import date as date_type
from sqlalchemy import String, Integer, SmallInteger, TIMESTAMP, Date, Boolean, Numeric, CheckConstraint, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.db.session import Base


class SubscriptionModel(Base):
    """
    Recurring subscription as entered by the user.

    cost is per billing cycle (not per month).
    """
    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    billing_cycle: Mapped[str] = mapped_column(String(16), nullable=False, default="monthly")
    first_payment_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="other")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    is_shared: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shared_with: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)

    created_at = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("cost >= 0", name="ck_subscriptions_cost_non_negative"),
        CheckConstraint("shared_with >= 1", name="ck_subscriptions_shared_with_positive"),
        Index("ix_subscriptions_created_at", "created_at"),
    )


class UserSettingsModel(Base):
    """
    Budget settings (single row)
    """
    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    monthly_budget: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    alert_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=80)

    created_at = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = mapped_column(TIMESTAMP(timezone=True), nullable=True)
