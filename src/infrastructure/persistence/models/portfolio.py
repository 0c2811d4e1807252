"""Portfolio layer ORM models: portfolios, portfolio_assets, asset_classes, investments."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base

from .types import Money, Percent, Quantity


class Portfolio(Base):
    """One portfolio per user; base_currency is the reporting currency."""

    __tablename__ = "portfolios"

    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    base_currency: Mapped[str] = mapped_column(Text, nullable=False, default="USD")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    assets: Mapped[list["PortfolioAsset"]] = relationship(
        back_populates="portfolio", cascade="all, delete-orphan"
    )


class AssetClass(Base):
    """User-defined allocation bucket; target range in percent."""

    __tablename__ = "asset_classes"
    __table_args__ = (
        CheckConstraint(
            "target_min >= 0 AND target_max <= 100 AND target_min <= target_max",
            name="ck_asset_classes_target_range",
        ),
        Index("ix_asset_classes_user", "user_id"),
    )

    class_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    target_min: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    target_max: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    max_assets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    min_allocation_value: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    assets: Mapped[list["PortfolioAsset"]] = relationship(back_populates="asset_class")


class PortfolioAsset(Base):
    """A holding. is_ignored excludes it from allocation and recommendations."""

    __tablename__ = "portfolio_assets"
    __table_args__ = (
        UniqueConstraint("portfolio_id", "symbol", name="uq_portfolio_assets_symbol"),
        CheckConstraint("quantity >= 0", name="ck_portfolio_assets_quantity_non_negative"),
    )

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
        nullable=False,
    )
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    purchase_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    current_price: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    currency: Mapped[str] = mapped_column(Text, nullable=False, default="USD")
    asset_class_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("asset_classes.class_id", ondelete="SET NULL"),
        nullable=True,
    )
    subclass_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    is_ignored: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    portfolio: Mapped["Portfolio"] = relationship(back_populates="assets")
    asset_class: Mapped[Optional["AssetClass"]] = relationship(back_populates="assets")


class Investment(Base):
    """Executed purchase recorded on recommendation confirmation."""

    __tablename__ = "investments"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_investments_quantity_positive"),
        Index("ix_investments_user_time", "user_id", "invested_at"),
    )

    investment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
        nullable=False,
    )
    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("portfolio_assets.asset_id", ondelete="CASCADE"),
        nullable=False,
    )
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    currency: Mapped[str] = mapped_column(Text, nullable=False)
    recommendation_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("recommendations.recommendation_id", ondelete="SET NULL"),
        nullable=True,
    )
    recommended_amount: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    invested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
