"""Creative and its append-only metric history."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import BigInteger, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from creative_engine.models.base import Base, CreatedAtMixin, TimestampMixin, prefixed_id_column

if TYPE_CHECKING:
    from creative_engine.models.action import Action


class Creative(Base, TimestampMixin):
    """Latest known state of an ad creative, keyed by its upstream id."""

    __tablename__ = "creatives"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    campaign_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    headline: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[str] = mapped_column(Text, nullable=False)
    destination_url: Mapped[str] = mapped_column(Text, nullable=False)

    # Aggregates from the latest ingestion
    agg_spend: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    agg_impressions: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    agg_clicks: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    agg_conversions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    agg_cpa: Mapped[float | None] = mapped_column(Float, nullable=True)
    agg_roas: Mapped[float | None] = mapped_column(Float, nullable=True)

    features: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    latest_metrics_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    actions: Mapped[list[Action]] = relationship(
        "Action",
        back_populates="creative",
        order_by="Action.decided_at.desc()",
    )
    metric_snapshots: Mapped[list[MetricSnapshot]] = relationship(
        "MetricSnapshot",
        back_populates="creative",
        order_by="MetricSnapshot.at",
    )

    def __repr__(self) -> str:
        return f"<Creative {self.id} campaign={self.campaign_id}>"


class MetricSnapshot(Base, CreatedAtMixin):
    """One ingestion event's metrics for a creative. Never updated."""

    __tablename__ = "metric_snapshots"

    id: Mapped[str] = prefixed_id_column("snap")
    creative_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("creatives.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    spend: Mapped[float] = mapped_column(Float, nullable=False)
    impressions: Mapped[int] = mapped_column(BigInteger, nullable=False)
    clicks: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ctr: Mapped[float] = mapped_column(Float, nullable=False)
    cpc: Mapped[float] = mapped_column(Float, nullable=False)
    conversions: Mapped[int] = mapped_column(Integer, nullable=False)
    cpa: Mapped[float | None] = mapped_column(Float, nullable=True)
    roas: Mapped[float | None] = mapped_column(Float, nullable=True)

    creative: Mapped[Creative] = relationship("Creative", back_populates="metric_snapshots")

    def __repr__(self) -> str:
        return f"<MetricSnapshot creative={self.creative_id} at={self.at.isoformat()}>"
