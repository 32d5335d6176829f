"""Per-account thresholds for rule-based lifecycle recommendations."""

from __future__ import annotations

from sqlalchemy import Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from creative_engine.models.base import Base, TimestampMixin, prefixed_id_column


class LearningConfig(Base, TimestampMixin):
    """Adaptive thresholds; one row per ad account."""

    __tablename__ = "learning_configs"

    id: Mapped[str] = prefixed_id_column("cfg")
    account_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    target_cpa: Mapped[float] = mapped_column(Float, nullable=False)
    target_roas: Mapped[float] = mapped_column(Float, nullable=False)
    min_spend: Mapped[float] = mapped_column(Float, nullable=False)
    min_conversions: Mapped[int] = mapped_column(Integer, nullable=False)
    pause_threshold_days: Mapped[int] = mapped_column(Integer, nullable=False)
    scale_threshold_days: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<LearningConfig account={self.account_id}>"
