"""Lifecycle decisions taken on creatives."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from creative_engine.models.base import Base, CreatedAtMixin, prefixed_id_column

if TYPE_CHECKING:
    from creative_engine.models.creative import Creative


class Action(Base, CreatedAtMixin):
    """Immutable record of a tested/scaled/paused decision."""

    __tablename__ = "creative_actions"

    id: Mapped[str] = prefixed_id_column("act")
    creative_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("creatives.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    reason_short: Mapped[str] = mapped_column(String(255), nullable=False)
    reason_detail: Mapped[str] = mapped_column(Text, nullable=False)
    decided_by: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    decided_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    inputs: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    creative: Mapped[Creative] = relationship("Creative", back_populates="actions")

    def __repr__(self) -> str:
        return f"<Action {self.action_type} creative={self.creative_id} by={self.decided_by}>"
