"""Versioned platform creative-policy snapshots."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from creative_engine.models.base import Base, CreatedAtMixin


class SpecSnapshot(Base, CreatedAtMixin):
    """Append-only log of fetched policy specs; newest fresh row wins."""

    __tablename__ = "spec_snapshots"

    id: Mapped[str] = mapped_column(String(48), primary_key=True)
    version: Mapped[str] = mapped_column(String(32), nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    headline_max_chars: Mapped[int] = mapped_column(Integer, nullable=False)
    headline_warn_chars: Mapped[int] = mapped_column(Integer, nullable=False)
    image_min_width: Mapped[int] = mapped_column(Integer, nullable=False)
    image_min_height: Mapped[int] = mapped_column(Integer, nullable=False)
    image_max_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    allowed_formats: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    policies: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    def __repr__(self) -> str:
        return f"<SpecSnapshot {self.id} version={self.version}>"
