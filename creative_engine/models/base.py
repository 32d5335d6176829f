"""Base model and mixins for SQLAlchemy models."""

from datetime import datetime
from functools import partial

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from creative_engine.core.ids import generate_id


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def prefixed_id_column(prefix: str) -> Mapped[str]:
    """Primary-key column populated with `generate_id(prefix)`."""
    return mapped_column(
        String(48),
        primary_key=True,
        default=partial(generate_id, prefix),
    )


class CreatedAtMixin:
    """Mixin for append-only rows: insertion time only."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class TimestampMixin(CreatedAtMixin):
    """Mixin that adds created_at and updated_at timestamps."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
