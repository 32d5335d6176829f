"""SQLAlchemy-backed spec snapshot log."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creative_engine.core.db_kernel import db_read, db_write
from creative_engine.models.spec_snapshot import SpecSnapshot
from creative_engine.services.specs.defaults import default_policies
from creative_engine.services.specs.types import PlatformPolicies, PlatformSpecs


def _to_specs(row: SpecSnapshot) -> PlatformSpecs:
    policies = PlatformPolicies.from_dict(row.policies) if row.policies else default_policies()
    return PlatformSpecs(
        id=row.id,
        version=row.version,
        fetched_at=row.fetched_at,
        headline_max_chars=row.headline_max_chars,
        headline_warn_chars=row.headline_warn_chars,
        image_min_width=row.image_min_width,
        image_min_height=row.image_min_height,
        image_max_size=row.image_max_size,
        allowed_formats=list(row.allowed_formats),
        policies=policies,
    )


class SqlSpecSnapshotStore:
    """Append-only spec snapshots; reads return the newest row."""

    async def latest(self) -> PlatformSpecs | None:
        async def _load(session: AsyncSession) -> PlatformSpecs | None:
            result = await session.execute(
                select(SpecSnapshot).order_by(SpecSnapshot.fetched_at.desc()).limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_specs(row) if row is not None else None

        return await db_read(_load, operation_name="spec_snapshot_latest")

    async def append(self, specs: PlatformSpecs) -> None:
        async def _insert(session: AsyncSession) -> None:
            session.add(
                SpecSnapshot(
                    id=specs.id,
                    version=specs.version,
                    fetched_at=specs.fetched_at,
                    headline_max_chars=specs.headline_max_chars,
                    headline_warn_chars=specs.headline_warn_chars,
                    image_min_width=specs.image_min_width,
                    image_min_height=specs.image_min_height,
                    image_max_size=specs.image_max_size,
                    allowed_formats=list(specs.allowed_formats),
                    policies=specs.policies.to_dict(),
                )
            )
            await session.flush()

        await db_write(_insert, operation_name="spec_snapshot_append")
