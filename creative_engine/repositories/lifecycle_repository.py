"""SQLAlchemy-backed lifecycle store."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from creative_engine.core.db_kernel import db_read, db_write
from creative_engine.models.action import Action
from creative_engine.models.creative import Creative, MetricSnapshot
from creative_engine.models.learning_config import LearningConfig
from creative_engine.services.analysis.types import CreativeFeatures, CreativeRecord
from creative_engine.services.lifecycle.types import (
    LEARNING_CONFIG_FIELDS,
    ActionFeedItem,
    ActionInput,
    ActionRecord,
    ActionWithSnapshots,
    CreativeHistory,
    CreativeLearningRow,
    LearningConfigRecord,
    MetricSnapshotRecord,
    StoredCreative,
)

logger = logging.getLogger(__name__)


def _action_record(row: Action) -> ActionRecord:
    return ActionRecord(
        id=row.id,
        creative_id=row.creative_id,
        action_type=row.action_type,  # type: ignore[arg-type]
        reason_short=row.reason_short,
        reason_detail=row.reason_detail,
        decided_by=row.decided_by,  # type: ignore[arg-type]
        decided_at=row.decided_at,
        inputs=row.inputs,
    )


def _snapshot_record(row: MetricSnapshot) -> MetricSnapshotRecord:
    return MetricSnapshotRecord(
        id=row.id,
        creative_id=row.creative_id,
        at=row.at,
        spend=row.spend,
        impressions=row.impressions,
        clicks=row.clicks,
        ctr=row.ctr,
        cpc=row.cpc,
        conversions=row.conversions,
        cpa=row.cpa,
        roas=row.roas,
    )


def _creative_record(row: Creative) -> StoredCreative:
    return StoredCreative(
        id=row.id,
        campaign_id=row.campaign_id,
        headline=row.headline,
        thumbnail_url=row.thumbnail_url,
        destination_url=row.destination_url,
        spend=row.agg_spend,
        impressions=row.agg_impressions,
        clicks=row.agg_clicks,
        conversions=row.agg_conversions,
        cpa=row.agg_cpa,
        roas=row.agg_roas,
        status=row.status,  # type: ignore[arg-type]
        latest_metrics_at=row.latest_metrics_at,
        features=CreativeFeatures.from_dict(row.features) if row.features else None,
    )


def _config_record(row: LearningConfig) -> LearningConfigRecord:
    return LearningConfigRecord(
        id=row.id,
        account_id=row.account_id,
        target_cpa=row.target_cpa,
        target_roas=row.target_roas,
        min_spend=row.min_spend,
        min_conversions=row.min_conversions,
        pause_threshold_days=row.pause_threshold_days,
        scale_threshold_days=row.scale_threshold_days,
    )


class SqlLifecycleStore:
    """Lifecycle persistence through short-lived db_kernel sessions."""

    async def insert_action(self, action: ActionInput) -> ActionRecord:
        async def _insert(session: AsyncSession) -> ActionRecord:
            row = Action(
                creative_id=action.creative_id,
                action_type=action.action_type,
                reason_short=action.reason_short,
                reason_detail=action.reason_detail,
                decided_by=action.decided_by,
                decided_at=datetime.now(timezone.utc),
                inputs=action.inputs,
            )
            session.add(row)
            await session.flush()
            return _action_record(row)

        return await db_write(_insert, operation_name="lifecycle_insert_action")

    async def record_ingestion(self, creative: CreativeRecord, observed_at: datetime) -> None:
        aggregates: dict[str, Any] = {
            "agg_spend": creative.spend,
            "agg_impressions": creative.impressions,
            "agg_clicks": creative.clicks,
            "agg_conversions": creative.conversions,
            "agg_cpa": creative.cpa or None,
            "agg_roas": creative.roas or None,
            "latest_metrics_at": observed_at,
        }
        # A batch row without features keeps the previously stored snapshot.
        if creative.features is not None:
            aggregates["features"] = creative.features.to_dict()

        async def _record(session: AsyncSession) -> None:
            upsert = pg_insert(Creative).values(
                id=creative.id,
                campaign_id=creative.campaign_id,
                headline=creative.headline,
                thumbnail_url=creative.thumbnail_url,
                destination_url=creative.destination_url,
                status="active" if creative.is_active else "paused",
                **aggregates,
            )
            await session.execute(
                upsert.on_conflict_do_update(
                    index_elements=[Creative.id],
                    set_={**aggregates, "updated_at": observed_at},
                )
            )
            session.add(
                MetricSnapshot(
                    creative_id=creative.id,
                    at=observed_at,
                    spend=creative.spend,
                    impressions=creative.impressions,
                    clicks=creative.clicks,
                    ctr=creative.ctr,
                    cpc=creative.cpc,
                    conversions=creative.conversions,
                    cpa=creative.cpa or None,
                    roas=creative.roas or None,
                )
            )
            await session.flush()

        await db_write(_record, operation_name="lifecycle_record_ingestion")

    async def get_creative_history(
        self,
        creative_id: str,
        *,
        snapshot_limit: int,
    ) -> CreativeHistory | None:
        async def _load(session: AsyncSession) -> CreativeHistory | None:
            creative = await session.get(Creative, creative_id)
            if creative is None:
                return None
            actions = await session.execute(
                select(Action)
                .where(Action.creative_id == creative_id)
                .order_by(Action.decided_at.desc())
            )
            snapshots = await session.execute(
                select(MetricSnapshot)
                .where(MetricSnapshot.creative_id == creative_id)
                .order_by(MetricSnapshot.at.desc())
                .limit(snapshot_limit)
            )
            return CreativeHistory(
                creative=_creative_record(creative),
                actions=[_action_record(row) for row in actions.scalars()],
                snapshots=[_snapshot_record(row) for row in snapshots.scalars()],
            )

        return await db_read(_load, operation_name="lifecycle_creative_history")

    async def list_recent_actions(
        self,
        *,
        limit: int,
        action_type: str | None = None,
        creative_id: str | None = None,
        decided_by: str | None = None,
    ) -> list[ActionFeedItem]:
        async def _load(session: AsyncSession) -> list[ActionFeedItem]:
            stmt = (
                select(Action, Creative.headline, Creative.thumbnail_url, Creative.campaign_id)
                .join(Creative, Creative.id == Action.creative_id)
                .order_by(Action.decided_at.desc())
                .limit(limit)
            )
            if action_type:
                stmt = stmt.where(Action.action_type == action_type)
            if creative_id:
                stmt = stmt.where(Action.creative_id == creative_id)
            if decided_by:
                stmt = stmt.where(Action.decided_by == decided_by)
            result = await session.execute(stmt)
            return [
                ActionFeedItem(
                    action=_action_record(action),
                    headline=headline,
                    thumbnail_url=thumbnail_url,
                    campaign_id=campaign_id,
                )
                for action, headline, thumbnail_url, campaign_id in result.all()
            ]

        return await db_read(_load, operation_name="lifecycle_recent_actions")

    async def list_actions_since(self, since: datetime) -> list[ActionWithSnapshots]:
        async def _load(session: AsyncSession) -> list[ActionWithSnapshots]:
            actions = list(
                (
                    await session.execute(
                        select(Action)
                        .where(Action.decided_at >= since)
                        .order_by(Action.decided_at)
                    )
                ).scalars()
            )
            if not actions:
                return []

            creative_ids = {action.creative_id for action in actions}
            snapshots = await session.execute(
                select(MetricSnapshot)
                .where(MetricSnapshot.creative_id.in_(creative_ids))
                .order_by(MetricSnapshot.at)
            )
            by_creative: dict[str, list[MetricSnapshotRecord]] = defaultdict(list)
            for row in snapshots.scalars():
                by_creative[row.creative_id].append(_snapshot_record(row))

            return [
                ActionWithSnapshots(
                    action=_action_record(action),
                    snapshots=list(by_creative.get(action.creative_id, [])),
                )
                for action in actions
            ]

        return await db_read(_load, operation_name="lifecycle_actions_since")

    async def list_creatives_for_learning(self) -> list[CreativeLearningRow]:
        async def _load(session: AsyncSession) -> list[CreativeLearningRow]:
            creatives = list((await session.execute(select(Creative))).scalars())
            if not creatives:
                return []

            action_rows = await session.execute(
                select(Action.creative_id, Action.action_type).distinct()
            )
            action_types: dict[str, set[str]] = defaultdict(set)
            for creative_id, action_type in action_rows.all():
                action_types[creative_id].add(action_type)

            latest_ctr: dict[str, float] = {}
            snapshot_rows = await session.execute(
                select(MetricSnapshot.creative_id, MetricSnapshot.ctr)
                .distinct(MetricSnapshot.creative_id)
                .order_by(MetricSnapshot.creative_id, MetricSnapshot.at.desc())
            )
            for creative_id, ctr in snapshot_rows.all():
                latest_ctr[creative_id] = ctr

            return [
                CreativeLearningRow(
                    creative=_creative_record(creative),
                    action_types=action_types.get(creative.id, set()),
                    latest_ctr=latest_ctr.get(creative.id),
                )
                for creative in creatives
            ]

        return await db_read(_load, operation_name="lifecycle_learning_rows")

    async def get_learning_config(self, account_id: str) -> LearningConfigRecord | None:
        async def _load(session: AsyncSession) -> LearningConfigRecord | None:
            result = await session.execute(
                select(LearningConfig).where(LearningConfig.account_id == account_id)
            )
            row = result.scalar_one_or_none()
            return _config_record(row) if row is not None else None

        return await db_read(_load, operation_name="lifecycle_get_learning_config")

    async def create_learning_config(
        self,
        account_id: str,
        values: Mapping[str, Any],
    ) -> LearningConfigRecord:
        return await self.upsert_learning_config(account_id, values, {})

    async def upsert_learning_config(
        self,
        account_id: str,
        defaults: Mapping[str, Any],
        updates: Mapping[str, Any],
    ) -> LearningConfigRecord:
        patch = {key: value for key, value in updates.items() if key in LEARNING_CONFIG_FIELDS}

        async def _upsert(session: AsyncSession) -> LearningConfigRecord:
            stmt = pg_insert(LearningConfig).values(
                account_id=account_id,
                **{**dict(defaults), **patch},
            )
            if patch:
                stmt = stmt.on_conflict_do_update(
                    index_elements=[LearningConfig.account_id],
                    set_={**patch, "updated_at": datetime.now(timezone.utc)},
                )
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=[LearningConfig.account_id])
            await session.execute(stmt)

            result = await session.execute(
                select(LearningConfig)
                .where(LearningConfig.account_id == account_id)
                .execution_options(populate_existing=True)
            )
            return _config_record(result.scalar_one())

        record = await db_write(_upsert, operation_name="lifecycle_upsert_learning_config")
        logger.info(
            "Learning config saved",
            extra={"account_id": account_id, "updated_fields": sorted(patch)},
        )
        return record
