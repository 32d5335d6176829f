"""Shared in-memory stores and creative factories for unit tests."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

import pytest

from creative_engine.core.db_kernel import ConflictError
from creative_engine.core.ids import generate_id
from creative_engine.services.analysis.types import CreativeRecord
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
from creative_engine.services.specs.types import PlatformSpecs


class InMemoryLifecycleStore:
    def __init__(self) -> None:
        self.creatives: dict[str, StoredCreative] = {}
        self.snapshots: list[MetricSnapshotRecord] = []
        self.actions: list[ActionRecord] = []
        self.configs: dict[str, LearningConfigRecord] = {}
        self.now: datetime | None = None

    def _clock(self) -> datetime:
        return self.now or datetime.now(timezone.utc)

    def seed_creative(self, creative: CreativeRecord) -> StoredCreative:
        stored = StoredCreative(
            id=creative.id,
            campaign_id=creative.campaign_id,
            headline=creative.headline,
            thumbnail_url=creative.thumbnail_url,
            destination_url=creative.destination_url,
            spend=creative.spend,
            impressions=creative.impressions,
            clicks=creative.clicks,
            conversions=creative.conversions,
            cpa=creative.cpa or None,
            roas=creative.roas or None,
            status="active" if creative.is_active else "paused",
            latest_metrics_at=None,
            features=creative.features,
        )
        self.creatives[creative.id] = stored
        return stored

    def seed_snapshot(
        self,
        creative_id: str,
        at: datetime,
        *,
        ctr: float,
        spend: float = 50.0,
        cpa: float | None = None,
        roas: float | None = None,
    ) -> MetricSnapshotRecord:
        snapshot = MetricSnapshotRecord(
            id=generate_id("snap"),
            creative_id=creative_id,
            at=at,
            spend=spend,
            impressions=10_000,
            clicks=int(10_000 * ctr),
            ctr=ctr,
            cpc=0.5,
            conversions=2,
            cpa=cpa,
            roas=roas,
        )
        self.snapshots.append(snapshot)
        return snapshot

    def seed_action(
        self,
        creative_id: str,
        action_type: str,
        decided_at: datetime,
        *,
        decided_by: str = "human",
    ) -> ActionRecord:
        action = ActionRecord(
            id=generate_id("act"),
            creative_id=creative_id,
            action_type=action_type,  # type: ignore[arg-type]
            reason_short=f"{action_type} by test",
            reason_detail="seeded",
            decided_by=decided_by,  # type: ignore[arg-type]
            decided_at=decided_at,
        )
        self.actions.append(action)
        return action

    async def insert_action(self, action: ActionInput) -> ActionRecord:
        if action.creative_id not in self.creatives:
            raise ConflictError("violates foreign key constraint on creative_actions.creative_id")
        record = ActionRecord(
            id=generate_id("act"),
            creative_id=action.creative_id,
            action_type=action.action_type,
            reason_short=action.reason_short,
            reason_detail=action.reason_detail,
            decided_by=action.decided_by,
            decided_at=self._clock(),
            inputs=action.inputs,
        )
        self.actions.append(record)
        return record

    async def record_ingestion(self, creative: CreativeRecord, observed_at: datetime) -> None:
        existing = self.creatives.get(creative.id)
        stored = self.seed_creative(creative)
        if existing is not None:
            stored.campaign_id = existing.campaign_id
            stored.headline = existing.headline
            stored.thumbnail_url = existing.thumbnail_url
            stored.destination_url = existing.destination_url
            stored.status = existing.status
            if creative.features is None:
                stored.features = existing.features
        stored.latest_metrics_at = observed_at
        self.snapshots.append(
            MetricSnapshotRecord(
                id=generate_id("snap"),
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

    async def get_creative_history(
        self,
        creative_id: str,
        *,
        snapshot_limit: int,
    ) -> CreativeHistory | None:
        creative = self.creatives.get(creative_id)
        if creative is None:
            return None
        actions = sorted(
            (action for action in self.actions if action.creative_id == creative_id),
            key=lambda action: action.decided_at,
            reverse=True,
        )
        snapshots = sorted(
            (snapshot for snapshot in self.snapshots if snapshot.creative_id == creative_id),
            key=lambda snapshot: snapshot.at,
            reverse=True,
        )
        return CreativeHistory(creative=creative, actions=actions, snapshots=snapshots[:snapshot_limit])

    async def list_recent_actions(
        self,
        *,
        limit: int,
        action_type: str | None = None,
        creative_id: str | None = None,
        decided_by: str | None = None,
    ) -> list[ActionFeedItem]:
        actions = [
            action
            for action in self.actions
            if (action_type is None or action.action_type == action_type)
            and (creative_id is None or action.creative_id == creative_id)
            and (decided_by is None or action.decided_by == decided_by)
        ]
        actions.sort(key=lambda action: action.decided_at, reverse=True)
        return [
            ActionFeedItem(
                action=action,
                headline=self.creatives[action.creative_id].headline,
                thumbnail_url=self.creatives[action.creative_id].thumbnail_url,
                campaign_id=self.creatives[action.creative_id].campaign_id,
            )
            for action in actions[:limit]
        ]

    async def list_actions_since(self, since: datetime) -> list[ActionWithSnapshots]:
        return [
            ActionWithSnapshots(
                action=action,
                snapshots=sorted(
                    (s for s in self.snapshots if s.creative_id == action.creative_id),
                    key=lambda snapshot: snapshot.at,
                ),
            )
            for action in sorted(self.actions, key=lambda action: action.decided_at)
            if action.decided_at >= since
        ]

    async def list_creatives_for_learning(self) -> list[CreativeLearningRow]:
        rows = []
        for creative in self.creatives.values():
            snapshots = sorted(
                (s for s in self.snapshots if s.creative_id == creative.id),
                key=lambda snapshot: snapshot.at,
            )
            rows.append(
                CreativeLearningRow(
                    creative=creative,
                    action_types={a.action_type for a in self.actions if a.creative_id == creative.id},
                    latest_ctr=snapshots[-1].ctr if snapshots else None,
                )
            )
        return rows

    async def get_learning_config(self, account_id: str) -> LearningConfigRecord | None:
        return self.configs.get(account_id)

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
        config = self.configs.get(account_id)
        if config is None:
            config = LearningConfigRecord(id=generate_id("cfg"), account_id=account_id, **dict(defaults))
            self.configs[account_id] = config
        for key, value in updates.items():
            if key in LEARNING_CONFIG_FIELDS:
                setattr(config, key, value)
        return config


class InMemorySpecStore:
    def __init__(self, latest: PlatformSpecs | None = None) -> None:
        self.snapshots: list[PlatformSpecs] = [latest] if latest else []
        self.read_calls = 0
        self.fail_reads = False
        self.fail_writes = False

    async def latest(self) -> PlatformSpecs | None:
        self.read_calls += 1
        if self.fail_reads:
            raise RuntimeError("database unavailable")
        if not self.snapshots:
            return None
        return max(self.snapshots, key=lambda specs: specs.fetched_at)

    async def append(self, specs: PlatformSpecs) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.snapshots.append(specs)


def _creative(creative_id: str = "cr_1", **overrides: Any) -> CreativeRecord:
    values: dict[str, Any] = {
        "id": creative_id,
        "campaign_id": "camp_1",
        "headline": "Summer Sneakers Sale",
        "thumbnail_url": "https://cdn.example.com/img/plain.jpg",
        "destination_url": "https://example.com/landing",
        "spend": 100.0,
        "impressions": 10_000,
        "clicks": 150,
        "ctr": 0.015,
        "cpc": 0.66,
        "conversions": 5,
        "cpa": 20.0,
        "roas": 1.5,
    }
    values.update(overrides)
    return CreativeRecord(**values)


@pytest.fixture
def lifecycle_store() -> InMemoryLifecycleStore:
    return InMemoryLifecycleStore()


@pytest.fixture
def spec_store() -> InMemorySpecStore:
    return InMemorySpecStore()


@pytest.fixture
def make_creative() -> Callable[..., CreativeRecord]:
    return _creative
