"""Persistence contracts used by the lifecycle and specs services."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol

from creative_engine.services.analysis.types import CreativeRecord
from creative_engine.services.lifecycle.types import (
    ActionFeedItem,
    ActionInput,
    ActionRecord,
    ActionWithSnapshots,
    CreativeHistory,
    CreativeLearningRow,
    LearningConfigRecord,
)
from creative_engine.services.specs.types import PlatformSpecs


class LifecycleStore(Protocol):
    """Port for creatives, metric snapshots, actions and learning configs.

    Snapshots and actions are append-only: the port exposes no update or
    delete for them.
    """

    async def insert_action(self, action: ActionInput) -> ActionRecord:
        """Append an action; raises ConflictError when the creative is unknown."""

    async def record_ingestion(self, creative: CreativeRecord, observed_at: datetime) -> None:
        """Upsert the creative and append one metric snapshot atomically."""

    async def get_creative_history(
        self,
        creative_id: str,
        *,
        snapshot_limit: int,
    ) -> CreativeHistory | None:
        """Return the creative, its actions and newest snapshots, newest first."""

    async def list_recent_actions(
        self,
        *,
        limit: int,
        action_type: str | None = None,
        creative_id: str | None = None,
        decided_by: str | None = None,
    ) -> list[ActionFeedItem]:
        """Return the newest actions joined with creative display fields."""

    async def list_actions_since(self, since: datetime) -> list[ActionWithSnapshots]:
        """Return actions decided at or after `since` with their creative's snapshots."""

    async def list_creatives_for_learning(self) -> list[CreativeLearningRow]:
        """Return every creative with its action types and latest snapshot CTR."""

    async def get_learning_config(self, account_id: str) -> LearningConfigRecord | None:
        """Return the account's config, if one exists."""

    async def create_learning_config(
        self,
        account_id: str,
        values: Mapping[str, Any],
    ) -> LearningConfigRecord:
        """Create the account's config, or return the existing one on a race."""

    async def upsert_learning_config(
        self,
        account_id: str,
        defaults: Mapping[str, Any],
        updates: Mapping[str, Any],
    ) -> LearningConfigRecord:
        """Apply partial updates, creating the config from defaults when absent."""


class SpecSnapshotStore(Protocol):
    """Port for the append-only platform spec snapshot log."""

    async def latest(self) -> PlatformSpecs | None:
        """Return the most recently fetched snapshot, fresh or not."""

    async def append(self, specs: PlatformSpecs) -> None:
        """Persist a new snapshot."""
