"""Domain types for the creative decision lifecycle."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Literal

from creative_engine.services.analysis.types import CreativeFeatures, CreativeRecord

ActionType = Literal["tested", "scaled", "paused"]
DecisionSource = Literal["rule", "human", "model"]
RecommendedAction = Literal["scale", "pause", "test"]
Outcome = Literal["improved", "declined", "neutral"]
CreativeStatus = Literal["active", "paused"]

ACTION_TYPES: tuple[str, ...] = ("tested", "scaled", "paused")
DECISION_SOURCES: tuple[str, ...] = ("rule", "human", "model")

# Recommendation verb -> logged action type.
ACTION_FOR_RECOMMENDATION: dict[str, ActionType] = {
    "scale": "scaled",
    "pause": "paused",
    "test": "tested",
}


@dataclass(slots=True)
class ActionInput:
    creative_id: str
    action_type: ActionType
    reason_short: str
    reason_detail: str = ""
    decided_by: DecisionSource = "human"
    inputs: dict[str, Any] | None = None


@dataclass(slots=True)
class ActionRecord:
    id: str
    creative_id: str
    action_type: ActionType
    reason_short: str
    reason_detail: str
    decided_by: DecisionSource
    decided_at: datetime
    inputs: dict[str, Any] | None = None


@dataclass(slots=True)
class MetricSnapshotRecord:
    id: str
    creative_id: str
    at: datetime
    spend: float
    impressions: int
    clicks: int
    ctr: float
    cpc: float
    conversions: int
    cpa: float | None = None
    roas: float | None = None


@dataclass(slots=True)
class StoredCreative:
    """A persisted creative with its latest aggregate metrics."""

    id: str
    campaign_id: str
    headline: str
    thumbnail_url: str
    destination_url: str
    spend: float
    impressions: int
    clicks: int
    conversions: int
    cpa: float | None
    roas: float | None
    status: CreativeStatus
    latest_metrics_at: datetime | None
    features: CreativeFeatures | None = None


@dataclass(slots=True)
class CreativeHistory:
    creative: StoredCreative
    actions: list[ActionRecord]
    snapshots: list[MetricSnapshotRecord]


@dataclass(slots=True)
class ActionFeedItem:
    """An action joined with the creative fields shown in the decision feed."""

    action: ActionRecord
    headline: str
    thumbnail_url: str
    campaign_id: str


@dataclass(slots=True)
class ActionWithSnapshots:
    """An action plus every snapshot of its creative, oldest first."""

    action: ActionRecord
    snapshots: list[MetricSnapshotRecord]


@dataclass(slots=True)
class CreativeLearningRow:
    creative: StoredCreative
    action_types: set[str] = field(default_factory=set)
    latest_ctr: float | None = None


@dataclass(slots=True)
class LearningConfigRecord:
    id: str
    account_id: str
    target_cpa: float
    target_roas: float
    min_spend: float
    min_conversions: int
    pause_threshold_days: int
    scale_threshold_days: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


LEARNING_CONFIG_FIELDS: tuple[str, ...] = (
    "target_cpa",
    "target_roas",
    "min_spend",
    "min_conversions",
    "pause_threshold_days",
    "scale_threshold_days",
)


@dataclass(slots=True)
class PerformanceSnapshot:
    spend: float
    ctr: float
    cpa: float | None = None
    roas: float | None = None

    @classmethod
    def from_snapshot(cls, snapshot: MetricSnapshotRecord) -> PerformanceSnapshot:
        # Zero CPA/ROAS means "not reported" upstream.
        return cls(
            spend=snapshot.spend,
            ctr=snapshot.ctr,
            cpa=snapshot.cpa or None,
            roas=snapshot.roas or None,
        )


@dataclass(slots=True)
class OutcomeAnalysis:
    action_id: str
    creative_id: str
    action_type: ActionType
    pre_performance: PerformanceSnapshot
    post_performance: PerformanceSnapshot
    outcome: Outcome
    outcome_confidence: int


@dataclass(slots=True)
class LearningInsight:
    pattern: str
    confidence: int
    evidence: list[str]
    recommendation: str


@dataclass(slots=True)
class ActionRecommendation:
    creative: CreativeRecord
    recommended_action: RecommendedAction
    reason: str
    confidence: int
    auto_execute: bool
