"""Lifecycle schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from creative_engine.schemas.analysis import CreativeInput
from creative_engine.services.lifecycle.types import (
    ActionFeedItem,
    ActionInput,
    ActionRecommendation,
    ActionRecord,
    ActionType,
    CreativeHistory,
    DecisionSource,
    LearningConfigRecord,
    MetricSnapshotRecord,
    RecommendedAction,
    StoredCreative,
)


class ActionCreate(BaseModel):
    """Schema for logging a decision on a creative."""

    creative_id: str = Field(min_length=1)
    type: ActionType
    reason_short: str = Field(min_length=1, max_length=255)
    reason_detail: str = Field(min_length=1)
    decided_by: DecisionSource = "human"
    inputs: dict[str, Any] | None = None

    def to_input(self) -> ActionInput:
        return ActionInput(
            creative_id=self.creative_id,
            action_type=self.type,
            reason_short=self.reason_short,
            reason_detail=self.reason_detail,
            decided_by=self.decided_by,
            inputs=self.inputs,
        )


class ActionCreatedResponse(BaseModel):
    action_id: str
    creative_id: str
    type: ActionType
    reason_short: str


class ActionResponse(BaseModel):
    """Schema for a logged action."""

    id: str
    creative_id: str
    type: ActionType
    reason_short: str
    reason_detail: str
    decided_by: DecisionSource
    decided_at: datetime
    inputs: dict[str, Any] | None

    @classmethod
    def from_record(cls, record: ActionRecord) -> "ActionResponse":
        return cls(
            id=record.id,
            creative_id=record.creative_id,
            type=record.action_type,
            reason_short=record.reason_short,
            reason_detail=record.reason_detail,
            decided_by=record.decided_by,
            decided_at=record.decided_at,
            inputs=record.inputs,
        )


class ActionFeedItemResponse(ActionResponse):
    """Action with the creative fields shown in the decision feed."""

    headline: str
    thumbnail_url: str
    campaign_id: str

    @classmethod
    def from_item(cls, item: ActionFeedItem) -> "ActionFeedItemResponse":
        return cls(
            **ActionResponse.from_record(item.action).model_dump(),
            headline=item.headline,
            thumbnail_url=item.thumbnail_url,
            campaign_id=item.campaign_id,
        )


class ActionFeedResponse(BaseModel):
    items: list[ActionFeedItemResponse]
    total: int
    filters: dict[str, str | None]


class CreativeHistoryResponse(BaseModel):
    """Schema for a creative's decisions and newest metric snapshots."""

    creative: StoredCreative
    actions: list[ActionResponse]
    snapshots: list[MetricSnapshotRecord]

    @classmethod
    def from_history(cls, history: CreativeHistory) -> "CreativeHistoryResponse":
        return cls(
            creative=history.creative,
            actions=[ActionResponse.from_record(action) for action in history.actions],
            snapshots=history.snapshots,
        )


class LearningConfigResponse(BaseModel):
    id: str
    account_id: str
    target_cpa: float
    target_roas: float
    min_spend: float
    min_conversions: int
    pause_threshold_days: int
    scale_threshold_days: int

    @classmethod
    def from_record(cls, record: LearningConfigRecord) -> "LearningConfigResponse":
        return cls(**record.to_dict())


class LearningConfigUpdate(BaseModel):
    """Schema for a partial learning config update."""

    target_cpa: float | None = Field(None, gt=0)
    target_roas: float | None = Field(None, gt=0)
    min_spend: float | None = Field(None, ge=0)
    min_conversions: int | None = Field(None, ge=0)
    pause_threshold_days: int | None = Field(None, ge=1)
    scale_threshold_days: int | None = Field(None, ge=1)


class ActionRecommendationRequest(BaseModel):
    """Schema for requesting scale/pause/test recommendations."""

    account_id: str = Field(min_length=1)
    creatives: list[CreativeInput] = Field(min_length=1)
    execute_automated: bool = False


class ActionRecommendationResponse(BaseModel):
    creative_id: str
    recommended_action: RecommendedAction
    reason: str
    confidence: int
    auto_execute: bool
    executed_action_id: str | None = None

    @classmethod
    def from_recommendation(
        cls,
        recommendation: ActionRecommendation,
        executed_action_id: str | None = None,
    ) -> "ActionRecommendationResponse":
        return cls(
            creative_id=recommendation.creative.id,
            recommended_action=recommendation.recommended_action,
            reason=recommendation.reason,
            confidence=recommendation.confidence,
            auto_execute=recommendation.auto_execute,
            executed_action_id=executed_action_id,
        )


class ActionRecommendationListResponse(BaseModel):
    account_id: str
    items: list[ActionRecommendationResponse]
    executed: int
