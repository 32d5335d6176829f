"""Creative decision lifecycle: action log, metric history, outcomes and learning."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from creative_engine.config import settings
from creative_engine.core.db_kernel import ConflictError
from creative_engine.core.exceptions import CreativeNotFoundError, InvalidActionError
from creative_engine.repositories.contracts import LifecycleStore
from creative_engine.services.analysis.types import CreativeRecord
from creative_engine.services.lifecycle.outcomes import analyze_action_outcome
from creative_engine.services.lifecycle.types import (
    ACTION_FOR_RECOMMENDATION,
    ACTION_TYPES,
    DECISION_SOURCES,
    LEARNING_CONFIG_FIELDS,
    ActionFeedItem,
    ActionInput,
    ActionRecommendation,
    CreativeHistory,
    LearningConfigRecord,
    LearningInsight,
    OutcomeAnalysis,
)

logger = logging.getLogger(__name__)

SUCCESSFUL_SCALE_CTR = 0.015
MIN_PATTERN_SAMPLE = 3
FACE_PATTERN_THRESHOLD = 0.7
NUMERAL_PATTERN_THRESHOLD = 0.6
HIGH_CPA_PAUSE = 25

SCALE_BASE_CONFIDENCE = 85
SCALE_AUTO_EXECUTE = 90
PAUSE_BASE_CONFIDENCE = 75
PAUSE_AUTO_EXECUTE = 85
TEST_CONFIDENCE = 60
TEST_MIN_IMPRESSIONS = 1000
PAUSE_LOW_CTR = 0.005
PAUSE_VERY_LOW_CTR = 0.003
SCALE_HIGH_CTR = 0.02


def _reported(value: float | None) -> bool:
    return value is not None and value > 0


def _money(value: float | None) -> str:
    return f"${value:.2f}" if _reported(value) else "n/a"


def _multiple(value: float | None) -> str:
    return f"{value:.2f}x" if _reported(value) else "n/a"


def _recommend_for(
    creative: CreativeRecord,
    config: LearningConfigRecord,
) -> ActionRecommendation | None:
    """Apply scale, pause and test rules in order; the first match wins."""
    cpa = creative.cpa if _reported(creative.cpa) else None
    roas = creative.roas if _reported(creative.roas) else None
    features = creative.features
    spent_enough = creative.spend >= config.min_spend

    if (
        spent_enough
        and creative.conversions >= config.min_conversions
        and ((cpa is not None and cpa <= config.target_cpa) or (roas is not None and roas >= config.target_roas))
    ):
        confidence = SCALE_BASE_CONFIDENCE
        if features is not None and features.image.has_face:
            confidence += 5
        if features is not None and features.headline.has_numerals:
            confidence += 5
        if creative.ctr > SCALE_HIGH_CTR:
            confidence += 10
        return ActionRecommendation(
            creative=creative,
            recommended_action="scale",
            reason=(
                f"Strong performance: CPA {_money(cpa)} (target: ${config.target_cpa:.2f}), "
                f"ROAS {_multiple(roas)} (target: {config.target_roas:.2f}x)"
            ),
            confidence=confidence,
            auto_execute=confidence >= SCALE_AUTO_EXECUTE,
        )

    if spent_enough and (
        (cpa is not None and cpa > config.target_cpa * 1.5)
        or (roas is not None and roas < config.target_roas * 0.7)
        or creative.ctr < PAUSE_LOW_CTR
    ):
        confidence = PAUSE_BASE_CONFIDENCE
        if cpa is not None and cpa > config.target_cpa * 2:
            confidence += 15
        if creative.ctr < PAUSE_VERY_LOW_CTR:
            confidence += 10
        return ActionRecommendation(
            creative=creative,
            recommended_action="pause",
            reason=(
                f"Poor performance: CPA {_money(cpa)} (target: ${config.target_cpa:.2f}), "
                f"CTR {creative.ctr * 100:.2f}%"
            ),
            confidence=confidence,
            auto_execute=confidence >= PAUSE_AUTO_EXECUTE,
        )

    if not spent_enough and creative.impressions > TEST_MIN_IMPRESSIONS:
        return ActionRecommendation(
            creative=creative,
            recommended_action="test",
            reason=f"Needs more data: only ${creative.spend:.2f} spent, {creative.impressions} impressions",
            confidence=TEST_CONFIDENCE,
            auto_execute=False,
        )

    return None


class LifecycleManager:
    """Track test/scale/pause decisions and learn from their outcomes."""

    def __init__(self, store: LifecycleStore) -> None:
        self.store = store

    async def log_action(self, action: ActionInput) -> str:
        """Append an action to the log and return its id."""
        if action.action_type not in ACTION_TYPES:
            raise InvalidActionError(
                f"Unknown action type: {action.action_type}",
                {"allowed": list(ACTION_TYPES)},
            )
        if action.decided_by not in DECISION_SOURCES:
            raise InvalidActionError(
                f"Unknown decision source: {action.decided_by}",
                {"allowed": list(DECISION_SOURCES)},
            )
        if not action.creative_id or not action.reason_short.strip():
            raise InvalidActionError("creative_id and reason_short are required")

        try:
            record = await self.store.insert_action(action)
        except ConflictError as exc:
            raise CreativeNotFoundError(action.creative_id) from exc

        logger.info(
            "Action logged",
            extra={
                "action_id": record.id,
                "creative_id": record.creative_id,
                "action_type": record.action_type,
                "decided_by": record.decided_by,
            },
        )
        return record.id

    async def update_creative_metrics(
        self,
        creative: CreativeRecord,
        *,
        observed_at: datetime | None = None,
    ) -> None:
        """Upsert the creative and append a metric snapshot in one transaction."""
        await self.store.record_ingestion(creative, observed_at or datetime.now(timezone.utc))

    async def get_creative_history(
        self,
        creative_id: str,
        *,
        snapshot_limit: int | None = None,
    ) -> CreativeHistory:
        history = await self.store.get_creative_history(
            creative_id,
            snapshot_limit=snapshot_limit or settings.history_snapshot_limit,
        )
        if history is None:
            raise CreativeNotFoundError(creative_id)
        return history

    async def get_recent_actions(
        self,
        limit: int | None = None,
        *,
        action_type: str | None = None,
        creative_id: str | None = None,
        decided_by: str | None = None,
    ) -> list[ActionFeedItem]:
        return await self.store.list_recent_actions(
            limit=limit or settings.recent_actions_default_limit,
            action_type=action_type,
            creative_id=creative_id,
            decided_by=decided_by,
        )

    async def analyze_outcomes(self, lookback_days: int | None = None) -> list[OutcomeAnalysis]:
        """Classify actions from the lookback window by their before/after snapshots.

        Actions without a snapshot on both sides of the decision are skipped.
        """
        days = lookback_days if lookback_days is not None else settings.outcome_lookback_days
        since = datetime.now(timezone.utc) - timedelta(days=days)
        candidates = await self.store.list_actions_since(since)

        outcomes: list[OutcomeAnalysis] = []
        skipped = 0
        for item in candidates:
            outcome = analyze_action_outcome(item.action, item.snapshots)
            if outcome is None:
                skipped += 1
                continue
            outcomes.append(outcome)

        logger.info(
            "Outcome analysis completed",
            extra={
                "lookback_days": days,
                "actions": len(candidates),
                "analyzed": len(outcomes),
                "skipped": skipped,
            },
        )
        return outcomes

    async def generate_learning_insights(self) -> list[LearningInsight]:
        rows = await self.store.list_creatives_for_learning()
        insights: list[LearningInsight] = []

        successful_scales = [
            row
            for row in rows
            if "scaled" in row.action_types
            and row.latest_ctr is not None
            and row.latest_ctr > SUCCESSFUL_SCALE_CTR
        ]
        if len(successful_scales) >= MIN_PATTERN_SAMPLE:
            features = [row.creative.features for row in successful_scales if row.creative.features]
            if features:
                total = len(features)
                faces = sum(1 for item in features if item.image.has_face)
                numerals = sum(1 for item in features if item.headline.has_numerals)
                if faces / total > FACE_PATTERN_THRESHOLD:
                    insights.append(
                        LearningInsight(
                            pattern="Face + Eye Contact → Higher CTR",
                            confidence=round(faces / total * 100),
                            evidence=[f"{faces}/{total} successful scales had faces"],
                            recommendation="Prioritize creatives with clear faces and eye contact for scaling",
                        )
                    )
                if numerals / total > NUMERAL_PATTERN_THRESHOLD:
                    insights.append(
                        LearningInsight(
                            pattern="Numerical Headlines → Better Performance",
                            confidence=round(numerals / total * 100),
                            evidence=[f"{numerals}/{total} successful scales had numbers in headlines"],
                            recommendation="Test numerical variations for all headlines",
                        )
                    )

        paused_high_cpa = [
            row
            for row in rows
            if "paused" in row.action_types
            and row.creative.cpa is not None
            and row.creative.cpa > HIGH_CPA_PAUSE
        ]
        if len(paused_high_cpa) >= MIN_PATTERN_SAMPLE:
            insights.append(
                LearningInsight(
                    pattern="High CPA → Pause Decision Accuracy",
                    confidence=85,
                    evidence=[f"{len(paused_high_cpa)} creatives with CPA > ${HIGH_CPA_PAUSE} were correctly paused"],
                    recommendation="Auto-pause creatives when CPA exceeds $25 for 3+ days",
                )
            )

        logger.info(
            "Learning insights generated",
            extra={
                "creatives": len(rows),
                "successful_scales": len(successful_scales),
                "paused_high_cpa": len(paused_high_cpa),
                "insights": len(insights),
            },
        )
        return insights

    async def get_learning_config(self, account_id: str) -> LearningConfigRecord:
        """Return the account's config, creating it with defaults on first access."""
        config = await self.store.get_learning_config(account_id)
        if config is not None:
            return config
        logger.info("Creating default learning config", extra={"account_id": account_id})
        return await self.store.create_learning_config(account_id, settings.learning_config_defaults())

    async def update_learning_config(
        self,
        account_id: str,
        updates: Mapping[str, Any],
    ) -> LearningConfigRecord:
        unknown = sorted(set(updates) - set(LEARNING_CONFIG_FIELDS))
        if unknown:
            raise InvalidActionError(
                f"Unknown learning config fields: {', '.join(unknown)}",
                {"allowed": list(LEARNING_CONFIG_FIELDS)},
            )
        return await self.store.upsert_learning_config(
            account_id,
            settings.learning_config_defaults(),
            dict(updates),
        )

    async def generate_action_recommendations(
        self,
        creatives: Sequence[CreativeRecord],
        account_id: str,
    ) -> list[ActionRecommendation]:
        """At most one scale/pause/test recommendation per creative, most confident first."""
        config = await self.get_learning_config(account_id)
        recommendations = [
            recommendation
            for recommendation in (_recommend_for(creative, config) for creative in creatives)
            if recommendation is not None
        ]
        recommendations.sort(key=lambda item: item.confidence, reverse=True)
        return recommendations

    async def execute_automated_action(self, recommendation: ActionRecommendation) -> str:
        creative = recommendation.creative
        return await self.log_action(
            ActionInput(
                creative_id=creative.id,
                action_type=ACTION_FOR_RECOMMENDATION[recommendation.recommended_action],
                reason_short=f"Auto-{recommendation.recommended_action}",
                reason_detail=recommendation.reason,
                decided_by="rule",
                inputs={
                    "confidence": recommendation.confidence,
                    "metrics": {
                        "spend": creative.spend,
                        "ctr": creative.ctr,
                        "cpa": creative.cpa,
                        "roas": creative.roas,
                    },
                },
            )
        )
