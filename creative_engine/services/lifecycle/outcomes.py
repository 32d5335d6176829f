"""Retrospective classification of lifecycle actions."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from creative_engine.services.lifecycle.types import (
    ActionRecord,
    MetricSnapshotRecord,
    Outcome,
    OutcomeAnalysis,
    PerformanceSnapshot,
)

SCALE_IMPROVED_CTR = 0.10
SCALE_IMPROVED_ROAS = 0.15
SCALE_DECLINED_CTR = -0.15
SCALE_DECLINED_ROAS = -0.25
PAUSE_LOW_CTR = 0.005
PAUSE_HIGH_CPA = 30


def _relative_delta(before: float | None, after: float | None) -> float:
    if not before or after is None:
        return 0.0
    return (after - before) / before


def bracket_snapshots(
    snapshots: Sequence[MetricSnapshotRecord],
    decided_at: datetime,
) -> tuple[MetricSnapshotRecord | None, MetricSnapshotRecord | None]:
    """Newest snapshot strictly before and oldest strictly after the decision."""
    pre = None
    post = None
    for snapshot in snapshots:
        if snapshot.at < decided_at:
            if pre is None or snapshot.at > pre.at:
                pre = snapshot
        elif snapshot.at > decided_at:
            if post is None or snapshot.at < post.at:
                post = snapshot
    return pre, post


def classify_outcome(
    action_type: str,
    pre: PerformanceSnapshot,
    post: PerformanceSnapshot,
) -> tuple[Outcome, int]:
    if action_type == "scaled":
        ctr_delta = _relative_delta(pre.ctr, post.ctr)
        roas_delta = _relative_delta(pre.roas, post.roas)
        if ctr_delta > SCALE_IMPROVED_CTR or roas_delta > SCALE_IMPROVED_ROAS:
            return "improved", 80
        if ctr_delta < SCALE_DECLINED_CTR or roas_delta < SCALE_DECLINED_ROAS:
            return "declined", 75
        return "neutral", 0

    if action_type == "paused":
        # A pause is judged correct in hindsight when the creative was failing.
        if pre.ctr < PAUSE_LOW_CTR or (pre.cpa is not None and pre.cpa > PAUSE_HIGH_CPA):
            return "improved", 70
        return "neutral", 0

    # "tested" has no success criterion yet.
    return "neutral", 0


def analyze_action_outcome(
    action: ActionRecord,
    snapshots: Sequence[MetricSnapshotRecord],
) -> OutcomeAnalysis | None:
    """Classify one action, or None when it lacks a snapshot on either side."""
    pre_snapshot, post_snapshot = bracket_snapshots(snapshots, action.decided_at)
    if pre_snapshot is None or post_snapshot is None:
        return None

    pre = PerformanceSnapshot.from_snapshot(pre_snapshot)
    post = PerformanceSnapshot.from_snapshot(post_snapshot)
    outcome, confidence = classify_outcome(action.action_type, pre, post)
    return OutcomeAnalysis(
        action_id=action.id,
        creative_id=action.creative_id,
        action_type=action.action_type,
        pre_performance=pre,
        post_performance=post,
        outcome=outcome,
        outcome_confidence=confidence,
    )
