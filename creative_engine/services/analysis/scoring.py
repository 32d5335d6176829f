"""Composite 0-100 creative score."""

from __future__ import annotations

from collections.abc import Sequence

from creative_engine.services.analysis.types import (
    CreativeFeatures,
    CreativeRecord,
    PerformanceInsight,
)

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

# Thresholds are currency-agnostic (CPA compared as a plain number).
CTR_GOOD = 0.01
CTR_GREAT = 0.02
CONVERSION_RATE_GOOD = 0.02
CPA_GOOD = 20

POSITIVE_INSIGHT_POINTS = 8
NEGATIVE_INSIGHT_POINTS = 5


def _performance_points(creative: CreativeRecord) -> int:
    points = 0
    if creative.ctr > CTR_GOOD:
        points += 15
    if creative.ctr > CTR_GREAT:
        points += 10
    if creative.effective_conversion_rate > CONVERSION_RATE_GOOD:
        points += 10
    if creative.cpa and creative.cpa < CPA_GOOD:
        points += 5
    return points


def _feature_points(features: CreativeFeatures) -> int:
    points = 0
    if features.headline.has_numerals:
        points += 5
    if features.image.has_face:
        points += 8
    if features.image.has_eye_contact:
        points += 5
    if features.headline.benefit_keywords:
        points += 3
    if features.headline.cta_words:
        points += 3
    return points


def calculate_creative_score(
    creative: CreativeRecord,
    features: CreativeFeatures,
    insights: Sequence[PerformanceInsight],
) -> int:
    """Score a creative from metrics, features and insights, clamped to [0, 100].

    Every positive signal only ever adds points, so enabling one never lowers
    the score.
    """
    positive = sum(1 for insight in insights if insight.type == "positive")
    negative = sum(1 for insight in insights if insight.type == "negative")

    score = (
        BASE_SCORE
        + _performance_points(creative)
        + _feature_points(features)
        + positive * POSITIVE_INSIGHT_POINTS
        - negative * NEGATIVE_INSIGHT_POINTS
    )
    return max(MIN_SCORE, min(MAX_SCORE, score))
