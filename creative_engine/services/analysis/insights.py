"""Qualitative insights from peer uplift and creative features."""

from __future__ import annotations

from creative_engine.services.analysis.types import (
    CreativeFeatures,
    CreativeRecord,
    PeerComparison,
    PerformanceInsight,
)

HIGH_CTR_UPLIFT = 0.15
LOW_CTR_UPLIFT = -0.25
EFFICIENT_CPA_UPLIFT = -0.20
STRONG_ROAS_UPLIFT = 0.25
LONG_HEADLINE_CHARS = 50


def _high_ctr_reasons(features: CreativeFeatures) -> list[str]:
    reasons = []
    if features.headline.has_numerals:
        reasons.append("numerical element")
    if features.image.has_face:
        reasons.append("face presence")
    if features.image.has_eye_contact:
        reasons.append("eye contact")
    if features.headline.is_question:
        reasons.append("question format")
    return reasons


def _low_ctr_issues(features: CreativeFeatures) -> list[str]:
    issues = []
    if features.headline.length > LONG_HEADLINE_CHARS:
        issues.append("long headline")
    if not features.image.has_face:
        issues.append("no face")
    if not features.headline.has_numerals:
        issues.append("no numerical hook")
    return issues


def generate_insights(
    creative: CreativeRecord,
    features: CreativeFeatures,
    peer_comparison: PeerComparison,
) -> list[PerformanceInsight]:
    """Turn peer uplift into positive/negative insights. Missing data yields none."""
    insights: list[PerformanceInsight] = []

    if peer_comparison.ctr_uplift > HIGH_CTR_UPLIFT:
        reasons = _high_ctr_reasons(features)
        insights.append(
            PerformanceInsight(
                type="positive",
                feature="High CTR Performance",
                impact=f"+{peer_comparison.ctr_uplift * 100:.1f}% vs peers",
                confidence=min(95, 60 + 10 * len(reasons)),
                evidence=f"CTR of {creative.ctr * 100:.2f}% with {', '.join(reasons) or 'no standout features'}",
                uplift=peer_comparison.ctr_uplift,
            )
        )

    if creative.cpa and peer_comparison.cpa_uplift < EFFICIENT_CPA_UPLIFT:
        insights.append(
            PerformanceInsight(
                type="positive",
                feature="Efficient CPA",
                impact=f"{peer_comparison.cpa_uplift * 100:.1f}% lower CPA",
                confidence=85,
                evidence=f"CPA of ${creative.cpa:.2f} vs peer average",
                uplift=abs(peer_comparison.cpa_uplift),
            )
        )

    if creative.roas and peer_comparison.roas_uplift > STRONG_ROAS_UPLIFT:
        insights.append(
            PerformanceInsight(
                type="positive",
                feature="Strong ROAS",
                impact=f"+{peer_comparison.roas_uplift * 100:.1f}% ROAS uplift",
                confidence=90,
                evidence=f"ROAS of {creative.roas:.2f}x",
                uplift=peer_comparison.roas_uplift,
            )
        )

    if peer_comparison.ctr_uplift < LOW_CTR_UPLIFT:
        issues = _low_ctr_issues(features)
        insights.append(
            PerformanceInsight(
                type="negative",
                feature="Low CTR Performance",
                impact=f"{peer_comparison.ctr_uplift * 100:.1f}% vs peers",
                confidence=75,
                evidence=f"CTR of {creative.ctr * 100:.2f}% with potential issues: {', '.join(issues) or 'none identified'}",
                uplift=abs(peer_comparison.ctr_uplift),
            )
        )

    return insights
