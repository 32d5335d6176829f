"""Peer-relative performance comparison."""

from __future__ import annotations

from collections.abc import Sequence

from creative_engine.services.analysis.types import CreativeRecord, PeerComparison

SIMILAR_SPEND_RATIO = 0.5


def _reported(value: float | None) -> bool:
    return value is not None and value > 0


def _is_peer(subject: CreativeRecord, other: CreativeRecord) -> bool:
    if other.id == subject.id:
        return False
    same_campaign = other.campaign_id == subject.campaign_id
    similar_spend = abs(other.spend - subject.spend) < subject.spend * SIMILAR_SPEND_RATIO
    return same_campaign or similar_spend


def _mean(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def _uplift(subject_value: float | None, peer_average: float | None) -> float:
    if not _reported(peer_average) or not _reported(subject_value):
        return 0.0
    return (subject_value - peer_average) / peer_average  # type: ignore[operator]


def compare_to_peers(
    creative: CreativeRecord,
    all_creatives: Sequence[CreativeRecord],
) -> PeerComparison:
    """Compare a creative against others in its campaign or spend band.

    Uplift is relative: positive CTR/ROAS uplift is good, negative CPA uplift
    (cheaper acquisitions) is good. CPA and ROAS averages only use peers that
    report the metric.
    """
    peers = [other for other in all_creatives if _is_peer(creative, other)]
    if not peers:
        return PeerComparison()

    avg_ctr = _mean([peer.ctr for peer in peers])
    avg_cpa = _mean([peer.cpa for peer in peers if _reported(peer.cpa)])  # type: ignore[misc]
    avg_roas = _mean([peer.roas for peer in peers if _reported(peer.roas)])  # type: ignore[misc]

    ctr_uplift = (creative.ctr - avg_ctr) / avg_ctr if avg_ctr else 0.0

    return PeerComparison(
        ctr_uplift=ctr_uplift,
        cpa_uplift=_uplift(creative.cpa, avg_cpa),
        roas_uplift=_uplift(creative.roas, avg_roas),
        sample_size=len(peers),
        peer_avg_ctr=avg_ctr,
        peer_avg_cpa=avg_cpa,
        peer_avg_roas=avg_roas,
    )
