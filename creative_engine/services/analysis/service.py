"""Batch creative analysis."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from creative_engine.services.analysis.features import extract_features
from creative_engine.services.analysis.insights import generate_insights
from creative_engine.services.analysis.peers import compare_to_peers
from creative_engine.services.analysis.recommendations import RecommendationGenerator
from creative_engine.services.analysis.scoring import calculate_creative_score
from creative_engine.services.analysis.types import (
    AnalysisOptions,
    AnalysisResult,
    CreativeRecord,
    PeerComparison,
)

if TYPE_CHECKING:
    from creative_engine.services.lifecycle.manager import LifecycleManager

logger = logging.getLogger(__name__)


def qualifies(creative: CreativeRecord, options: AnalysisOptions) -> bool:
    return creative.spend >= options.min_spend and creative.conversions >= options.min_conversions


class CreativeAnalysisService:
    """Run feature extraction, peer comparison, insights, recommendations and scoring."""

    def __init__(
        self,
        recommender: RecommendationGenerator,
        lifecycle: LifecycleManager | None = None,
    ) -> None:
        self.recommender = recommender
        self.lifecycle = lifecycle

    async def analyze_creative(
        self,
        creative: CreativeRecord,
        peers: Sequence[CreativeRecord],
        options: AnalysisOptions,
    ) -> AnalysisResult:
        """Analyze one creative against its peers.

        Insights and the score always use the real peer comparison;
        `compare_with_peers=False` only leaves it out of the result.
        """
        features = extract_features(creative)
        peer_comparison = compare_to_peers(creative, peers)
        insights = generate_insights(creative, features, peer_comparison)
        recommendations = (
            await self.recommender.generate(creative, features)
            if options.generate_recommendations
            else []
        )
        score = calculate_creative_score(creative, features, insights)
        return AnalysisResult(
            creative=creative,
            features=features,
            insights=insights,
            recommendations=recommendations,
            score=score,
            peer_comparison=peer_comparison if options.compare_with_peers else PeerComparison(),
        )

    async def analyze_creatives(
        self,
        creatives: Sequence[CreativeRecord],
        options: AnalysisOptions | None = None,
        *,
        persist_metrics: bool = False,
    ) -> list[AnalysisResult]:
        """Analyze every qualifying creative; one creative failing does not stop the batch.

        Peers are the other qualifying creatives. Results are sorted by
        descending score. With `persist_metrics`, every creative in the batch
        is ingested, carrying its features when analysis produced them.
        """
        options = options or AnalysisOptions()
        if persist_metrics and self.lifecycle is None:
            raise ValueError("persist_metrics requires a lifecycle manager")

        eligible = [creative for creative in creatives if qualifies(creative, options)]
        results: list[AnalysisResult] = []
        failed = 0

        for creative in eligible:
            try:
                result = await self.analyze_creative(creative, eligible, options)
            except Exception:
                failed += 1
                logger.exception(
                    "Creative analysis failed",
                    extra={"creative_id": creative.id, "campaign_id": creative.campaign_id},
                )
                continue
            results.append(result)

        if persist_metrics and self.lifecycle is not None:
            features_by_id = {result.creative.id: result.features for result in results}
            for creative in creatives:
                if creative.id in features_by_id:
                    creative.features = features_by_id[creative.id]
                await self.lifecycle.update_creative_metrics(creative)

        results.sort(key=lambda result: result.score, reverse=True)
        logger.info(
            "Creative analysis batch completed",
            extra={
                "received": len(creatives),
                "eligible": len(eligible),
                "analyzed": len(results),
                "failed": failed,
                "persisted": len(creatives) if persist_metrics else 0,
            },
        )
        return results
