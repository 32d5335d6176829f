"""Headline rewrites and image guidance for a single creative."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from creative_engine.config import settings
from creative_engine.services.analysis.types import (
    CreativeFeatures,
    CreativeRecommendation,
    CreativeRecord,
)
from creative_engine.services.specs.types import PlatformSpecs

if TYPE_CHECKING:
    from creative_engine.services.specs.client import SpecsClient

logger = logging.getLogger(__name__)

QUESTION_MAX_BASE_LENGTH = 45

NUMERAL_TEMPLATES = (
    "7 {title}",
    "{title} in 5 Minutes",
    "10 Best {title}",
    "{title} - 3 Simple Steps",
)
QUESTION_TEMPLATES = (
    "How to {title}?",
    "Why {title}?",
    "What Makes {title} Special?",
)
URGENCY_TEMPLATES = (
    "{title} - Limited Time",
    "Get {title} Today",
    "{title} Now Available",
)


def _by_confidence(items: list[CreativeRecommendation]) -> list[CreativeRecommendation]:
    return sorted(items, key=lambda item: item.confidence, reverse=True)


def _headline_variants(
    title: str,
    templates: tuple[str, ...],
    *,
    max_chars: int,
    reason: str,
    confidence: int,
    based_on: list[str],
) -> list[CreativeRecommendation]:
    variants = []
    for template in templates:
        content = template.format(title=title)
        if len(content) > max_chars:
            continue
        variants.append(
            CreativeRecommendation(
                type="headline",
                content=content,
                reason=reason,
                confidence=confidence,
                based_on=list(based_on),
            )
        )
    return variants


def headline_recommendations(
    creative: CreativeRecord,
    features: CreativeFeatures,
    specs: PlatformSpecs,
    *,
    limit: int = 12,
) -> list[CreativeRecommendation]:
    """Template rewrites of the headline that fit the platform length cap."""
    headline = features.headline
    max_chars = specs.headline_max_chars
    items: list[CreativeRecommendation] = []

    if not headline.has_numerals:
        items += _headline_variants(
            creative.headline,
            NUMERAL_TEMPLATES,
            max_chars=max_chars,
            reason="Adding numbers can increase CTR by 15-25%",
            confidence=85,
            based_on=["numerical_hook", "ctr_optimization"],
        )
    if not headline.is_question and headline.length < QUESTION_MAX_BASE_LENGTH:
        items += _headline_variants(
            creative.headline,
            QUESTION_TEMPLATES,
            max_chars=max_chars,
            reason="Question format increases engagement by 10-20%",
            confidence=75,
            based_on=["question_format", "engagement_boost"],
        )
    if not headline.time_elements:
        items += _headline_variants(
            creative.headline,
            URGENCY_TEMPLATES,
            max_chars=max_chars,
            reason="Urgency elements can improve conversion rates",
            confidence=70,
            based_on=["urgency_optimization", "conversion_boost"],
        )

    return _by_confidence(items)[:limit]


def image_recommendations(
    features: CreativeFeatures,
    *,
    limit: int = 8,
) -> list[CreativeRecommendation]:
    """Image guidance derived from the (heuristic) image and destination traits."""
    image = features.image
    items: list[CreativeRecommendation] = []

    if not image.has_face:
        items.append(
            CreativeRecommendation(
                type="image",
                content="Use image with clear face and direct eye contact (16:9, ~1200×674px)",
                reason="Images with faces typically see 20-30% higher CTR",
                confidence=90,
                based_on=["face_detection", "ctr_improvement"],
            )
        )
    if image.has_face and not image.has_eye_contact:
        items.append(
            CreativeRecommendation(
                type="image",
                content="Ensure subject makes direct eye contact with camera",
                reason="Eye contact increases engagement and trust",
                confidence=85,
                based_on=["eye_contact", "engagement_boost"],
            )
        )
    if image.contrast == "low":
        items.append(
            CreativeRecommendation(
                type="image",
                content="Increase image contrast for better visibility in feed",
                reason="High contrast images perform better in social feeds",
                confidence=75,
                based_on=["contrast_optimization", "visibility"],
            )
        )
    if image.complexity == "complex":
        items.append(
            CreativeRecommendation(
                type="image",
                content="Simplify image composition - focus on single subject",
                reason="Simple, focused images often outperform complex ones",
                confidence=80,
                based_on=["simplicity", "focus_optimization"],
            )
        )
    if features.destination.is_ecommerce and not image.is_storefront:
        items.append(
            CreativeRecommendation(
                type="image",
                content="Test product close-up vs lifestyle/context shot",
                reason="Product imagery balance affects conversion rates",
                confidence=70,
                based_on=["ecommerce_optimization", "product_focus"],
            )
        )

    return _by_confidence(items)[:limit]


class RecommendationGenerator:
    """Build recommendations for a creative against the current platform specs."""

    def __init__(
        self,
        specs_client: SpecsClient,
        *,
        headline_limit: int | None = None,
        image_limit: int | None = None,
    ) -> None:
        self.specs_client = specs_client
        self.headline_limit = headline_limit or settings.headline_recommendation_limit
        self.image_limit = image_limit or settings.image_recommendation_limit

    async def generate(
        self,
        creative: CreativeRecord,
        features: CreativeFeatures,
    ) -> list[CreativeRecommendation]:
        specs = await self.specs_client.get_current_specs()
        items = headline_recommendations(
            creative,
            features,
            specs,
            limit=self.headline_limit,
        ) + image_recommendations(features, limit=self.image_limit)
        logger.debug(
            "Generated creative recommendations",
            extra={
                "creative_id": creative.id,
                "specs_version": specs.version,
                "count": len(items),
            },
        )
        return _by_confidence(items)
