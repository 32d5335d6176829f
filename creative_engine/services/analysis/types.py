"""Domain types for creative analysis."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

Sentiment = Literal["positive", "negative", "neutral"]
Contrast = Literal["high", "medium", "low"]
Complexity = Literal["simple", "moderate", "complex"]
InsightType = Literal["positive", "negative", "neutral"]
RecommendationType = Literal["headline", "image"]


@dataclass(slots=True)
class HeadlineFeatures:
    length: int
    has_numerals: bool
    has_currency: bool
    has_brand_mention: bool
    is_question: bool
    is_imperative: bool
    sentiment: Sentiment
    benefit_keywords: list[str] = field(default_factory=list)
    curiosity_keywords: list[str] = field(default_factory=list)
    time_elements: list[str] = field(default_factory=list)
    step_elements: list[str] = field(default_factory=list)
    cta_words: list[str] = field(default_factory=list)
    superlatives: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ImageFeatures:
    """Visual traits of a thumbnail.

    Currently populated from URL/filename substrings, not pixels. Any vision
    backend that fills these fields can replace the heuristic without touching
    scoring or recommendations.
    """

    has_face: bool
    has_eye_contact: bool
    is_close_up: bool
    has_text_overlay: bool
    has_logo: bool
    is_storefront: bool
    dominant_colors: list[str] = field(default_factory=list)
    contrast: Contrast = "low"
    complexity: Complexity = "simple"


@dataclass(slots=True)
class DestinationFeatures:
    domain: str
    is_ecommerce: bool
    has_ssl: bool
    load_time_ms: float
    is_mobile: bool
    has_contact_info: bool

    @classmethod
    def unknown(cls) -> DestinationFeatures:
        """Neutral features used when the destination URL cannot be parsed."""
        return cls(
            domain="unknown",
            is_ecommerce=False,
            has_ssl=False,
            load_time_ms=0.0,
            is_mobile=False,
            has_contact_info=False,
        )


@dataclass(slots=True)
class CreativeFeatures:
    headline: HeadlineFeatures
    image: ImageFeatures
    destination: DestinationFeatures

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape stored on the creative row."""
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CreativeFeatures:
        """Deserialize a stored feature snapshot."""
        return cls(
            headline=HeadlineFeatures(**payload["headline"]),
            image=ImageFeatures(**payload["image"]),
            destination=DestinationFeatures(**payload["destination"]),
        )


@dataclass(slots=True)
class CreativeRecord:
    """A creative with its aggregate metrics as supplied by an ad network client."""

    id: str
    campaign_id: str
    headline: str
    thumbnail_url: str
    destination_url: str
    spend: float = 0.0
    impressions: int = 0
    clicks: int = 0
    ctr: float = 0.0
    cpc: float = 0.0
    conversions: int = 0
    cpa: float | None = None
    roas: float | None = None
    conversion_rate: float | None = None
    is_active: bool = True
    features: CreativeFeatures | None = None

    @property
    def effective_conversion_rate(self) -> float:
        """Upstream conversion rate, else conversions per click."""
        if self.conversion_rate is not None:
            return self.conversion_rate
        if self.clicks > 0:
            return self.conversions / self.clicks
        return 0.0

    def metrics_dict(self) -> dict[str, Any]:
        return {
            "spend": self.spend,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "ctr": self.ctr,
            "cpc": self.cpc,
            "conversions": self.conversions,
            "cpa": self.cpa,
            "roas": self.roas,
        }


@dataclass(slots=True)
class PeerComparison:
    ctr_uplift: float = 0.0
    cpa_uplift: float = 0.0
    roas_uplift: float = 0.0
    sample_size: int = 0
    peer_avg_ctr: float | None = None
    peer_avg_cpa: float | None = None
    peer_avg_roas: float | None = None


@dataclass(slots=True)
class PerformanceInsight:
    type: InsightType
    feature: str
    impact: str
    confidence: int
    evidence: str
    uplift: float | None = None


@dataclass(slots=True)
class CreativeRecommendation:
    type: RecommendationType
    content: str
    reason: str
    confidence: int
    based_on: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AnalysisOptions:
    compare_with_peers: bool = True
    generate_recommendations: bool = True
    min_spend: float = 5.0
    min_conversions: int = 1


@dataclass(slots=True)
class AnalysisResult:
    creative: CreativeRecord
    features: CreativeFeatures
    insights: list[PerformanceInsight]
    recommendations: list[CreativeRecommendation]
    score: int
    peer_comparison: PeerComparison
