"""Creative analysis schemas."""

from pydantic import BaseModel, Field

from creative_engine.services.analysis.types import (
    AnalysisOptions,
    AnalysisResult,
    CreativeFeatures,
    CreativeRecommendation,
    CreativeRecord,
    PeerComparison,
    PerformanceInsight,
)


class CreativeInput(BaseModel):
    """A creative and its aggregate metrics as reported by the ad network."""

    id: str = Field(min_length=1)
    campaign_id: str = Field(min_length=1)
    headline: str
    thumbnail_url: str
    destination_url: str
    spend: float = Field(0.0, ge=0)
    impressions: int = Field(0, ge=0)
    clicks: int = Field(0, ge=0)
    ctr: float = Field(0.0, ge=0)
    cpc: float = Field(0.0, ge=0)
    conversions: int = Field(0, ge=0)
    cpa: float | None = None
    roas: float | None = None
    conversion_rate: float | None = None
    is_active: bool = True

    def to_record(self) -> CreativeRecord:
        return CreativeRecord(**self.model_dump())


class AnalysisRunRequest(BaseModel):
    """Schema for running a batch analysis."""

    creatives: list[CreativeInput] = Field(min_length=1)
    compare_with_peers: bool = True
    generate_recommendations: bool = True
    min_spend: float | None = Field(None, ge=0)
    min_conversions: int | None = Field(None, ge=0)
    persist_metrics: bool = False

    def to_options(self, *, default_min_spend: float, default_min_conversions: int) -> AnalysisOptions:
        return AnalysisOptions(
            compare_with_peers=self.compare_with_peers,
            generate_recommendations=self.generate_recommendations,
            min_spend=self.min_spend if self.min_spend is not None else default_min_spend,
            min_conversions=(
                self.min_conversions if self.min_conversions is not None else default_min_conversions
            ),
        )


class AnalysisResultResponse(BaseModel):
    """One analysed creative."""

    creative_id: str
    campaign_id: str
    headline: str
    score: int
    features: CreativeFeatures
    insights: list[PerformanceInsight]
    recommendations: list[CreativeRecommendation]
    peer_comparison: PeerComparison

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisResultResponse":
        return cls(
            creative_id=result.creative.id,
            campaign_id=result.creative.campaign_id,
            headline=result.creative.headline,
            score=result.score,
            features=result.features,
            insights=result.insights,
            recommendations=result.recommendations,
            peer_comparison=result.peer_comparison,
        )


class AnalysisRunResponse(BaseModel):
    """Schema for batch analysis results, best score first."""

    received: int
    analyzed: int
    results: list[AnalysisResultResponse]
