"""Process-wide service wiring."""

from __future__ import annotations

from dataclasses import dataclass

from creative_engine.repositories.contracts import LifecycleStore, SpecSnapshotStore
from creative_engine.repositories.lifecycle_repository import SqlLifecycleStore
from creative_engine.repositories.spec_snapshot_repository import SqlSpecSnapshotStore
from creative_engine.services.analysis.recommendations import RecommendationGenerator
from creative_engine.services.analysis.service import CreativeAnalysisService
from creative_engine.services.lifecycle.manager import LifecycleManager
from creative_engine.services.specs.client import SpecsClient


@dataclass(slots=True)
class Services:
    specs: SpecsClient
    lifecycle: LifecycleManager
    analysis: CreativeAnalysisService


def build_services(
    *,
    lifecycle_store: LifecycleStore | None = None,
    spec_store: SpecSnapshotStore | None = None,
) -> Services:
    """Construct the service graph once per process (API lifespan or worker)."""
    specs = SpecsClient(spec_store or SqlSpecSnapshotStore())
    lifecycle = LifecycleManager(lifecycle_store or SqlLifecycleStore())
    analysis = CreativeAnalysisService(RecommendationGenerator(specs), lifecycle)
    return Services(specs=specs, lifecycle=lifecycle, analysis=analysis)
