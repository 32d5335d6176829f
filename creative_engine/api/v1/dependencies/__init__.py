"""Reusable API dependencies shared across v1 routes."""

from creative_engine.api.v1.dependencies.services import (
    AnalysisServiceDep,
    LifecycleManagerDep,
    SpecsClientDep,
    get_services,
)

__all__ = ["AnalysisServiceDep", "LifecycleManagerDep", "SpecsClientDep", "get_services"]
