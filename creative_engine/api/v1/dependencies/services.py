"""Access to the service graph built during application startup."""

from typing import Annotated

from fastapi import Depends, Request

from creative_engine.services.analysis.service import CreativeAnalysisService
from creative_engine.services.container import Services
from creative_engine.services.lifecycle.manager import LifecycleManager
from creative_engine.services.specs.client import SpecsClient


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_specs_client(request: Request) -> SpecsClient:
    return get_services(request).specs


def get_lifecycle_manager(request: Request) -> LifecycleManager:
    return get_services(request).lifecycle


def get_analysis_service(request: Request) -> CreativeAnalysisService:
    return get_services(request).analysis


SpecsClientDep = Annotated[SpecsClient, Depends(get_specs_client)]
LifecycleManagerDep = Annotated[LifecycleManager, Depends(get_lifecycle_manager)]
AnalysisServiceDep = Annotated[CreativeAnalysisService, Depends(get_analysis_service)]
