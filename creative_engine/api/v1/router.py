"""API v1 router aggregator."""

from fastapi import APIRouter

from creative_engine.api.v1.analysis.routes import router as analysis_router
from creative_engine.api.v1.lifecycle.routes import router as lifecycle_router
from creative_engine.api.v1.specs.routes import router as specs_router

api_router = APIRouter()

api_router.include_router(analysis_router, prefix="/analysis", tags=["Analysis"])
api_router.include_router(specs_router, prefix="/specs", tags=["Specs"])
api_router.include_router(lifecycle_router, prefix="/lifecycle", tags=["Lifecycle"])
