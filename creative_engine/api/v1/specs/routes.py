"""Platform spec API endpoints."""

from fastapi import APIRouter

from creative_engine.api.v1.dependencies import SpecsClientDep
from creative_engine.schemas.specs import (
    SpecsResponse,
    SpecValidationRequest,
    SpecValidationResponse,
)

router = APIRouter()


@router.get("", response_model=SpecsResponse)
async def get_specs(specs_client: SpecsClientDep) -> SpecsResponse:
    """Get the platform specs currently in force."""
    return SpecsResponse.from_specs(await specs_client.get_current_specs())


@router.post("/validate", response_model=SpecValidationResponse)
async def validate_creative(
    request: SpecValidationRequest,
    specs_client: SpecsClientDep,
) -> SpecValidationResponse:
    """Validate a headline or an image URL against the current specs."""
    specs = await specs_client.get_current_specs()
    if request.type == "headline":
        validation = await specs_client.validate_headline(request.content)
    else:
        validation = await specs_client.validate_image_url(request.content)
    return SpecValidationResponse(
        type=request.type,
        specs_version=specs.version,
        validation=validation,
    )
