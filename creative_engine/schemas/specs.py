"""Platform spec schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from creative_engine.services.specs.types import (
    HeadlineValidation,
    ImageValidation,
    PlatformPolicies,
    PlatformSpecs,
)


class SpecsResponse(BaseModel):
    """Schema for the current platform specs."""

    id: str
    version: str
    fetched_at: datetime
    headline_max_chars: int
    headline_warn_chars: int
    image_min_width: int
    image_min_height: int
    image_max_size: int
    allowed_formats: list[str]
    policies: PlatformPolicies

    @classmethod
    def from_specs(cls, specs: PlatformSpecs) -> "SpecsResponse":
        return cls(
            id=specs.id,
            version=specs.version,
            fetched_at=specs.fetched_at,
            headline_max_chars=specs.headline_max_chars,
            headline_warn_chars=specs.headline_warn_chars,
            image_min_width=specs.image_min_width,
            image_min_height=specs.image_min_height,
            image_max_size=specs.image_max_size,
            allowed_formats=specs.allowed_formats,
            policies=specs.policies,
        )


class SpecValidationRequest(BaseModel):
    """Schema for validating a headline or an image URL."""

    type: Literal["headline", "image"]
    content: str = Field(min_length=1)


class SpecValidationResponse(BaseModel):
    type: Literal["headline", "image"]
    specs_version: str
    validation: HeadlineValidation | ImageValidation
