"""Custom exception classes for the application."""

from typing import Any


class CreativeEngineError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Lifecycle Errors
class CreativeNotFoundError(CreativeEngineError):
    """Creative not found."""

    def __init__(self, creative_id: str) -> None:
        super().__init__(f"Creative not found: {creative_id}", {"creative_id": creative_id})


class InvalidActionError(CreativeEngineError):
    """Action payload cannot be logged."""

    pass


# External API Errors
class ExternalAPIError(CreativeEngineError):
    """Error calling external API."""

    def __init__(self, api_name: str, message: str) -> None:
        super().__init__(f"{api_name} API error: {message}")


class SpecsFetchError(ExternalAPIError):
    """Fresh platform policy specs could not be obtained."""

    def __init__(self, message: str) -> None:
        super().__init__("Platform specs", message)
