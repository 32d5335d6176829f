"""Constants for lifecycle routes."""

DEFAULT_ACTION_LIMIT = 50
MAX_ACTION_LIMIT = 500

CREATIVE_NOT_FOUND_DETAIL = "Creative not found"
