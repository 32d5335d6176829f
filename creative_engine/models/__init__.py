"""SQLAlchemy database models."""
from dotenv import load_dotenv
from creative_engine.models.action import Action
from creative_engine.models.base import Base
from creative_engine.models.creative import Creative, MetricSnapshot
from creative_engine.models.learning_config import LearningConfig
from creative_engine.models.spec_snapshot import SpecSnapshot


load_dotenv()

__all__ = [
    "Base",
    "Creative",
    "MetricSnapshot",
    "Action",
    "LearningConfig",
    "SpecSnapshot",
]
