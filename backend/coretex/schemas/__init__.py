"""Pydantic schemas and enums for the treatment engine."""

from coretex.schemas.analysis import (
    AnalysisOut,
    InteractionOut,
    RecommendationOut,
    ScheduleSlotOut,
)
from coretex.schemas.base import InteractionSeverity, RecommendationType
from coretex.schemas.medication import ConditionAssignment, MedicationIn

__all__ = [
    # Enums
    "InteractionSeverity",
    "RecommendationType",
    # Requests
    "ConditionAssignment",
    "MedicationIn",
    # Analysis
    "AnalysisOut",
    "InteractionOut",
    "RecommendationOut",
    "ScheduleSlotOut",
]
