"""Services for the treatment engine.

Services implement the treatment plan pipeline:
- InteractionCatalog: curated interaction rules
- InteractionDetector: pairwise interaction matching
- ScheduleSynthesizer: dose times within the dosing window
- RecommendationEngine: per-interaction advice and safety verdict
- AnalysisAssembler: composes the final Analysis
"""

from coretex.services.analysis_assembler import Analysis, AnalysisAssembler, assign_condition
from coretex.services.interaction_catalog import (
    INTERACTION_RULES,
    InteractionCatalog,
    InteractionRule,
    get_default_catalog,
    load_default_catalog,
    normalize_medication_name,
)
from coretex.services.interaction_detector import (
    Interaction,
    InteractionDetector,
    Medication,
    validate_medications,
)
from coretex.services.plan_views import (
    SEVERITY_LABELS,
    DoseEvent,
    daily_timeline,
    medications_from_schedule,
    next_dose,
    patient_guidance,
    schedule_summary,
)
from coretex.services.recommendation_engine import (
    RECOMMENDATION_POLICY,
    Recommendation,
    RecommendationEngine,
    constraint_satisfied,
)
from coretex.services.schedule_synthesizer import (
    ScheduleResult,
    ScheduleSlot,
    ScheduleSynthesizer,
    format_hhmm,
    gap_minutes,
    parse_hhmm,
)

__all__ = [
    # Catalog
    "INTERACTION_RULES",
    "InteractionCatalog",
    "InteractionRule",
    "get_default_catalog",
    "load_default_catalog",
    "normalize_medication_name",
    # Detection
    "Interaction",
    "InteractionDetector",
    "Medication",
    "validate_medications",
    # Schedule
    "ScheduleResult",
    "ScheduleSlot",
    "ScheduleSynthesizer",
    "format_hhmm",
    "gap_minutes",
    "parse_hhmm",
    # Recommendations
    "RECOMMENDATION_POLICY",
    "Recommendation",
    "RecommendationEngine",
    "constraint_satisfied",
    # Assembly
    "Analysis",
    "AnalysisAssembler",
    "assign_condition",
    # Views
    "SEVERITY_LABELS",
    "DoseEvent",
    "daily_timeline",
    "medications_from_schedule",
    "next_dose",
    "patient_guidance",
    "schedule_summary",
]
