"""Base enums for the treatment engine."""

from enum import Enum


class InteractionSeverity(str, Enum):
    """Severity levels for drug interactions, in increasing order of risk."""

    MINOR = "minor"  # Usually not significant
    MODERATE = "moderate"  # Use with caution
    MAJOR = "major"  # Serious, avoid or separate
    CONTRAINDICATED = "contraindicated"  # Should never be combined

    @property
    def rank(self) -> int:
        """Ordinal position (minor=0 ... contraindicated=3)."""
        return list(InteractionSeverity).index(self)


class RecommendationType(str, Enum):
    """Kinds of action suggested to the clinician."""

    KEEP_AND_SEPARATE = "keep_and_separate"
    REPLACE_MEDICATION = "replace_medication"
    AVOID_COMBINATION = "avoid_combination"
