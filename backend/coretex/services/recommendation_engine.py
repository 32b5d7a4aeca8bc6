"""Clinical recommendations for detected interactions.

Each interaction is judged on its severity and on whether the realized
schedule keeps its doses far enough apart:

    severity         | separable and gap met | otherwise
    -----------------+-----------------------+-------------------
    minor            | none                  | none
    moderate         | keep_and_separate     | avoid_combination
    major            | keep_and_separate     | replace_medication
    contraindicated  | replace_medication    | replace_medication

A plan is unsafe when any interaction is contraindicated or any major
interaction is not mitigated by the schedule.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from coretex.schemas.base import InteractionSeverity, RecommendationType
from coretex.services.interaction_catalog import InteractionCatalog, normalize_medication_name
from coretex.services.interaction_detector import Interaction
from coretex.services.schedule_synthesizer import ScheduleSlot, format_hours, gap_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recommendation:
    """A suggested action for one interaction."""

    type: RecommendationType
    title: str
    details: str


# (severity, schedule mitigates the interaction) -> recommendation kind
RECOMMENDATION_POLICY: dict[tuple[InteractionSeverity, bool], RecommendationType | None] = {
    (InteractionSeverity.MINOR, True): None,
    (InteractionSeverity.MINOR, False): None,
    (InteractionSeverity.MODERATE, True): RecommendationType.KEEP_AND_SEPARATE,
    (InteractionSeverity.MODERATE, False): RecommendationType.AVOID_COMBINATION,
    (InteractionSeverity.MAJOR, True): RecommendationType.KEEP_AND_SEPARATE,
    (InteractionSeverity.MAJOR, False): RecommendationType.REPLACE_MEDICATION,
    (InteractionSeverity.CONTRAINDICATED, True): RecommendationType.REPLACE_MEDICATION,
    (InteractionSeverity.CONTRAINDICATED, False): RecommendationType.REPLACE_MEDICATION,
}


def _find_slot(schedule: Sequence[ScheduleSlot], name: str) -> ScheduleSlot | None:
    normalized = normalize_medication_name(name)
    for slot in schedule:
        if normalize_medication_name(slot.medication) == normalized:
            return slot
    return None


def constraint_satisfied(interaction: Interaction, schedule: Sequence[ScheduleSlot]) -> bool:
    """Whether the schedule mitigates the interaction by dose timing.

    Non-separable interactions are never mitigated. Separable ones without a
    minimum gap are mitigated by any schedule.
    """
    if not interaction.can_separate_by_schedule:
        return False
    if interaction.min_hours_apart is None:
        return True

    first = _find_slot(schedule, interaction.medications[0])
    second = _find_slot(schedule, interaction.medications[1])
    if first is None or second is None:
        return False
    return gap_minutes(first.times, second.times) >= interaction.min_hours_apart * 60


class RecommendationEngine:
    """Turns detected interactions plus the realized schedule into advice."""

    def __init__(self, catalog: InteractionCatalog) -> None:
        self._catalog = catalog

    def recommend(
        self,
        interactions: Sequence[Interaction],
        schedule: Sequence[ScheduleSlot],
    ) -> list[Recommendation]:
        """One recommendation per non-minor interaction, in interaction order."""
        recommendations: list[Recommendation] = []
        for interaction in interactions:
            mitigated = constraint_satisfied(interaction, schedule)
            kind = RECOMMENDATION_POLICY[(interaction.severity, mitigated)]
            if kind is None:
                continue
            recommendations.append(self._build(kind, interaction, schedule))
        return recommendations

    def is_safe(
        self,
        interactions: Sequence[Interaction],
        schedule: Sequence[ScheduleSlot],
    ) -> bool:
        """False iff an interaction is contraindicated or a major one is unmitigated."""
        for interaction in interactions:
            if interaction.severity == InteractionSeverity.CONTRAINDICATED:
                return False
            if interaction.severity == InteractionSeverity.MAJOR and not constraint_satisfied(
                interaction, schedule
            ):
                return False
        return True

    def replacement_candidate(self, interaction: Interaction) -> str:
        """Pick which of the two medications to suggest replacing.

        The one involved in more catalog interactions is the better candidate;
        ties go to the later-listed medication.
        """
        first, second = interaction.medications
        if len(self._catalog.rules_for(first)) > len(self._catalog.rules_for(second)):
            return first
        return second

    def _build(
        self,
        kind: RecommendationType,
        interaction: Interaction,
        schedule: Sequence[ScheduleSlot],
    ) -> Recommendation:
        first, second = interaction.medications
        severity = interaction.severity.value
        summary = f"{severity.capitalize()} interaction between {first} and {second}: {interaction.reason}."

        if kind == RecommendationType.KEEP_AND_SEPARATE:
            if interaction.min_hours_apart is None:
                return Recommendation(
                    type=kind,
                    title=f"Keep {first} and {second} on separate doses",
                    details=f"{summary} Follow the schedule as given.",
                )
            hours = format_hours(interaction.min_hours_apart)
            return Recommendation(
                type=kind,
                title=f"Keep {first} and {second}, taken {hours} hours apart",
                details=(
                    f"{summary} Scheduled {self._times_text(schedule, first)} and "
                    f"{self._times_text(schedule, second)} to keep at least {hours} hours "
                    f"between doses."
                ),
            )

        reason = self._unmitigated_text(interaction)
        if kind == RecommendationType.AVOID_COMBINATION:
            return Recommendation(
                type=kind,
                title=f"Avoid combining {first} and {second}",
                details=f"{summary} {reason} Consider stopping one of them or monitoring closely.",
            )

        if kind == RecommendationType.REPLACE_MEDICATION:
            target = self.replacement_candidate(interaction)
            other = first if target == second else second
            return Recommendation(
                type=kind,
                title=f"Replace {target}",
                details=f"{summary} {reason} Choose an alternative to {target} that is compatible with {other}.",
            )

        raise ValueError(f"Unhandled recommendation type: {kind}")

    @staticmethod
    def _unmitigated_text(interaction: Interaction) -> str:
        if interaction.severity == InteractionSeverity.CONTRAINDICATED:
            return "These medications must not be combined, whatever the dose timing."
        if not interaction.can_separate_by_schedule:
            return "Dose timing does not reduce this risk."
        return (
            f"Doses could not be kept {format_hours(interaction.min_hours_apart)} hours apart "
            f"within the dosing window."
        )

    @staticmethod
    def _times_text(schedule: Sequence[ScheduleSlot], name: str) -> str:
        slot = _find_slot(schedule, name)
        if slot is None:
            return name
        return f"{name} at {', '.join(slot.times)}"
