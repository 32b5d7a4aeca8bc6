"""Treatment plan assembly.

Runs detection, schedule synthesis and recommendation in order and composes
one immutable Analysis. The same call serves first assignments and edits:
an edit recomputes the whole plan and replaces the previous one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from coretex.core.audit import log_analysis_event, log_rejected_request
from coretex.core.config import Settings
from coretex.core.exceptions import InvalidInput
from coretex.schemas.analysis import (
    AnalysisOut,
    InteractionOut,
    RecommendationOut,
    ScheduleSlotOut,
)
from coretex.schemas.medication import ConditionAssignment
from coretex.services.interaction_catalog import InteractionCatalog, get_default_catalog
from coretex.services.interaction_detector import (
    Interaction,
    InteractionDetector,
    Medication,
    validate_medications,
)
from coretex.services.recommendation_engine import Recommendation, RecommendationEngine
from coretex.services.schedule_synthesizer import ScheduleSlot, ScheduleSynthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Analysis:
    """Complete treatment plan for one patient's condition assignment."""

    is_safe: bool
    interactions: tuple[Interaction, ...]
    recommendations: tuple[Recommendation, ...]
    schedule: tuple[ScheduleSlot, ...]

    def to_schema(self) -> AnalysisOut:
        return AnalysisOut(
            is_safe=self.is_safe,
            interactions=[
                InteractionOut(
                    medications=interaction.medications,
                    severity=interaction.severity,
                    reason=interaction.reason,
                    can_separate_by_schedule=interaction.can_separate_by_schedule,
                    min_hours_apart=interaction.min_hours_apart,
                )
                for interaction in self.interactions
            ],
            recommendations=[
                RecommendationOut(type=rec.type, title=rec.title, details=rec.details)
                for rec in self.recommendations
            ],
            schedule=[
                ScheduleSlotOut(medication=slot.medication, times=list(slot.times), note=slot.note)
                for slot in self.schedule
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the interfaces consume."""
        return self.to_schema().to_wire()

    def to_json(self) -> str:
        return self.to_schema().model_dump_json(by_alias=True, exclude_none=True)


class AnalysisAssembler:
    """Builds an Analysis from a condition and its medications.

    Usage:
        assembler = AnalysisAssembler(catalog)
        analysis = assembler.build("Atrial fibrillation", [
            Medication("Warfarin", "5mg", 1),
            Medication("Aspirin", "81mg", 1),
        ])
        payload = analysis.to_dict()
    """

    def __init__(
        self,
        catalog: InteractionCatalog | None = None,
        config: Settings | None = None,
    ) -> None:
        self._catalog = catalog if catalog is not None else get_default_catalog()
        self.detector = InteractionDetector(self._catalog)
        self.synthesizer = ScheduleSynthesizer(config)
        self.recommender = RecommendationEngine(self._catalog)

    @property
    def catalog(self) -> InteractionCatalog:
        return self._catalog

    def build(self, condition: str, medications: Sequence[Medication]) -> Analysis:
        """Compute the full treatment plan.

        Raises:
            InvalidInput: If the condition is empty or the medications are
                malformed. Nothing is computed in that case.
        """
        if not isinstance(condition, str) or not condition.strip():
            raise InvalidInput("Condition must not be empty")
        validate_medications(medications)

        interactions = self.detector.detect(medications)
        schedule = self.synthesizer.synthesize(medications, interactions)
        recommendations = self.recommender.recommend(interactions, schedule)
        is_safe = self.recommender.is_safe(interactions, schedule)

        logger.debug(
            f"Built analysis for '{condition.strip()}': {len(interactions)} interactions, "
            f"{len(recommendations)} recommendations, is_safe={is_safe}"
        )

        return Analysis(
            is_safe=is_safe,
            interactions=tuple(interactions),
            recommendations=tuple(recommendations),
            schedule=tuple(schedule),
        )

    def build_from_payload(self, payload: Mapping[str, Any]) -> Analysis:
        """Build from a request body ``{"condition": ..., "medications": [...]}``.

        Raises:
            InvalidInput: If the payload does not parse or fails validation.
        """
        try:
            request = ConditionAssignment.model_validate(payload)
        except ValidationError as e:
            raise InvalidInput(f"Invalid condition assignment: {e}") from e

        medications = [
            Medication(name=m.name, dose=m.dose, frequency_per_day=m.frequency_per_day)
            for m in request.medications
        ]
        return self.build(request.condition, medications)


def assign_condition(
    patient_id: str,
    condition: str,
    medications: Sequence[Medication],
    *,
    edit: bool = False,
    user_id: str | None = None,
    assembler: AnalysisAssembler | None = None,
) -> Analysis:
    """Produce the Analysis to store for a patient, replacing any earlier one.

    The caller persists the returned Analysis verbatim as a single unit and
    serves it unchanged to both the doctor and patient views.

    Raises:
        InvalidInput: If the request is malformed; an audit event is logged
            and no Analysis is produced.
    """
    assembler = assembler or AnalysisAssembler()
    try:
        analysis = assembler.build(condition, medications)
    except InvalidInput as e:
        log_rejected_request(patient_id, str(e), user_id=user_id)
        raise

    log_analysis_event(patient_id, analysis, edit=edit, user_id=user_id)
    return analysis
