"""Interaction detection for a patient's medication plan.

Validates the prescribed medications and matches every distinct pair
against the interaction catalog.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from coretex.core.config import MAX_DOSES_PER_DAY
from coretex.core.exceptions import InvalidInput
from coretex.schemas.base import InteractionSeverity
from coretex.services.interaction_catalog import (
    InteractionCatalog,
    InteractionRule,
    normalize_medication_name,
    pair_key,
)

logger = logging.getLogger(__name__)

MIN_MEDICATIONS = 2
MAX_MEDICATIONS = 4
MIN_FREQUENCY = 1
MAX_FREQUENCY = MAX_DOSES_PER_DAY


@dataclass(frozen=True)
class Medication:
    """A prescribed medication."""

    name: str
    dose: str
    frequency_per_day: int

    @property
    def normalized_name(self) -> str:
        return normalize_medication_name(self.name)


@dataclass(frozen=True)
class Interaction:
    """A catalog rule matched against two medications of the plan.

    ``medications`` holds the names exactly as the plan supplied them, in
    input order.
    """

    medications: tuple[str, str]
    severity: InteractionSeverity
    reason: str
    can_separate_by_schedule: bool
    min_hours_apart: float | None = None

    @classmethod
    def from_rule(cls, first: Medication, second: Medication, rule: InteractionRule) -> "Interaction":
        return cls(
            medications=(first.name, second.name),
            severity=rule.severity,
            reason=rule.reason,
            can_separate_by_schedule=rule.can_separate_by_schedule,
            min_hours_apart=rule.min_hours_apart,
        )

    @property
    def key(self) -> tuple[str, str]:
        """Order-independent normalized pair."""
        return pair_key(
            normalize_medication_name(self.medications[0]),
            normalize_medication_name(self.medications[1]),
        )

    @property
    def needs_separation(self) -> bool:
        """Whether a minimum dose gap applies to this interaction."""
        return self.can_separate_by_schedule and self.min_hours_apart is not None


def validate_medications(medications: Sequence[Medication]) -> tuple[Medication, ...]:
    """Check the medication list before any detection work.

    Raises:
        InvalidInput: If there are not 2-4 medications, or a medication has
            an empty name or dose, or a frequency outside 1-4 per day.
    """
    if not MIN_MEDICATIONS <= len(medications) <= MAX_MEDICATIONS:
        raise InvalidInput(
            f"Expected {MIN_MEDICATIONS}-{MAX_MEDICATIONS} medications, got {len(medications)}"
        )

    for index, medication in enumerate(medications):
        if not isinstance(medication.name, str) or not medication.name.strip():
            raise InvalidInput(f"Medication {index}: name must not be empty")
        if not isinstance(medication.dose, str) or not medication.dose.strip():
            raise InvalidInput(f"Medication {index} ({medication.name}): dose must not be empty")
        frequency = medication.frequency_per_day
        # bool is an int subclass; True is not a frequency
        if isinstance(frequency, bool) or not isinstance(frequency, int):
            raise InvalidInput(
                f"Medication {index} ({medication.name}): frequencyPerDay must be an integer"
            )
        if not MIN_FREQUENCY <= frequency <= MAX_FREQUENCY:
            raise InvalidInput(
                f"Medication {index} ({medication.name}): frequencyPerDay must be "
                f"{MIN_FREQUENCY}-{MAX_FREQUENCY}, got {frequency}"
            )

    return tuple(medications)


def distinct_medications(medications: Sequence[Medication]) -> tuple[Medication, ...]:
    """Collapse medications whose names normalize equal, keeping the first."""
    seen: set[str] = set()
    distinct: list[Medication] = []
    for medication in medications:
        name = medication.normalized_name
        if name in seen:
            continue
        seen.add(name)
        distinct.append(medication)
    return tuple(distinct)


class InteractionDetector:
    """Finds every catalog interaction among a patient's medications.

    Usage:
        detector = InteractionDetector(catalog)
        interactions = detector.detect([
            Medication("Warfarin", "5mg", 1),
            Medication("Aspirin", "81mg", 1),
        ])
    """

    def __init__(self, catalog: InteractionCatalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> InteractionCatalog:
        return self._catalog

    def detect(self, medications: Sequence[Medication]) -> list[Interaction]:
        """Check each unordered pair of distinct medications once.

        Results are ordered by the input position of the pair's first
        medication, then of its second medication.

        Raises:
            InvalidInput: If the medication list is malformed.
        """
        validate_medications(medications)
        distinct = distinct_medications(medications)
        if len(distinct) < len(medications):
            logger.warning(
                f"{len(medications) - len(distinct)} duplicate medication(s) treated as one entry"
            )

        for medication in distinct:
            if not self._catalog.knows(medication.name):
                # Coverage gap, not a failure
                logger.info(f"No catalog entries for medication '{medication.name}'")

        interactions: list[Interaction] = []
        for i, first in enumerate(distinct):
            for second in distinct[i + 1:]:
                rule = self._catalog.lookup(first.name, second.name)
                if rule is None:
                    continue
                logger.debug(
                    f"Interaction found: {first.name} + {second.name} ({rule.severity.value})"
                )
                interactions.append(Interaction.from_rule(first, second, rule))

        return interactions
