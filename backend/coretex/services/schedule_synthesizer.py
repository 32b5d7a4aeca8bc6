"""Dosing schedule synthesis.

Places each medication's daily doses inside a fixed dosing window, then
shifts doses where detected interactions require a minimum gap.

Gaps: doses repeat every day, so the gap between two doses is the shorter
way round the clock. 08:00 and 21:30 are 10.5 hours apart (overnight), not
13.5, and no gap can exceed 12 hours.

Base times: the window [start, end) is split into ``frequencyPerDay`` equal
intervals and one dose goes at the start of each, floored to the time
granularity. A once-daily medication is taken at the window start.

Repairs: interactions with a minimum gap are handled in detection order.
When the gap is too small, the interaction's second medication moves later
in fixed steps (all of its doses together, keeping their spacing) until the
gap holds. A shift is only accepted if every previously satisfied gap still
holds and the last dose stays inside the window; otherwise the gap is left
unresolved and the times are kept.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from coretex.core.config import Settings, hhmm_to_minutes, settings as default_settings
from coretex.services.interaction_catalog import normalize_medication_name
from coretex.services.interaction_detector import (
    Interaction,
    Medication,
    distinct_medications,
)

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class ScheduleSlot:
    """Daily dose times for one medication."""

    medication: str
    times: tuple[str, ...]  # Ascending HH:MM
    note: str | None = None


@dataclass(frozen=True)
class ScheduleResult:
    """Synthesized schedule plus the interactions it could not separate."""

    slots: tuple[ScheduleSlot, ...]
    unresolved: frozenset[tuple[str, str]] = field(default_factory=frozenset)

    def is_unresolved(self, interaction: Interaction) -> bool:
        return interaction.key in self.unresolved


def parse_hhmm(value: str) -> int:
    """Parse "HH:MM" into minutes after midnight."""
    return hhmm_to_minutes(value)


def format_hhmm(minutes: int) -> str:
    """Format minutes after midnight as "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_hours(hours: float) -> str:
    """Render an hour count without a trailing ".0"."""
    return f"{hours:g}"


def gap_minutes(times_a: Iterable[str], times_b: Iterable[str]) -> int:
    """Smallest clock distance between any dose in ``times_a`` and any in ``times_b``."""
    return _min_gap(
        [parse_hhmm(t) for t in times_a],
        [parse_hhmm(t) for t in times_b],
    )


def _clock_distance(a: int, b: int) -> int:
    d = abs(a - b) % MINUTES_PER_DAY
    return min(d, MINUTES_PER_DAY - d)


def _min_gap(minutes_a: Sequence[int], minutes_b: Sequence[int]) -> int:
    return min(_clock_distance(a, b) for a in minutes_a for b in minutes_b)


def _required_minutes(interaction: Interaction) -> float:
    return interaction.min_hours_apart * 60


class ScheduleSynthesizer:
    """Builds per-medication dose times honoring interaction gaps.

    The dosing window, time granularity and shift step come from Settings
    and are the same for every call.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    @property
    def window(self) -> tuple[int, int]:
        """Dosing window [start, end) in minutes after midnight."""
        return self._config.window_start_minutes, self._config.window_end_minutes

    def base_times(self, frequency: int) -> list[int]:
        """Evenly spaced dose times (minutes) for a daily frequency."""
        start = self._config.window_start_minutes
        width = self._config.window_width_minutes
        granularity = self._config.time_granularity_minutes
        return [
            start + (k * width // frequency) // granularity * granularity
            for k in range(frequency)
        ]

    def synthesize(
        self,
        medications: Sequence[Medication],
        interactions: Sequence[Interaction],
    ) -> list[ScheduleSlot]:
        """Generate one schedule slot per distinct medication, in input order."""
        return list(self.synthesize_with_status(medications, interactions).slots)

    def synthesize_with_status(
        self,
        medications: Sequence[Medication],
        interactions: Sequence[Interaction],
    ) -> ScheduleResult:
        """Generate the schedule and report which gaps could not be met."""
        distinct = distinct_medications(medications)
        times: dict[str, list[int]] = {
            medication.normalized_name: self.base_times(medication.frequency_per_day)
            for medication in distinct
        }

        constraints = [
            interaction
            for interaction in interactions
            if interaction.needs_separation and self._covers(times, interaction)
        ]
        satisfied: list[Interaction] = []

        for interaction in constraints:
            if self._gap_ok(times, interaction):
                satisfied.append(interaction)
                continue

            shifted = self._repair(times, interaction, satisfied)
            if shifted is None:
                continue

            later = normalize_medication_name(interaction.medications[1])
            times[later] = shifted
            satisfied.append(interaction)
            logger.info(
                f"Shifted {interaction.medications[1]} to "
                f"{', '.join(format_hhmm(t) for t in shifted)} to keep "
                f"{format_hours(interaction.min_hours_apart)}h from {interaction.medications[0]}"
            )

        # Judge against the final times
        unresolved = frozenset(
            interaction.key for interaction in constraints if not self._gap_ok(times, interaction)
        )
        for interaction in constraints:
            if interaction.key in unresolved:
                logger.warning(
                    f"Could not keep {interaction.medications[0]} and {interaction.medications[1]} "
                    f"{format_hours(interaction.min_hours_apart)}h apart within the dosing window"
                )

        notes = self._notes(constraints, unresolved)
        slots = tuple(
            ScheduleSlot(
                medication=medication.name,
                times=tuple(format_hhmm(t) for t in times[medication.normalized_name]),
                note=" ".join(notes.get(medication.normalized_name, [])) or None,
            )
            for medication in distinct
        )
        return ScheduleResult(slots=slots, unresolved=unresolved)

    def _repair(
        self,
        times: dict[str, list[int]],
        interaction: Interaction,
        satisfied: Sequence[Interaction],
    ) -> list[int] | None:
        """Find the smallest forward shift of the later medication that works."""
        later = normalize_medication_name(interaction.medications[1])
        current = times[later]
        _, end = self.window
        step = self._config.shift_step_minutes

        offset = step
        while current[-1] + offset < end:
            candidate = [t + offset for t in current]
            trial = {**times, later: candidate}
            if self._gap_ok(trial, interaction):
                if all(self._gap_ok(trial, earlier) for earlier in satisfied):
                    return candidate
            offset += step

        return None

    @staticmethod
    def _covers(times: dict[str, list[int]], interaction: Interaction) -> bool:
        return all(normalize_medication_name(name) in times for name in interaction.medications)

    @staticmethod
    def _gap_ok(times: dict[str, list[int]], interaction: Interaction) -> bool:
        first, second = (normalize_medication_name(name) for name in interaction.medications)
        return _min_gap(times[first], times[second]) >= _required_minutes(interaction)

    @staticmethod
    def _notes(
        constraints: Sequence[Interaction],
        unresolved: frozenset[tuple[str, str]],
    ) -> dict[str, list[str]]:
        notes: dict[str, list[str]] = {}
        for interaction in constraints:
            hours = format_hours(interaction.min_hours_apart)
            for own, other in (interaction.medications, interaction.medications[::-1]):
                if interaction.key in unresolved:
                    text = (
                        f"Could not be scheduled {hours} hours apart from {other}; "
                        f"review with your doctor."
                    )
                else:
                    text = f"Take at least {hours} hours apart from {other}."
                notes.setdefault(normalize_medication_name(own), []).append(text)
        return notes
