"""Read-only views of an Analysis for the doctor and patient interfaces."""

from dataclasses import dataclass
from datetime import time

from coretex.schemas.base import InteractionSeverity
from coretex.services.analysis_assembler import Analysis
from coretex.services.schedule_synthesizer import parse_hhmm

SEVERITY_LABELS: dict[InteractionSeverity, str] = {
    InteractionSeverity.MINOR: "Minor",
    InteractionSeverity.MODERATE: "Moderate",
    InteractionSeverity.MAJOR: "Major",
    InteractionSeverity.CONTRAINDICATED: "Contraindicated",
}

GUIDANCE_ALL_CLEAR = "Your treatment plan looks good. Follow the schedule and report any side effects."
GUIDANCE_CAREFUL_TIMING = "Your medications require careful timing. Follow the schedule strictly."
GUIDANCE_REVIEW = "Review this plan with your doctor if you have questions."


@dataclass(frozen=True)
class DoseEvent:
    """A single dose on the patient's daily timeline."""

    time: str
    medication: str
    note: str | None = None


def daily_timeline(analysis: Analysis) -> list[DoseEvent]:
    """All doses of the day, sorted by time (schedule order breaks ties)."""
    events = [
        DoseEvent(time=t, medication=slot.medication, note=slot.note)
        for slot in analysis.schedule
        for t in slot.times
    ]
    # sorted() is stable, so equal times keep schedule order
    return sorted(events, key=lambda event: event.time)


def next_dose(analysis: Analysis, now: time) -> DoseEvent | None:
    """First dose at or after ``now``; wraps to tomorrow's first dose."""
    timeline = daily_timeline(analysis)
    if not timeline:
        return None

    current = now.hour * 60 + now.minute
    for event in timeline:
        if parse_hhmm(event.time) >= current:
            return event
    return timeline[0]


def patient_guidance(analysis: Analysis) -> str:
    """Short instruction shown at the top of the patient's plan."""
    if analysis.is_safe and not analysis.interactions:
        return GUIDANCE_ALL_CLEAR
    if analysis.interactions:
        return GUIDANCE_CAREFUL_TIMING
    return GUIDANCE_REVIEW


def schedule_summary(analysis: Analysis) -> str:
    """One-line schedule text, e.g. "Warfarin at 08:00; Aspirin at 16:00"."""
    if not analysis.schedule:
        return "No schedule assigned yet."
    return "; ".join(f"{slot.medication} at {', '.join(slot.times)}" for slot in analysis.schedule)


def medications_from_schedule(analysis: Analysis) -> list[str]:
    return [slot.medication for slot in analysis.schedule]
