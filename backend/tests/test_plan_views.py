"""Tests for the doctor and patient plan views."""

from datetime import time

import pytest

from coretex.schemas.base import InteractionSeverity
from coretex.services.analysis_assembler import Analysis
from coretex.services.interaction_detector import Medication
from coretex.services.plan_views import (
    GUIDANCE_ALL_CLEAR,
    GUIDANCE_CAREFUL_TIMING,
    SEVERITY_LABELS,
    daily_timeline,
    medications_from_schedule,
    next_dose,
    patient_guidance,
    schedule_summary,
)


@pytest.fixture
def separated_plan(assembler) -> Analysis:
    return assembler.build(
        "AF", [Medication("Warfarin", "5mg", 1), Medication("Aspirin", "81mg", 1)]
    )


@pytest.fixture
def plain_plan(assembler) -> Analysis:
    return assembler.build("Hypertension", [Medication("A", "10mg", 2), Medication("B", "10mg", 1)])


class TestTimeline:
    """Tests for the flattened daily timeline."""

    def test_sorted_by_time(self, separated_plan):
        timeline = daily_timeline(separated_plan)
        assert [(e.time, e.medication) for e in timeline] == [
            ("08:00", "Warfarin"),
            ("16:00", "Aspirin"),
        ]
        assert timeline[0].note == "Take at least 8 hours apart from Aspirin."

    def test_ties_keep_schedule_order(self, plain_plan):
        timeline = daily_timeline(plain_plan)
        assert [(e.time, e.medication) for e in timeline] == [
            ("08:00", "A"),
            ("08:00", "B"),
            ("15:00", "A"),
        ]

    def test_empty_schedule(self):
        analysis = Analysis(is_safe=True, interactions=(), recommendations=(), schedule=())
        assert daily_timeline(analysis) == []
        assert next_dose(analysis, time(9, 0)) is None
        assert schedule_summary(analysis) == "No schedule assigned yet."


class TestNextDose:
    """Tests for the next-dose lookup."""

    def test_next_dose_later_today(self, separated_plan):
        assert next_dose(separated_plan, time(9, 0)).medication == "Aspirin"

    def test_next_dose_exact_time(self, separated_plan):
        assert next_dose(separated_plan, time(8, 0)).medication == "Warfarin"

    def test_next_dose_wraps_to_tomorrow(self, separated_plan):
        event = next_dose(separated_plan, time(17, 0))
        assert (event.time, event.medication) == ("08:00", "Warfarin")


class TestGuidance:
    """Tests for patient guidance and summaries."""

    def test_all_clear(self, plain_plan):
        assert patient_guidance(plain_plan) == GUIDANCE_ALL_CLEAR

    def test_careful_timing(self, separated_plan):
        assert patient_guidance(separated_plan) == GUIDANCE_CAREFUL_TIMING

    def test_schedule_summary(self, separated_plan):
        assert schedule_summary(separated_plan) == "Warfarin at 08:00; Aspirin at 16:00"

    def test_medications_from_schedule(self, plain_plan):
        assert medications_from_schedule(plain_plan) == ["A", "B"]

    def test_every_severity_labelled(self):
        assert set(SEVERITY_LABELS) == set(InteractionSeverity)
