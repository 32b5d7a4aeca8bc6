"""Tests for request and Analysis schemas."""

import pytest
from pydantic import ValidationError

from coretex.schemas import (
    AnalysisOut,
    ConditionAssignment,
    InteractionOut,
    InteractionSeverity,
    MedicationIn,
    RecommendationType,
    ScheduleSlotOut,
)


class TestEnums:
    """Tests for severity and recommendation enums."""

    def test_severity_order(self) -> None:
        ranks = [s.rank for s in InteractionSeverity]
        assert ranks == [0, 1, 2, 3]
        assert InteractionSeverity.CONTRAINDICATED.rank > InteractionSeverity.MAJOR.rank

    def test_severity_values(self) -> None:
        assert [s.value for s in InteractionSeverity] == [
            "minor", "moderate", "major", "contraindicated"
        ]

    def test_recommendation_values(self) -> None:
        assert {t.value for t in RecommendationType} == {
            "keep_and_separate", "replace_medication", "avoid_combination"
        }


class TestRequestSchemas:
    """Tests for condition assignment requests."""

    def test_camel_case_input(self) -> None:
        med = MedicationIn.model_validate({"name": "A", "dose": "1mg", "frequencyPerDay": 2})
        assert med.frequency_per_day == 2

    def test_snake_case_input(self) -> None:
        med = MedicationIn(name="A", dose="1mg", frequency_per_day=3)
        assert med.frequency_per_day == 3

    def test_missing_medications(self) -> None:
        with pytest.raises(ValidationError):
            ConditionAssignment.model_validate({"condition": "AF"})


class TestAnalysisOut:
    """Tests for the Analysis wire model."""

    def test_to_wire_aliases(self) -> None:
        out = AnalysisOut(
            is_safe=False,
            interactions=[
                InteractionOut(
                    medications=("A", "B"),
                    severity=InteractionSeverity.MINOR,
                    reason="x",
                    can_separate_by_schedule=False,
                )
            ],
            schedule=[ScheduleSlotOut(medication="A", times=["08:00"])],
        )
        wire = out.to_wire()
        assert wire == {
            "isSafe": False,
            "interactions": [
                {
                    "medications": ["A", "B"],
                    "severity": "minor",
                    "reason": "x",
                    "canSeparateBySchedule": False,
                }
            ],
            "recommendations": [],
            "schedule": [{"medication": "A", "times": ["08:00"]}],
        }

    def test_frozen(self) -> None:
        slot = ScheduleSlotOut(medication="A", times=["08:00"])
        with pytest.raises(ValidationError):
            slot.medication = "B"
