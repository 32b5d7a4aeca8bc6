"""Tests for the Interaction Detector.

Tests input validation, pair completeness and result ordering.
"""

import itertools
import logging

import pytest

from coretex.core.exceptions import InvalidInput
from coretex.schemas.base import InteractionSeverity
from coretex.services.interaction_catalog import (
    INTERACTION_RULES,
    InteractionCatalog,
    normalize_medication_name,
)
from coretex.services.interaction_detector import (
    Interaction,
    InteractionDetector,
    Medication,
    distinct_medications,
    validate_medications,
)


# ============================================================================
# Validation Tests
# ============================================================================


class TestValidation:
    """Test medication list validation."""

    def test_valid_list(self, meds):
        medications = meds(("A", 1), ("B", 4))
        assert validate_medications(medications) == tuple(medications)

    def test_one_medication_rejected(self, meds):
        with pytest.raises(InvalidInput, match="2-4 medications"):
            validate_medications(meds(("A", 1)))

    def test_five_medications_rejected(self, meds):
        with pytest.raises(InvalidInput, match="got 5"):
            validate_medications(meds(("A", 1), ("B", 1), ("C", 1), ("D", 1), ("E", 1)))

    def test_empty_list_rejected(self):
        with pytest.raises(InvalidInput):
            validate_medications([])

    def test_frequency_zero_rejected(self, meds):
        with pytest.raises(InvalidInput, match="frequencyPerDay"):
            validate_medications(meds(("A", 0), ("B", 1)))

    def test_frequency_five_rejected(self, meds):
        with pytest.raises(InvalidInput, match="got 5"):
            validate_medications(meds(("A", 1), ("B", 5)))

    def test_non_integer_frequency_rejected(self):
        medications = [Medication("A", "1mg", 1), Medication("B", "1mg", 1.5)]
        with pytest.raises(InvalidInput, match="integer"):
            validate_medications(medications)

    def test_boolean_frequency_rejected(self):
        medications = [Medication("A", "1mg", 1), Medication("B", "1mg", True)]
        with pytest.raises(InvalidInput):
            validate_medications(medications)

    def test_empty_name_rejected(self):
        medications = [Medication("   ", "1mg", 1), Medication("B", "1mg", 1)]
        with pytest.raises(InvalidInput, match="Medication 0: name"):
            validate_medications(medications)

    def test_empty_dose_rejected(self):
        medications = [Medication("A", "1mg", 1), Medication("B", "", 1)]
        with pytest.raises(InvalidInput, match="dose"):
            validate_medications(medications)

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInput, ValueError)

    def test_detect_validates_first(self, catalog, meds):
        detector = InteractionDetector(catalog)
        with pytest.raises(InvalidInput):
            detector.detect(meds(("Warfarin", 1), ("Aspirin", 9)))


# ============================================================================
# Detection Tests
# ============================================================================


class TestDetection:
    """Test interaction detection against the built-in catalog."""

    def setup_method(self):
        """Create detector for testing."""
        self.detector = InteractionDetector(InteractionCatalog(INTERACTION_RULES))

    def test_detects_known_pair(self, meds):
        interactions = self.detector.detect(meds(("Warfarin", 1), ("Aspirin", 1)))
        assert len(interactions) == 1
        interaction = interactions[0]
        assert interaction.medications == ("Warfarin", "Aspirin")
        assert interaction.severity == InteractionSeverity.MAJOR
        assert interaction.can_separate_by_schedule is True
        assert interaction.min_hours_apart == 8
        assert interaction.needs_separation

    def test_keeps_display_names(self, meds):
        interactions = self.detector.detect(meds(("ASPIRIN", 1), ("  Warfarin", 1)))
        assert interactions[0].medications == ("ASPIRIN", "  Warfarin")

    def test_no_rule_no_interaction(self, meds):
        assert self.detector.detect(meds(("A", 2), ("B", 2))) == []

    def test_all_pairs_checked(self, meds):
        medications = meds(
            ("Warfarin", 1), ("Aspirin", 1), ("Ibuprofen", 1), ("Acetaminophen", 1)
        )
        pairs = {
            frozenset((normalize_medication_name(a), normalize_medication_name(b)))
            for interaction in self.detector.detect(medications)
            for a, b in [interaction.medications]
        }
        assert pairs == {
            frozenset(("warfarin", "aspirin")),
            frozenset(("warfarin", "ibuprofen")),
            frozenset(("aspirin", "acetaminophen")),
        }

    def test_order_follows_input(self, meds):
        medications = meds(
            ("Aspirin", 1), ("Levothyroxine", 1), ("Warfarin", 1), ("Calcium Carbonate", 1)
        )
        interactions = self.detector.detect(medications)
        assert [i.medications for i in interactions] == [
            ("Aspirin", "Warfarin"),
            ("Levothyroxine", "Calcium Carbonate"),
        ]

    def test_ties_broken_by_second_medication(self, meds):
        medications = meds(("Warfarin", 1), ("Ibuprofen", 1), ("Aspirin", 1))
        interactions = self.detector.detect(medications)
        assert [i.medications for i in interactions] == [
            ("Warfarin", "Ibuprofen"),
            ("Warfarin", "Aspirin"),
        ]

    def test_permutation_does_not_change_detected_pairs(self, meds):
        medications = meds(
            ("Warfarin", 1), ("Aspirin", 2), ("Acetaminophen", 3), ("Ibuprofen", 1)
        )
        expected = {i.key for i in self.detector.detect(medications)}
        for permutation in itertools.permutations(medications):
            assert {i.key for i in self.detector.detect(list(permutation))} == expected

    def test_duplicate_names_never_interact(self, meds):
        interactions = self.detector.detect(meds(("Warfarin", 1), ("warfarin ", 2)))
        assert interactions == []

    def test_duplicates_reported_once(self, meds, caplog):
        medications = meds(("Warfarin", 1), ("Aspirin", 1), ("WARFARIN", 1))
        with caplog.at_level(logging.WARNING):
            interactions = self.detector.detect(medications)
        assert len(interactions) == 1
        assert "duplicate" in caplog.text

    def test_coverage_gap_logged(self, meds, caplog):
        with caplog.at_level(logging.INFO, logger="coretex.services.interaction_detector"):
            self.detector.detect(meds(("Warfarin", 1), ("Mysterydrug", 1)))
        assert "No catalog entries for medication 'Mysterydrug'" in caplog.text

    def test_interaction_key_is_normalized(self):
        interaction = Interaction(
            medications=("Warfarin", " ASPIRIN"),
            severity=InteractionSeverity.MAJOR,
            reason="x",
            can_separate_by_schedule=False,
        )
        assert interaction.key == ("aspirin", "warfarin")
        assert not interaction.needs_separation


class TestDistinctMedications:
    """Test duplicate collapsing."""

    def test_keeps_first_occurrence(self, meds):
        medications = meds(("Aspirin", 1), ("B", 2), ("aspirin", 3))
        distinct = distinct_medications(medications)
        assert [m.name for m in distinct] == ["Aspirin", "B"]
        assert distinct[0].frequency_per_day == 1
