"""Pytest configuration and fixtures for backend tests."""

import pytest

from coretex.core.config import Settings
from coretex.schemas.base import InteractionSeverity
from coretex.services.analysis_assembler import AnalysisAssembler
from coretex.services.interaction_catalog import (
    INTERACTION_RULES,
    InteractionCatalog,
    InteractionRule,
)
from coretex.services.interaction_detector import Medication


@pytest.fixture
def config() -> Settings:
    """Settings with the standard 08:00-22:00 window, ignoring any .env file."""
    return Settings(
        _env_file=None,
        dosing_window_start="08:00",
        dosing_window_end="22:00",
        time_granularity_minutes=5,
        shift_step_minutes=15,
        interaction_catalog_file=None,
    )


@pytest.fixture
def catalog() -> InteractionCatalog:
    """Catalog of the built-in rules."""
    return InteractionCatalog(INTERACTION_RULES)


@pytest.fixture
def assembler(catalog: InteractionCatalog, config: Settings) -> AnalysisAssembler:
    return AnalysisAssembler(catalog, config)


@pytest.fixture
def make_rule():
    """Factory for compact test rules."""

    def _make(
        drug1: str,
        drug2: str,
        severity: InteractionSeverity = InteractionSeverity.MAJOR,
        hours: float | None = None,
        separable: bool | None = None,
    ) -> InteractionRule:
        return InteractionRule(
            drug1=drug1,
            drug2=drug2,
            severity=severity,
            reason=f"{drug1} interacts with {drug2}",
            can_separate_by_schedule=(hours is not None) if separable is None else separable,
            min_hours_apart=hours,
        )

    return _make


@pytest.fixture
def meds():
    """Factory: meds(("A", 1), ("B", 2)) -> list of Medication."""

    def _make(*entries: tuple[str, int]) -> list[Medication]:
        return [Medication(name=name, dose="10mg", frequency_per_day=freq) for name, freq in entries]

    return _make
