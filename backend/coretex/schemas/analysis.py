"""Wire schemas for the Analysis record.

Keys are camelCase to match what the doctor and patient interfaces consume.
Optional keys (minHoursApart, note) are omitted when absent.
"""

from pydantic import BaseModel, ConfigDict, Field

from coretex.schemas.base import InteractionSeverity, RecommendationType


class InteractionOut(BaseModel):
    """A detected drug-drug interaction."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    medications: tuple[str, str] = Field(..., description="The two interacting medications")
    severity: InteractionSeverity
    reason: str
    can_separate_by_schedule: bool = Field(..., alias="canSeparateBySchedule")
    min_hours_apart: float | None = Field(None, alias="minHoursApart")


class RecommendationOut(BaseModel):
    """A clinical recommendation for one interaction."""

    model_config = ConfigDict(frozen=True)

    type: RecommendationType
    title: str
    details: str


class ScheduleSlotOut(BaseModel):
    """Daily dose times for one medication."""

    model_config = ConfigDict(frozen=True)

    medication: str
    times: list[str] = Field(..., description="Ascending HH:MM times")
    note: str | None = None


class AnalysisOut(BaseModel):
    """Complete treatment plan for one patient."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    is_safe: bool = Field(..., alias="isSafe")
    interactions: list[InteractionOut] = Field(default_factory=list)
    recommendations: list[RecommendationOut] = Field(default_factory=list)
    schedule: list[ScheduleSlotOut] = Field(default_factory=list)

    def to_wire(self) -> dict:
        """Dump with camelCase keys, omitting absent optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
