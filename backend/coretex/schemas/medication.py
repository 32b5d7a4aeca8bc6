"""Request schemas for condition assignment."""

from pydantic import BaseModel, ConfigDict, Field


class MedicationIn(BaseModel):
    """One prescribed medication as sent by the doctor interface.

    Range checks (non-empty text, frequency 1-4) are applied by the engine so
    that every malformed request fails the same way.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Medication name as entered")
    dose: str = Field(..., description="Dose text, e.g. '5 mg'")
    frequency_per_day: int = Field(
        ..., alias="frequencyPerDay", description="Doses per day (1-4)"
    )


class ConditionAssignment(BaseModel):
    """Condition plus the medications prescribed for it."""

    condition: str = Field(..., description="Condition or diagnosis")
    medications: list[MedicationIn] = Field(..., description="2-4 medications")
