"""Audit logging for treatment plan operations.

Every Analysis handed to the doctor and patient views is recorded here:
- First condition assignment (create)
- Edits of an existing assignment (update)
- Rejected requests (error)

This audit log should be persisted to a secure, append-only store
in production for compliance purposes.
"""

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from coretex.services.analysis_assembler import Analysis

# Separate audit logger for clinically relevant events
audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    """Types of auditable actions."""

    CREATE = "create"
    UPDATE = "update"
    ERROR = "error"


class AuditEvent(BaseModel):
    """Audit event record.

    Contains all relevant context for an auditable action.
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction = Field(..., description="Type of action performed")
    resource_type: str = Field(..., description="Type of resource produced")
    resource_id: str | None = Field(None, description="ID of specific resource")
    patient_id: str | None = Field(None, description="Patient ID if applicable")
    user_id: str | None = Field(None, description="User who performed action")
    details: dict | None = Field(None, description="Additional context")
    success: bool = Field(True, description="Whether action succeeded")


def log_audit(
    action: AuditAction,
    resource_type: str,
    resource_id: str | None = None,
    patient_id: str | None = None,
    user_id: str | None = None,
    details: dict | None = None,
    success: bool = True,
) -> AuditEvent:
    """Log an audit event.

    Args:
        action: Type of action being audited
        resource_type: The type of resource involved
        resource_id: Specific resource identifier
        patient_id: Patient ID if this is patient data
        user_id: User performing the action
        details: Additional context
        success: Whether the action succeeded

    Returns:
        The created AuditEvent
    """
    event = AuditEvent(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        patient_id=patient_id,
        user_id=user_id,
        details=details,
        success=success,
    )

    log_level = logging.INFO if success else logging.WARNING
    audit_logger.log(
        log_level,
        f"AUDIT: {action.value} {resource_type}"
        f"{f'/{resource_id}' if resource_id else ''}"
        f"{f' patient={patient_id}' if patient_id else ''}"
        f" success={success}",
        extra={"audit_event": event.model_dump()},
    )

    return event


def log_analysis_event(
    patient_id: str,
    analysis: "Analysis",
    edit: bool = False,
    user_id: str | None = None,
) -> AuditEvent:
    """Log the creation or replacement of a patient's Analysis.

    Args:
        patient_id: Patient the plan belongs to
        analysis: The freshly built Analysis
        edit: True when the Analysis replaces an earlier one
        user_id: Clinician who assigned the condition

    Returns:
        The created AuditEvent
    """
    return log_audit(
        action=AuditAction.UPDATE if edit else AuditAction.CREATE,
        resource_type="analysis",
        patient_id=patient_id,
        user_id=user_id,
        details={
            "is_safe": analysis.is_safe,
            "interaction_count": len(analysis.interactions),
            "recommendation_count": len(analysis.recommendations),
            "medications": [slot.medication for slot in analysis.schedule],
        },
    )


def log_rejected_request(
    patient_id: str | None,
    reason: str,
    user_id: str | None = None,
) -> AuditEvent:
    """Log a condition assignment rejected as invalid input."""
    return log_audit(
        action=AuditAction.ERROR,
        resource_type="analysis",
        patient_id=patient_id,
        user_id=user_id,
        details={"reason": reason},
        success=False,
    )
