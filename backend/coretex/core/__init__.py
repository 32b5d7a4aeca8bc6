"""Core configuration and utilities."""

from coretex.core.audit import (
    AuditAction,
    AuditEvent,
    log_analysis_event,
    log_audit,
    log_rejected_request,
)
from coretex.core.config import Settings, settings
from coretex.core.exceptions import InvalidInput

__all__ = [
    # Config
    "Settings",
    "settings",
    # Errors
    "InvalidInput",
    # Audit
    "AuditAction",
    "AuditEvent",
    "log_audit",
    "log_analysis_event",
    "log_rejected_request",
]
