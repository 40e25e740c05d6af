"""Shared utility functions and models for ClaimLink.

Convenience re-exports so consumers can import directly from
``claimlink.utils`` (e.g. ``from claimlink.utils import parse_nested_record``).
"""

from claimlink.utils.audit import AuditEvent, log_audit_event
from claimlink.utils.nested_record import parse_nested_record

__all__ = [
    "AuditEvent",
    "log_audit_event",
    "parse_nested_record",
]
