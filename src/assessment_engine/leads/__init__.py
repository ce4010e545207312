"""
Lead capture for clinic-assessment-engine

Contact validation, lead records and submission to the practice backend.
"""

from .contact import ContactInfo
from .payload import LeadContext, build_lead_payload, build_partial_payload
from .submitter import (
    LeadSubmitter,
    SubmissionResult,
    SupabaseLeadSubmitter,
    MockLeadSubmitter,
)
from .capture import LeadCapture

__all__ = [
    "ContactInfo",
    "LeadContext",
    "build_lead_payload",
    "build_partial_payload",
    "LeadSubmitter",
    "SubmissionResult",
    "SupabaseLeadSubmitter",
    "MockLeadSubmitter",
    "LeadCapture",
]
