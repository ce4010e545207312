"""
Lead record construction

Builds the rows the practice backend stores for completed and partial
assessments.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..config import config
from ..quiz.catalog import CUSTOM_PREFIX
from ..quiz.schema import AssessmentResult
from .contact import ContactInfo


LEAD_STATUS_NEW = "NEW"
PARTIAL_NAME = "Partial Submission"


@dataclass
class LeadContext:
    """Which practice a lead is for and where it came from."""
    doctor_id: str
    physician_id: Optional[str] = None
    lead_source: Optional[str] = None
    incident_source: str = "default"

    def __post_init__(self):
        if not self.physician_id:
            self.physician_id = self.doctor_id
        if not self.lead_source:
            self.lead_source = config.leads.default_source


def quiz_type(quiz_id: str) -> str:
    """Stored quiz type: custom ids as-is, built-in ids upper-cased."""
    if quiz_id.startswith(CUSTOM_PREFIX):
        return quiz_id
    return quiz_id.upper()


def custom_quiz_id(quiz_id: str) -> Optional[str]:
    if quiz_id.startswith(CUSTOM_PREFIX):
        return quiz_id.removeprefix(CUSTOM_PREFIX)
    return None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_lead_payload(
    result: AssessmentResult,
    contact: ContactInfo,
    context: LeadContext,
) -> dict:
    """
    Build the lead record for a completed assessment.

    Args:
        result: Completed assessment result
        contact: Validated contact details
        context: Practice and source

    Returns:
        Dict ready to post to the lead submission endpoint

    Raises:
        ValueError: If no doctor is associated with the lead
    """
    if not context.doctor_id:
        raise ValueError("No doctor associated with this assessment")

    return {
        "name": contact.name,
        "email": contact.email,
        "phone": contact.phone,
        "quiz_type": quiz_type(result.quiz_id),
        "custom_quiz_id": custom_quiz_id(result.quiz_id),
        "score": result.score,
        "answers": result.detailed_answers,
        "lead_source": context.lead_source,
        "lead_status": LEAD_STATUS_NEW,
        "doctor_id": context.doctor_id,
        "physician_id": context.physician_id,
        "incident_source": context.incident_source,
        "submitted_at": _now(),
    }


def build_partial_payload(quiz_id: str, context: LeadContext) -> dict:
    """Placeholder row recorded when a user answers their first question."""
    if not context.doctor_id:
        raise ValueError("No doctor associated with this assessment")

    return {
        "doctor_id": context.doctor_id,
        "physician_id": context.physician_id,
        "quiz_type": quiz_type(quiz_id),
        "name": PARTIAL_NAME,
        "score": 0,
        "is_partial": True,
        "submitted_at": _now(),
    }
