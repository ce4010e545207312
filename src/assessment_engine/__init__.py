"""
clinic-assessment-engine: patient self-assessment quizzes for medical practices.

Scores standardized symptom questionnaires, walks patients through multi-stage
assessments and hands completed results to lead capture.
"""

__version__ = "0.1.0"

from .config import config
from .quiz import (
    AssessmentEngine,
    AssessmentState,
    AssessmentResult,
    QuizDefinition,
    StaticCatalog,
    RemoteCatalog,
    default_catalog,
    calculate_score,
)
from .leads import ContactInfo, LeadCapture, LeadContext, SubmissionResult

__all__ = [
    # Config
    "config",
    # Quiz
    "AssessmentEngine",
    "AssessmentState",
    "AssessmentResult",
    "QuizDefinition",
    "StaticCatalog",
    "RemoteCatalog",
    "default_catalog",
    "calculate_score",
    # Leads
    "ContactInfo",
    "LeadCapture",
    "LeadContext",
    "SubmissionResult",
]
