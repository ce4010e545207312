"""
Quiz system for clinic-assessment-engine

Catalog of assessment instruments, the session state machine and scoring.
"""

from .schema import (
    QuizKind,
    QuizOption,
    QuizQuestion,
    ScoringBand,
    TriageBranch,
    QuizDefinition,
    Answer,
    AssessmentResult,
    AssessmentSession,
)
from .catalog import (
    QuizCatalog,
    StaticCatalog,
    RemoteCatalog,
    default_catalog,
    validate_definition,
    definition_from_custom_row,
)
from .scoring import calculate_score, score_quiz, classify
from .engine import AssessmentEngine, AssessmentState
from .exceptions import (
    AssessmentError,
    UnknownQuiz,
    IndexOutOfRange,
    InvalidState,
    OutOfOrderAnswer,
    InvalidAnswer,
    ScoringInvariantViolation,
    CatalogFetchError,
)

__all__ = [
    # Schema
    "QuizKind",
    "QuizOption",
    "QuizQuestion",
    "ScoringBand",
    "TriageBranch",
    "QuizDefinition",
    "Answer",
    "AssessmentResult",
    "AssessmentSession",
    # Catalog
    "QuizCatalog",
    "StaticCatalog",
    "RemoteCatalog",
    "default_catalog",
    "validate_definition",
    "definition_from_custom_row",
    # Scoring
    "calculate_score",
    "score_quiz",
    "classify",
    # Engine
    "AssessmentEngine",
    "AssessmentState",
    # Errors
    "AssessmentError",
    "UnknownQuiz",
    "IndexOutOfRange",
    "InvalidState",
    "OutOfOrderAnswer",
    "InvalidAnswer",
    "ScoringInvariantViolation",
    "CatalogFetchError",
]
