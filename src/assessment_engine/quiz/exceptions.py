"""
Assessment errors

Every failure in the catalog, engine and scoring code is raised synchronously
at the point of the call. None are retried by the engine.
"""

from typing import Optional


class AssessmentError(Exception):
    """Base exception for assessment errors."""
    pass


class UnknownQuiz(AssessmentError, KeyError):
    """Requested quiz id is not in the catalog."""

    def __init__(self, quiz_id: str):
        self.quiz_id = quiz_id
        super().__init__(f"Assessment not found: {quiz_id!r}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self.args[0]


class IndexOutOfRange(AssessmentError, IndexError):
    """Question index outside the quiz."""
    pass


class InvalidState(AssessmentError):
    """Operation not supported in the engine's current state."""
    pass


class OutOfOrderAnswer(AssessmentError):
    """Answer submitted for a question other than the current one."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Cannot answer question {received}: current question is {expected}"
        )


class InvalidAnswer(AssessmentError, ValueError):
    """Answer index outside a question's options, or a malformed answer list."""
    pass


class ScoringInvariantViolation(AssessmentError):
    """Score falls outside every severity band. Indicates bad catalog data."""

    def __init__(self, quiz_id: str, score: float, detail: Optional[str] = None):
        self.quiz_id = quiz_id
        self.score = score
        message = f"Score {score} for {quiz_id!r} is outside all severity bands"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class CatalogFetchError(AssessmentError):
    """Remote catalog could not be reached or returned garbage."""
    pass
