"""
Quiz schema and data structures

Defines quiz definitions, severity bands, answers and results.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional, Union
from enum import Enum
import json
import re


Number = Union[int, float]

# "Normal (0-25): Minimal nasal obstruction", "Severe (>100): ...", "High (54+): ..."
BAND_TEXT_PATTERN = re.compile(
    r"^\s*(?P<label>[^(]+?)\s*\((?P<range>[^)]*)\)\s*:?\s*(?P<description>.*)$",
    re.DOTALL,
)
RANGE_PATTERN = re.compile(r"^(?P<low>\d+(?:\.\d+)?)\s*[-–]\s*(?P<high>\d+(?:\.\d+)?)$")
ABOVE_PATTERN = re.compile(r"^>\s*(?P<low>\d+)$")
AT_LEAST_PATTERN = re.compile(r"^(?P<low>\d+(?:\.\d+)?)\s*\+$")


class QuizKind(str, Enum):
    """Shapes of quiz definitions."""
    STANDARD = "standard"
    TRIAGE = "triage"


def _number(text: str) -> Number:
    value = float(text)
    return int(value) if value.is_integer() else value


def format_number(value: Number) -> str:
    """Render 50.0 as "50" and 12.5 as "12.5"."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


@dataclass
class QuizOption:
    """
    An answer option.

    The option's position in its question is its answer index. `value` is
    the authored point value; when it is None the scorer falls back to the
    label's "(N)" suffix and then to the index.
    """
    label: str
    value: Optional[Number] = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"label": self.label}
        if self.value is not None:
            result["value"] = self.value
        return result

    @classmethod
    def from_dict(cls, data: Union[dict, str]) -> "QuizOption":
        # Legacy catalogs store bare label strings; clinic-authored quizzes
        # use {"text": ..., "value": ...}
        if isinstance(data, str):
            return cls(label=data)
        label = data.get("label", data.get("text"))
        if label is None:
            raise ValueError(f"Option has no label: {data!r}")
        value = data.get("value")
        if value is not None and not isinstance(value, (int, float)):
            value = _number(str(value))
        return cls(label=str(label), value=value)


@dataclass
class QuizQuestion:
    """A single quiz question."""
    id: str
    text: str
    options: list[QuizOption] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "options": [o.to_dict() for o in self.options],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizQuestion":
        options = [QuizOption.from_dict(o) for o in data.get("options", [])]
        return cls(
            id=str(data["id"]),
            text=data.get("text", data.get("prompt", "")),
            options=options,
        )


@dataclass
class ScoringBand:
    """
    A contiguous score range mapped to a severity key.

    `interpretation` is the documented band text, verbatim. The numeric
    boundaries are parsed out of it once, at load time.
    """
    key: str
    label: str
    min_score: Number
    max_score: Optional[Number]  # None = no upper bound
    interpretation: str

    @classmethod
    def parse(cls, key: str, text: str) -> "ScoringBand":
        """
        Parse a documented band such as "Mild (26-50): Mild obstruction".

        Args:
            key: Severity key the band is filed under
            text: Documented band text

        Returns:
            ScoringBand with numeric boundaries

        Raises:
            ValueError: If the text carries no recognizable range
        """
        match = BAND_TEXT_PATTERN.match(text)
        if not match:
            raise ValueError(f"Band {key!r} has no score range: {text!r}")

        label = match.group("label").strip()
        span = match.group("range").strip()

        bounded = RANGE_PATTERN.match(span)
        above = ABOVE_PATTERN.match(span)
        at_least = AT_LEAST_PATTERN.match(span)

        if bounded:
            low, high = _number(bounded.group("low")), _number(bounded.group("high"))
        elif above:
            low, high = int(above.group("low")) + 1, None
        elif at_least:
            low, high = _number(at_least.group("low")), None
        else:
            raise ValueError(f"Band {key!r} has an unreadable range {span!r}")

        if high is not None and high < low:
            raise ValueError(f"Band {key!r} range {span!r} is inverted")

        return cls(key=key, label=label, min_score=low, max_score=high, interpretation=text)

    @property
    def range_text(self) -> str:
        if self.max_score is None:
            return f"{format_number(self.min_score)}+"
        return f"{format_number(self.min_score)}-{format_number(self.max_score)}"


@dataclass
class TriageBranch:
    """One way out of a triage question."""
    option_label: str
    target_quiz_id: str

    def to_dict(self) -> dict:
        return {"option_label": self.option_label, "target_quiz_id": self.target_quiz_id}

    @classmethod
    def from_dict(cls, data: dict) -> "TriageBranch":
        return cls(option_label=data["option_label"], target_quiz_id=data["target_quiz_id"])


@dataclass
class QuizDefinition:
    """
    A complete assessment.

    Standard quizzes carry questions and severity bands. Triage quizzes carry
    one question whose options come from `branches`; answering it selects
    the quiz the session continues with.
    """
    id: str
    title: str
    description: str
    max_score: Number
    questions: list[QuizQuestion] = field(default_factory=list)
    bands: list[ScoringBand] = field(default_factory=list)
    kind: QuizKind = QuizKind.STANDARD
    branches: list[TriageBranch] = field(default_factory=list)
    is_custom: bool = False

    @property
    def is_triage(self) -> bool:
        return self.kind == QuizKind.TRIAGE

    @property
    def custom_quiz_id(self) -> Optional[str]:
        """Backend row id of a clinic-authored quiz."""
        if not self.is_custom:
            return None
        return self.id.removeprefix("custom_")

    @property
    def scoring_bands(self) -> dict[str, str]:
        """Ordered severity key -> documented interpretation."""
        return {b.key: b.interpretation for b in self.bands}

    def band(self, key: str) -> ScoringBand:
        for band in self.bands:
            if band.key == key:
                return band
        raise KeyError(key)

    @classmethod
    def triage(
        cls,
        id: str,
        title: str,
        description: str,
        prompt: str,
        branches: list[TriageBranch],
    ) -> "QuizDefinition":
        """Build a triage quiz whose single question offers one option per branch."""
        question = QuizQuestion(
            id="triage",
            text=prompt,
            options=[QuizOption(label=b.option_label) for b in branches],
        )
        return cls(
            id=id,
            title=title,
            description=description,
            max_score=0,
            questions=[question],
            kind=QuizKind.TRIAGE,
            branches=list(branches),
        )

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "kind": self.kind.value,
            "max_score": self.max_score,
            "questions": [q.to_dict() for q in self.questions],
            "scoring": self.scoring_bands,
        }
        if self.branches:
            result["branches"] = [b.to_dict() for b in self.branches]
        if self.is_custom:
            result["is_custom"] = True
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "QuizDefinition":
        kind = QuizKind(data.get("kind", QuizKind.STANDARD.value))
        branches = [TriageBranch.from_dict(b) for b in data.get("branches", [])]

        if kind == QuizKind.TRIAGE:
            questions = [QuizQuestion.from_dict(q) for q in data.get("questions", [])]
            quiz = cls.triage(
                id=data["id"],
                title=data.get("title", data["id"]),
                description=data.get("description", ""),
                prompt=questions[0].text if questions else data.get("prompt", ""),
                branches=branches,
            )
            quiz.is_custom = bool(data.get("is_custom", False))
            return quiz

        scoring = data.get("scoring", {})
        return cls(
            id=data["id"],
            title=data.get("title", data["id"]),
            description=data.get("description", ""),
            max_score=data.get("max_score", data.get("maxScore", 0)),
            questions=[QuizQuestion.from_dict(q) for q in data.get("questions", [])],
            bands=[ScoringBand.parse(k, v) for k, v in scoring.items()],
            kind=kind,
            branches=branches,
            is_custom=bool(data.get("is_custom", False)),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


# =============================================================================
# SESSION DATA
# =============================================================================

@dataclass(frozen=True)
class Answer:
    """One recorded answer. `answer_text` is kept for audit and display only."""
    question_index: int
    answer_index: int
    answer_text: str = ""

    def to_dict(self) -> dict:
        return {
            "questionIndex": self.question_index,
            "answerIndex": self.answer_index,
            "answer": self.answer_text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Answer":
        return cls(
            question_index=int(data.get("question_index", data.get("questionIndex"))),
            answer_index=int(data.get("answer_index", data.get("answerIndex"))),
            answer_text=data.get("answer_text", data.get("answer", "")),
        )


@dataclass(frozen=True)
class AnswerDetail:
    """Per-question breakdown attached to a result."""
    question_id: str
    question: str
    answer: str
    points: Number


@dataclass(frozen=True)
class AssessmentResult:
    """Outcome of a completed assessment. Never recomputed once created."""
    quiz_id: str
    score: Number
    max_score: Number
    severity: str
    interpretation: str
    summary: str
    details: tuple[AnswerDetail, ...] = ()

    @property
    def detailed_answers(self) -> dict[str, dict]:
        """Breakdown keyed by question id, as stored on a lead."""
        return {
            d.question_id: {"question": d.question, "answer": d.answer, "score": d.points}
            for d in self.details
        }

    def to_dict(self) -> dict:
        return {
            "quiz_id": self.quiz_id,
            "score": self.score,
            "max_score": self.max_score,
            "severity": self.severity,
            "interpretation": self.interpretation,
            "summary": self.summary,
            "detailed_answers": self.detailed_answers,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class AssessmentSession:
    """
    Runtime state of one walk through a quiz.

    Owned by a single AssessmentEngine; never persisted by this package.
    """
    origin_quiz_id: str
    active_quiz_id: str
    answers: list[Answer] = field(default_factory=list)
    current_question_index: int = 0
    completed: bool = False
    triage_answer: Optional[Answer] = None
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def branched(self) -> bool:
        return self.active_quiz_id != self.origin_quiz_id

    def to_dict(self) -> dict:
        return {
            "origin_quiz_id": self.origin_quiz_id,
            "active_quiz_id": self.active_quiz_id,
            "answers": [a.to_dict() for a in self.answers],
            "current_question_index": self.current_question_index,
            "completed": self.completed,
            "triage_answer": self.triage_answer.to_dict() if self.triage_answer else None,
            "started_at": self.started_at,
        }

    def copy(self) -> "AssessmentSession":
        """Detached copy; answers are frozen, so a fresh list is enough."""
        return replace(self, answers=list(self.answers))
