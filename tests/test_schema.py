"""
Tests for quiz schema.
"""

import json

import pytest

from assessment_engine.quiz.schema import (
    Answer,
    AnswerDetail,
    AssessmentResult,
    AssessmentSession,
    QuizDefinition,
    QuizKind,
    QuizOption,
    QuizQuestion,
    ScoringBand,
    TriageBranch,
    format_number,
)
from assessment_engine.quiz.definitions import NOSE, NOSE_SNOT


class TestQuizOption:
    """Tests for QuizOption."""

    def test_from_plain_label(self):
        """Bare strings become unvalued options."""
        option = QuizOption.from_dict("Sometimes (2)")

        assert option.label == "Sometimes (2)"
        assert option.value is None

    def test_from_text_and_value(self):
        """Clinic-authored options use text/value."""
        option = QuizOption.from_dict({"text": "Often", "value": "3"})

        assert option.label == "Often"
        assert option.value == 3

    def test_missing_label(self):
        """An option without a label is rejected."""
        with pytest.raises(ValueError):
            QuizOption.from_dict({"value": 1})

    def test_to_dict_omits_missing_value(self):
        """Test serialization."""
        assert QuizOption("Never (0)").to_dict() == {"label": "Never (0)"}
        assert QuizOption("Mild", 5).to_dict() == {"label": "Mild", "value": 5}


class TestScoringBand:
    """Tests for documented band parsing."""

    def test_bounded_range(self):
        """Test "Label (a-b): text"."""
        band = ScoringBand.parse("normal", "Normal (0-25): Minimal nasal obstruction")

        assert band.key == "normal"
        assert band.label == "Normal"
        assert band.min_score == 0
        assert band.max_score == 25
        assert band.interpretation == "Normal (0-25): Minimal nasal obstruction"

    def test_multi_word_label(self):
        """Test labels with spaces."""
        band = ScoringBand.parse("very high risk", "Very High Risk (7-8): Very high risk")

        assert band.label == "Very High Risk"
        assert (band.min_score, band.max_score) == (7, 8)

    def test_greater_than(self):
        """Test "(>n)" ranges are open-ended above n."""
        band = ScoringBand.parse("severe", "Severe (>100): Severe dizziness handicap")

        assert band.min_score == 101
        assert band.max_score is None
        assert band.range_text == "101+"

    def test_at_least(self):
        """Test "(n+)" ranges."""
        band = ScoringBand.parse("high", "High (54+): Seek care")

        assert band.min_score == 54
        assert band.max_score is None

    def test_no_range(self):
        """Band text without a range is rejected."""
        with pytest.raises(ValueError):
            ScoringBand.parse("normal", "Normal: nothing to see")

    def test_inverted_range(self):
        """Band text with high < low is rejected."""
        with pytest.raises(ValueError):
            ScoringBand.parse("normal", "Normal (10-5): backwards")


class TestQuizDefinition:
    """Tests for QuizDefinition."""

    def test_from_dict(self):
        """Test building a standard quiz from catalog data."""
        quiz = QuizDefinition.from_dict(NOSE)

        assert quiz.id == "NOSE"
        assert quiz.kind == QuizKind.STANDARD
        assert len(quiz.questions) == 5
        assert [b.key for b in quiz.bands] == ["normal", "mild", "moderate", "severe"]
        assert quiz.questions[0].options[4].value == 20

    def test_scoring_bands_keep_documented_text(self):
        """Interpretations are the documented text, verbatim."""
        quiz = QuizDefinition.from_dict(NOSE)

        assert quiz.scoring_bands["mild"] == NOSE["scoring"]["mild"]
        assert quiz.band("severe").max_score == 100

    def test_unknown_band(self):
        """Test band() with an unknown key."""
        quiz = QuizDefinition.from_dict(NOSE)

        with pytest.raises(KeyError):
            quiz.band("catastrophic")

    def test_triage_round_trip(self):
        """Triage quizzes survive serialization."""
        data = json.loads(NOSE_SNOT.to_json())
        quiz = QuizDefinition.from_dict(data)

        assert quiz.is_triage
        assert quiz.bands == []
        assert len(quiz.questions) == 1
        assert [o.label for o in quiz.questions[0].options] == [b.option_label for b in quiz.branches]
        assert [b.target_quiz_id for b in quiz.branches] == ["NOSE", "SNOT12"]

    def test_triage_options_follow_branches(self):
        """The triage question offers one option per branch."""
        quiz = QuizDefinition.triage(
            id="T",
            title="Triage",
            description="",
            prompt="Which?",
            branches=[TriageBranch("A", "X"), TriageBranch("B", "Y"), TriageBranch("C", "Z")],
        )

        assert quiz.questions[0].text == "Which?"
        assert [o.label for o in quiz.questions[0].options] == ["A", "B", "C"]
        assert quiz.max_score == 0

    def test_custom_quiz_id(self):
        """Custom quizzes expose their backend row id."""
        quiz = QuizDefinition(id="custom_abc", title="", description="", max_score=0, is_custom=True)

        assert quiz.custom_quiz_id == "abc"
        assert QuizDefinition.from_dict(NOSE).custom_quiz_id is None

    def test_max_score_alias(self):
        """Test the camelCase maxScore key."""
        quiz = QuizDefinition.from_dict({"id": "X", "maxScore": 12, "scoring": {}})

        assert quiz.max_score == 12


class TestAnswer:
    """Tests for Answer."""

    def test_from_camel_case(self):
        """Test the stored camelCase form."""
        answer = Answer.from_dict({"questionIndex": 2, "answerIndex": 1, "answer": "Rarely (1)"})

        assert answer == Answer(2, 1, "Rarely (1)")

    def test_to_dict(self):
        """Test serialization."""
        data = Answer(0, 3, "Often (3)").to_dict()

        assert data == {"questionIndex": 0, "answerIndex": 3, "answer": "Often (3)"}

    def test_frozen(self):
        """Recorded answers cannot be altered."""
        answer = Answer(0, 0)

        with pytest.raises(Exception):
            answer.answer_index = 1


class TestAssessmentResult:
    """Tests for AssessmentResult."""

    def test_detailed_answers(self):
        """Breakdown is keyed by question id."""
        result = AssessmentResult(
            quiz_id="STOP",
            score=1,
            max_score=8,
            severity="low risk",
            interpretation="Low Risk (0-2): ...",
            summary="STOP Score: 1/8 - Low Risk",
            details=(AnswerDetail("1", "Do you snore?", "Yes (1)", 1),),
        )

        assert result.detailed_answers == {
            "1": {"question": "Do you snore?", "answer": "Yes (1)", "score": 1},
        }
        assert json.loads(result.to_json())["severity"] == "low risk"


class TestAssessmentSession:
    """Tests for AssessmentSession."""

    def test_branched(self):
        """A session is branched once its active quiz differs from its origin."""
        session = AssessmentSession(origin_quiz_id="NOSE_SNOT", active_quiz_id="NOSE_SNOT")
        assert not session.branched

        session.active_quiz_id = "NOSE"
        assert session.branched

    def test_to_dict(self):
        """Test serialization."""
        session = AssessmentSession(origin_quiz_id="NOSE", active_quiz_id="NOSE")
        session.answers.append(Answer(0, 1, "x"))
        data = session.to_dict()

        assert data["answers"] == [{"questionIndex": 0, "answerIndex": 1, "answer": "x"}]
        assert data["triage_answer"] is None
        assert data["started_at"]


def test_format_number():
    """Whole floats drop their decimal."""
    assert format_number(50.0) == "50"
    assert format_number(12.5) == "12.5"
    assert format_number(7) == "7"


def test_question_from_dict_prompt_alias():
    """Questions accept prompt as well as text."""
    question = QuizQuestion.from_dict({"id": 3, "prompt": "How?", "options": ["A", "B"]})

    assert question.id == "3"
    assert question.text == "How?"
    assert [o.label for o in question.options] == ["A", "B"]
