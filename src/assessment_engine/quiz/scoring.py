"""
Assessment scoring

Pure functions from (quiz, ordered answers) to an AssessmentResult. Nothing
here touches engine state, so every quiz's band boundaries can be tested
without walking a session.
"""

import re
from typing import Optional, Sequence, Union

from .exceptions import InvalidAnswer, InvalidState, ScoringInvariantViolation
from .schema import (
    Answer,
    AnswerDetail,
    AssessmentResult,
    Number,
    QuizDefinition,
    QuizOption,
    ScoringBand,
    format_number,
)


# Trailing "(N)" on an option label, e.g. "Sometimes (2)"
LABEL_POINTS_PATTERN = re.compile(r"\((\d+)\)\s*$")


def parse_label_points(label: str) -> Optional[int]:
    """Point value embedded as a trailing parenthesized integer, if any."""
    match = LABEL_POINTS_PATTERN.search(label)
    return int(match.group(1)) if match else None


def option_points(option: QuizOption, index: int) -> Number:
    """
    Resolve the point value of an option.

    Args:
        option: The option chosen
        index: Its position in the question's options

    Returns:
        Explicit value if authored, else the label's "(N)" suffix, else the index
    """
    if option.value is not None:
        return option.value
    parsed = parse_label_points(option.label)
    if parsed is not None:
        return parsed
    return index


def check_answers(quiz: QuizDefinition, answers: Sequence[Answer]) -> None:
    """
    Ensure answers are one per question, in order, each within range.

    Raises:
        InvalidState: For triage quizzes, which have no score
        InvalidAnswer: On any malformed answer
    """
    if quiz.is_triage:
        raise InvalidState(f"Triage quiz {quiz.id!r} selects another quiz and cannot be scored")

    if len(answers) != len(quiz.questions):
        raise InvalidAnswer(
            f"{quiz.id} has {len(quiz.questions)} questions but {len(answers)} answers were given"
        )

    for position, answer in enumerate(answers):
        if answer.question_index != position:
            raise InvalidAnswer(
                f"Answer {position} is for question {answer.question_index}; answers must be in order"
            )
        options = quiz.questions[position].options
        if not 0 <= answer.answer_index < len(options):
            raise InvalidAnswer(
                f"Option {answer.answer_index} does not exist for question {position} "
                f"({len(options)} options)"
            )


def total_score(quiz: QuizDefinition, answers: Sequence[Answer]) -> Number:
    """Sum of point values. Not clamped."""
    total: Number = 0
    for answer in answers:
        option = quiz.questions[answer.question_index].options[answer.answer_index]
        total += option_points(option, answer.answer_index)
    return total


def classify(quiz: QuizDefinition, score: Number) -> ScoringBand:
    """
    Find the severity band containing a score.

    A band covers [min_score, next band's min_score); the last band is closed
    at its own max_score, or open when it has none.

    Raises:
        ScoringInvariantViolation: If no band contains the score
    """
    bands = quiz.bands
    if not bands:
        raise ScoringInvariantViolation(quiz.id, score, "quiz has no severity bands")

    for i, band in enumerate(bands):
        if score < band.min_score:
            continue
        if i + 1 < len(bands):
            if score < bands[i + 1].min_score:
                return band
        elif band.max_score is None or score <= band.max_score:
            return band

    raise ScoringInvariantViolation(quiz.id, score)


def summarize(quiz: QuizDefinition, score: Number, band: ScoringBand) -> str:
    """One-line summary, e.g. "NOSE Score: 50/100 - Mild"."""
    name = quiz.title if quiz.is_custom else quiz.id.replace("_", " ")
    return f"{name} Score: {format_number(score)}/{format_number(quiz.max_score)} - {band.label}"


def score_quiz(quiz: QuizDefinition, answers: Sequence[Answer]) -> AssessmentResult:
    """
    Score a completed set of answers.

    Args:
        quiz: A standard quiz definition
        answers: One answer per question, in question order

    Returns:
        AssessmentResult with score, severity key and interpretation

    Raises:
        InvalidAnswer: If the answers don't fit the quiz
        ScoringInvariantViolation: If the score lands outside every band
    """
    check_answers(quiz, answers)
    score = total_score(quiz, answers)
    band = classify(quiz, score)

    details = []
    for answer in answers:
        question = quiz.questions[answer.question_index]
        option = question.options[answer.answer_index]
        details.append(AnswerDetail(
            question_id=question.id,
            question=question.text,
            answer=answer.answer_text or option.label,
            points=option_points(option, answer.answer_index),
        ))

    return AssessmentResult(
        quiz_id=quiz.id,
        score=score,
        max_score=quiz.max_score,
        severity=band.key,
        interpretation=band.interpretation,
        summary=summarize(quiz, score, band),
        details=tuple(details),
    )


def answers_from_indices(quiz: QuizDefinition, indices: Sequence[int]) -> list[Answer]:
    """
    Build answers from bare option indices, one per question in order.

    Raises:
        InvalidAnswer: If there are more indices than questions or an index is out of range
    """
    if len(indices) > len(quiz.questions):
        raise InvalidAnswer(
            f"{quiz.id} has {len(quiz.questions)} questions but {len(indices)} answers were given"
        )
    answers = []
    for position, index in enumerate(indices):
        options = quiz.questions[position].options
        if not 0 <= index < len(options):
            raise InvalidAnswer(
                f"Option {index} does not exist for question {position} ({len(options)} options)"
            )
        answers.append(Answer(position, index, options[index].label))
    return answers


def calculate_score(
    catalog,
    quiz_id: str,
    answers: Sequence[Union[Answer, int]],
) -> AssessmentResult:
    """
    Score answers for a quiz looked up by id.

    Accepts Answer objects or plain option indices.

    Args:
        catalog: A QuizCatalog
        quiz_id: Quiz to score against
        answers: Ordered answers

    Returns:
        AssessmentResult

    Raises:
        UnknownQuiz: If the id is not in the catalog
    """
    quiz = catalog.get_quiz(quiz_id)
    if answers and not isinstance(answers[0], Answer):
        answers = answers_from_indices(quiz, [int(a) for a in answers])
    return score_quiz(quiz, list(answers))
