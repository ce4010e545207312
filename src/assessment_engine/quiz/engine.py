"""
Assessment engine

Walks one user through one assessment:
1. start() picks a quiz from the catalog
2. answer() records answers strictly in order
3. A triage quiz's single answer swaps in the selected sub-quiz
4. The last answer scores the session exactly once

Each engine owns one session and is driven by one caller.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .catalog import QuizCatalog, default_catalog
from .exceptions import InvalidAnswer, InvalidState, OutOfOrderAnswer
from .schema import Answer, AssessmentResult, AssessmentSession, QuizDefinition, QuizQuestion
from .scoring import score_quiz

logger = logging.getLogger(__name__)


class AssessmentState(str, Enum):
    """Where a session is."""
    NOT_STARTED = "not_started"
    TRIAGE = "triage"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


SessionHook = Callable[[AssessmentSession], None]
ResultHook = Callable[[AssessmentResult], None]


class AssessmentEngine:
    """
    State machine for a single assessment session.

    Rejected calls never change state. The only mid-session quiz swap is the
    one made by a triage answer, before any sub-quiz question is answered.
    Hooks run after an answer is recorded; a hook that raises is logged and
    does not undo the answer.
    """

    def __init__(
        self,
        catalog: Optional[QuizCatalog] = None,
        on_first_answer: Optional[SessionHook] = None,
        on_complete: Optional[ResultHook] = None,
    ):
        """
        Initialize engine.

        Args:
            catalog: Where quizzes are looked up (defaults to built-ins)
            on_first_answer: Called once, after the first accepted answer
                (partial-submission tracking)
            on_complete: Called once with the result
        """
        self.catalog = catalog if catalog is not None else default_catalog()
        self.on_first_answer = on_first_answer
        self.on_complete = on_complete

        self._state = AssessmentState.NOT_STARTED
        self._session: Optional[AssessmentSession] = None
        self._quiz: Optional[QuizDefinition] = None
        self._result: Optional[AssessmentResult] = None
        self._answering = False
        self._first_answer_seen = False

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AssessmentState:
        return self._state

    @property
    def session(self) -> Optional[AssessmentSession]:
        """Copy of the session; changing it does not affect the engine."""
        return self._session.copy() if self._session else None

    @property
    def active_quiz(self) -> Optional[QuizDefinition]:
        return self._quiz

    @property
    def answers(self) -> tuple[Answer, ...]:
        """Recorded answers for the active quiz."""
        return tuple(self._session.answers) if self._session else ()

    @property
    def current_question_index(self) -> int:
        return self._session.current_question_index if self._session else 0

    @property
    def progress(self) -> float:
        """Fraction of the active quiz answered, 0.0-1.0."""
        if not self._quiz or not self._quiz.questions:
            return 0.0
        return self.current_question_index / len(self._quiz.questions)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self, quiz_id: str) -> QuizQuestion:
        """
        Begin a session.

        Args:
            quiz_id: Catalog id of the quiz

        Returns:
            The first question

        Raises:
            InvalidState: If a session was already started
            UnknownQuiz: If the id is not in the catalog (no session is created)
        """
        if self._state != AssessmentState.NOT_STARTED:
            raise InvalidState(f"Session already started ({self._state.value})")

        quiz = self.catalog.get_quiz(quiz_id)
        if not quiz.questions:
            raise InvalidState(f"Quiz {quiz.id!r} has no questions")

        self._quiz = quiz
        self._session = AssessmentSession(origin_quiz_id=quiz.id, active_quiz_id=quiz.id)
        self._state = AssessmentState.TRIAGE if quiz.is_triage else AssessmentState.IN_PROGRESS

        logger.debug(f"Started {quiz.id} in state {self._state.value}")
        return quiz.questions[0]

    def current_question(self) -> QuizQuestion:
        """
        The question awaiting an answer.

        Raises:
            InvalidState: Before start() or after completion
        """
        if self._state not in (AssessmentState.TRIAGE, AssessmentState.IN_PROGRESS):
            raise InvalidState(f"No current question in state {self._state.value}")
        return self._quiz.questions[self._session.current_question_index]

    def answer(self, question_index: int, answer_index: int) -> Optional[AssessmentResult]:
        """
        Record an answer to the current question.

        Args:
            question_index: Question being answered; must be the current one
            answer_index: Chosen option's position

        Returns:
            The result if this answer completed the assessment, else None

        Raises:
            InvalidState: Not accepting answers, or an answer is already in flight
            OutOfOrderAnswer: question_index is not the current question
            InvalidAnswer: answer_index is not one of the question's options
            UnknownQuiz: A triage branch points at a missing quiz
            ScoringInvariantViolation: The final score lands outside every band
        """
        if self._state not in (AssessmentState.TRIAGE, AssessmentState.IN_PROGRESS):
            raise InvalidState(f"Cannot answer in state {self._state.value}")
        if self._answering:
            raise InvalidState("Already answering - answers must not overlap")

        session = self._session
        if question_index != session.current_question_index:
            logger.info(
                f"Rejected answer for question {question_index}; "
                f"current question is {session.current_question_index}"
            )
            raise OutOfOrderAnswer(session.current_question_index, question_index)

        question = self._quiz.questions[question_index]
        if not 0 <= answer_index < len(question.options):
            raise InvalidAnswer(
                f"Option {answer_index} does not exist for question {question_index} "
                f"({len(question.options)} options)"
            )

        recorded = Answer(question_index, answer_index, question.options[answer_index].label)

        self._answering = True
        try:
            completed = False
            if self._state == AssessmentState.TRIAGE:
                self._branch(recorded)
            else:
                completed = self._record(recorded)

            if not self._first_answer_seen:
                self._first_answer_seen = True
                self._notify("on_first_answer", self.on_first_answer, session.copy())

            if not completed:
                return None
            self._notify("on_complete", self.on_complete, self._result)
            return self._result
        finally:
            self._answering = False

    def result(self) -> AssessmentResult:
        """
        The assessment result.

        Raises:
            InvalidState: Unless the session is completed
        """
        if self._state != AssessmentState.COMPLETED or self._result is None:
            raise InvalidState(f"No result in state {self._state.value}")
        return self._result

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _notify(self, name: str, hook: Optional[Callable], payload) -> None:
        """Run a hook. The answer is already recorded, so failures are only logged."""
        if hook is None:
            return
        try:
            hook(payload)
        except Exception as e:
            logger.warning(f"{name} hook failed for {self._session.active_quiz_id}: {e}", exc_info=True)

    def _branch(self, triage_answer: Answer) -> None:
        """Swap to the sub-quiz chosen by a triage answer."""
        branches = self._quiz.branches
        if not branches:
            raise InvalidState(f"Triage quiz {self._quiz.id!r} has no branches")

        # Options past the last branch fall through to the last branch
        branch = branches[min(triage_answer.answer_index, len(branches) - 1)]
        target = self.catalog.get_quiz(branch.target_quiz_id)
        if target.is_triage or not target.questions:
            raise InvalidState(f"Triage branch {branch.target_quiz_id!r} is not an answerable quiz")

        session = self._session
        session.triage_answer = triage_answer
        session.active_quiz_id = target.id
        session.answers = []
        session.current_question_index = 0
        self._quiz = target
        self._state = AssessmentState.IN_PROGRESS

        logger.debug(f"Triage {session.origin_quiz_id} -> {target.id}")

    def _record(self, answer: Answer) -> bool:
        """Append an answer, scoring first if it is the last one. Returns True on completion."""
        session = self._session
        answers = session.answers + [answer]
        is_last = len(answers) == len(self._quiz.questions)

        # Score before mutating so a scoring failure leaves the session untouched
        result = score_quiz(self._quiz, answers) if is_last else None

        session.answers.append(answer)
        session.current_question_index += 1

        if not is_last:
            return False

        session.completed = True
        self._result = result
        self._state = AssessmentState.COMPLETED
        logger.debug(f"Completed {self._quiz.id}: {result.score} ({result.severity})")
        return True
