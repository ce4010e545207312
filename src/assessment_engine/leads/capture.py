"""
Lead capture

Connects an AssessmentEngine to a LeadSubmitter. The engine is synchronous,
so the partial-submission hook only queues the record; the caller flushes it
from its event loop.
"""

import logging
from typing import Optional

from ..config import config
from ..quiz.engine import AssessmentEngine, AssessmentState
from ..quiz.exceptions import InvalidState
from ..quiz.schema import AssessmentSession
from .contact import ContactInfo
from .payload import LeadContext
from .submitter import LeadSubmitter, SubmissionResult

logger = logging.getLogger(__name__)


class LeadCapture:
    """Partial tracking and final lead submission for one practice."""

    def __init__(
        self,
        submitter: LeadSubmitter,
        context: LeadContext,
        track_partial: Optional[bool] = None,
    ):
        """
        Initialize lead capture.

        Args:
            submitter: Where leads go
            context: Practice and source attached to every lead
            track_partial: Record a partial lead on the first answer (defaults to config)
        """
        self.submitter = submitter
        self.context = context
        self.track_partial = config.leads.track_partial if track_partial is None else track_partial
        self._pending: list[str] = []
        self.partial_results: list[SubmissionResult] = []

    def attach(self, engine: AssessmentEngine) -> AssessmentEngine:
        """Hook partial tracking into an engine, keeping any existing hook."""
        previous = engine.on_first_answer

        def on_first_answer(session: AssessmentSession) -> None:
            if previous is not None:
                previous(session)
            if self.track_partial:
                self._pending.append(session.origin_quiz_id)
                logger.debug(f"Queued partial submission for {session.origin_quiz_id}")

        engine.on_first_answer = on_first_answer
        return engine

    @property
    def pending(self) -> list[str]:
        """Quiz ids with a partial submission not yet sent."""
        return list(self._pending)

    async def flush_partial(self) -> list[SubmissionResult]:
        """Send queued partial submissions."""
        results = []
        while self._pending:
            quiz_id = self._pending.pop(0)
            result = await self.submitter.record_partial(quiz_id, self.context)
            self.partial_results.append(result)
            results.append(result)
        return results

    async def submit(self, engine: AssessmentEngine, contact: ContactInfo) -> SubmissionResult:
        """
        Submit a completed assessment as a lead.

        Args:
            engine: Engine in the COMPLETED state
            contact: Contact details for the lead

        Returns:
            SubmissionResult from the submitter

        Raises:
            InvalidState: If the assessment is not complete
            ValueError: If contact details are invalid (message lists every problem)
        """
        if engine.state != AssessmentState.COMPLETED:
            raise InvalidState(f"Cannot submit a lead in state {engine.state.value}")

        errors = contact.validate()
        if errors:
            raise ValueError("; ".join(errors))

        await self.flush_partial()
        result = await self.submitter.submit(engine.result(), contact, self.context)
        if not result.ok:
            logger.warning(f"Lead for {engine.result().quiz_id} not submitted via {self.submitter.name}: {result.error}")
        return result
