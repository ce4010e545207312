"""
Lead submitters

Hand completed and partial assessments to the practice backend. Failures are
reported in the SubmissionResult, never raised.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ..config import config
from ..quiz.schema import AssessmentResult
from .contact import ContactInfo
from .payload import LeadContext, build_lead_payload, build_partial_payload

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Outcome of a submission. ok=False carries an error message."""
    ok: bool
    lead_id: Optional[str] = None
    error: Optional[str] = None
    data: dict = field(default_factory=dict)

    def __str__(self) -> str:
        if self.ok:
            return f"Submitted (lead {self.lead_id or 'unknown'})"
        return f"Submission failed: {self.error or 'no details'}"

    @classmethod
    def failure(cls, error: str) -> "SubmissionResult":
        return cls(ok=False, error=error)


class LeadSubmitter(ABC):
    """
    Abstract base class for lead submitters.

    Submitters must implement submit() and record_partial().
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Submitter name for logging."""
        pass

    @abstractmethod
    async def submit(
        self,
        result: AssessmentResult,
        contact: ContactInfo,
        context: LeadContext,
    ) -> SubmissionResult:
        """
        Submit a completed assessment as a new lead.

        Args:
            result: Completed assessment result
            contact: Validated contact details
            context: Practice and source

        Returns:
            SubmissionResult
        """
        pass

    @abstractmethod
    async def record_partial(self, quiz_id: str, context: LeadContext) -> SubmissionResult:
        """
        Record that someone started an assessment.

        Args:
            quiz_id: Quiz the user started
            context: Practice and source

        Returns:
            SubmissionResult
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass


class SupabaseLeadSubmitter(LeadSubmitter):
    """
    Submits leads to the practice backend.

    Completed leads go through the submit-lead edge function, which also
    triggers practice notifications. Partial rows are inserted directly into
    the leads table. Reads:
    1. Constructor arguments
    2. SUPABASE_URL / SUPABASE_ANON_KEY via config
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize submitter.

        Args:
            url: Backend base URL
            api_key: Backend anon key
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests)
        """
        self._url = (url or config.supabase.url).rstrip("/")
        self._api_key = api_key or config.supabase.anon_key
        self._timeout = timeout or config.supabase.timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "supabase"

    def _get_client(self) -> Optional[httpx.AsyncClient]:
        """Lazy initialization of HTTP client. None when no backend is configured."""
        if self._client is None:
            if not self._url or not self._api_key:
                return None
            self._client = httpx.AsyncClient(
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def _post(self, url: str, payload: dict, headers: Optional[dict] = None) -> tuple[Optional[Any], Optional[str]]:
        """POST JSON. Returns (decoded body, error message)."""
        client = self._get_client()
        if client is None:
            return None, "No backend configured. Set SUPABASE_URL and SUPABASE_ANON_KEY."

        try:
            response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            return None, f"Connection error: {e}"

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None

        if response.status_code >= 400:
            detail = body.get("error") if isinstance(body, dict) else None
            return body, f"HTTP {response.status_code}: {detail or response.reason_phrase}"
        return body, None

    async def submit(
        self,
        result: AssessmentResult,
        contact: ContactInfo,
        context: LeadContext,
    ) -> SubmissionResult:
        try:
            payload = build_lead_payload(result, contact, context)
        except ValueError as e:
            return SubmissionResult.failure(str(e))

        body, error = await self._post(
            f"{self._url}/functions/v1/{config.leads.submit_function}",
            payload,
        )
        if error is None and isinstance(body, dict) and body.get("success") is False:
            error = body.get("error") or "Lead submission rejected"
        if error is not None:
            logger.warning(f"Lead submission for {payload['quiz_type']} failed: {error}")
            return SubmissionResult.failure(error)

        lead = body.get("data") if isinstance(body, dict) else None
        lead_id = str(lead["id"]) if isinstance(lead, dict) and lead.get("id") is not None else None
        logger.info(f"Submitted {payload['quiz_type']} lead {lead_id} (score {result.score})")
        return SubmissionResult(ok=True, lead_id=lead_id, data=lead or {})

    async def record_partial(self, quiz_id: str, context: LeadContext) -> SubmissionResult:
        try:
            payload = build_partial_payload(quiz_id, context)
        except ValueError as e:
            return SubmissionResult.failure(str(e))

        body, error = await self._post(
            f"{self._url}/rest/v1/{config.leads.leads_table}",
            payload,
            headers={"Prefer": "return=representation"},
        )
        if error is not None:
            logger.warning(f"Partial submission for {payload['quiz_type']} failed: {error}")
            return SubmissionResult.failure(error)

        row = body[0] if isinstance(body, list) and body else {}
        lead_id = str(row["id"]) if row.get("id") is not None else None
        logger.debug(f"Recorded partial submission {lead_id} for {payload['quiz_type']}")
        return SubmissionResult(ok=True, lead_id=lead_id, data=row)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


@dataclass
class MockLeadSubmitter(LeadSubmitter):
    """
    Mock submitter for testing and offline use.

    Records every payload it would have sent. Set fail_with to make every
    call fail with that message.
    """

    fail_with: Optional[str] = None
    submitted: list[dict] = field(default_factory=list)
    partials: list[dict] = field(default_factory=list)

    @property
    def name(self) -> str:
        return "mock"

    async def submit(
        self,
        result: AssessmentResult,
        contact: ContactInfo,
        context: LeadContext,
    ) -> SubmissionResult:
        if self.fail_with:
            return SubmissionResult.failure(self.fail_with)
        try:
            payload = build_lead_payload(result, contact, context)
        except ValueError as e:
            return SubmissionResult.failure(str(e))
        self.submitted.append(payload)
        return SubmissionResult(ok=True, lead_id=f"mock-{len(self.submitted)}", data=payload)

    async def record_partial(self, quiz_id: str, context: LeadContext) -> SubmissionResult:
        if self.fail_with:
            return SubmissionResult.failure(self.fail_with)
        try:
            payload = build_partial_payload(quiz_id, context)
        except ValueError as e:
            return SubmissionResult.failure(str(e))
        self.partials.append(payload)
        return SubmissionResult(ok=True, lead_id=f"mock-partial-{len(self.partials)}", data=payload)
