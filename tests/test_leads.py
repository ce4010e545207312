"""
Tests for lead capture.
"""

import json

import httpx
import pytest

from assessment_engine.leads.capture import LeadCapture
from assessment_engine.leads.contact import ContactInfo
from assessment_engine.leads.payload import (
    LeadContext,
    build_lead_payload,
    build_partial_payload,
    quiz_type,
)
from assessment_engine.leads.submitter import (
    MockLeadSubmitter,
    SubmissionResult,
    SupabaseLeadSubmitter,
)
from assessment_engine.quiz.catalog import default_catalog
from assessment_engine.quiz.engine import AssessmentEngine
from assessment_engine.quiz.exceptions import InvalidState
from assessment_engine.quiz.scoring import calculate_score


@pytest.fixture
def result():
    return calculate_score(default_catalog(warn_on_load=False), "NOSE", [2, 2, 2, 2, 2])


@pytest.fixture
def contact():
    return ContactInfo(name="Jamie Rivera", email="jamie@example.com", phone="(555) 123-4567")


@pytest.fixture
def context():
    return LeadContext(doctor_id="doc-1")


def completed_engine(quiz_id="TNSS", index=1) -> AssessmentEngine:
    engine = AssessmentEngine(default_catalog(warn_on_load=False))
    engine.start(quiz_id)
    while engine.state.value != "completed":
        engine.answer(engine.current_question_index, index)
    return engine


class TestContactInfo:
    """Tests for contact validation."""

    def test_valid(self, contact):
        """Test a complete, well-formed contact."""
        assert contact.validate() == []
        assert contact.is_valid

    @pytest.mark.parametrize("phone", ["555-123-4567", "(555) 123-4567", "555.123.4567", "5551234567"])
    def test_phone_formats(self, phone):
        """Common US phone formats are accepted."""
        assert ContactInfo("Jamie", "jamie@example.com", phone).validate() == []

    def test_short_name(self):
        """Names need at least 2 characters."""
        errors = ContactInfo("J", "jamie@example.com", "555-123-4567").validate()

        assert errors == ["Please enter a valid name (at least 2 characters)"]

    def test_bad_email_and_phone(self):
        """Every problem is reported."""
        errors = ContactInfo("Jamie", "jamie@example", "12345").validate()

        assert len(errors) == 2
        assert "email" in errors[0]
        assert "phone" in errors[1]

    def test_blank_fields(self):
        """Blank fields are reported as missing."""
        errors = ContactInfo("  ", "", " ").validate()

        assert errors == [
            "Please enter your name",
            "Please enter your email address",
            "Please enter your phone number",
        ]

    def test_whitespace_stripped(self):
        """Surrounding whitespace is ignored."""
        contact = ContactInfo(" Jamie ", " jamie@example.com ", " 555-123-4567 ")

        assert contact.to_dict() == {"name": "Jamie", "email": "jamie@example.com", "phone": "555-123-4567"}


class TestPayload:
    """Tests for lead record construction."""

    def test_lead_payload(self, result, contact, context):
        """Completed leads carry score, answers and practice."""
        payload = build_lead_payload(result, contact, context)

        assert payload["name"] == "Jamie Rivera"
        assert payload["quiz_type"] == "NOSE"
        assert payload["custom_quiz_id"] is None
        assert payload["score"] == 50
        assert payload["answers"]["1"]["score"] == 10
        assert payload["lead_source"] == "chatbot_page"
        assert payload["lead_status"] == "NEW"
        assert payload["doctor_id"] == "doc-1"
        assert payload["physician_id"] == "doc-1"
        assert payload["incident_source"] == "default"
        assert payload["submitted_at"]
        json.dumps(payload)

    def test_context_overrides(self, result, contact):
        """Explicit physician and source win over defaults."""
        context = LeadContext(doctor_id="doc-1", physician_id="phys-9", lead_source="website")
        payload = build_lead_payload(result, contact, context)

        assert payload["physician_id"] == "phys-9"
        assert payload["lead_source"] == "website"

    def test_quiz_type(self):
        """Built-in ids are upper-cased; custom ids are kept."""
        assert quiz_type("nose") == "NOSE"
        assert quiz_type("custom_abc") == "custom_abc"

    def test_no_doctor(self, result, contact):
        """Leads need a doctor."""
        with pytest.raises(ValueError):
            build_lead_payload(result, contact, LeadContext(doctor_id=""))

    def test_partial_payload(self, context):
        """Partial rows are placeholders."""
        payload = build_partial_payload("NOSE_SNOT", context)

        assert payload["name"] == "Partial Submission"
        assert payload["score"] == 0
        assert payload["is_partial"] is True
        assert payload["quiz_type"] == "NOSE_SNOT"
        assert payload["physician_id"] == "doc-1"


class TestMockLeadSubmitter:
    """Tests for MockLeadSubmitter."""

    @pytest.mark.asyncio
    async def test_records_submissions(self, result, contact, context):
        """Payloads are kept in memory."""
        submitter = MockLeadSubmitter()

        outcome = await submitter.submit(result, contact, context)
        partial = await submitter.record_partial("NOSE", context)

        assert outcome.ok
        assert outcome.lead_id == "mock-1"
        assert partial.ok
        assert submitter.submitted[0]["score"] == 50
        assert submitter.partials[0]["is_partial"] is True

    @pytest.mark.asyncio
    async def test_forced_failure(self, result, contact, context):
        """fail_with makes every call fail."""
        submitter = MockLeadSubmitter(fail_with="backend down")

        outcome = await submitter.submit(result, contact, context)

        assert not outcome.ok
        assert outcome.error == "backend down"
        assert submitter.submitted == []
        assert str(outcome) == "Submission failed: backend down"


def backend(requests, status_code=200, body=None):
    """MockTransport for the edge function and REST table."""
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.startswith("/functions/v1/"):
            payload = json.loads(request.content)
            default = {"success": True, "data": dict(payload, id="lead-42"), "message": "Lead submitted"}
        else:
            default = [{"id": 7, "is_partial": True}]
        return httpx.Response(status_code, json=default if body is None else body)
    return handler


class TestSupabaseLeadSubmitter:
    """Tests for the backend submitter."""

    def make(self, requests, **kwargs) -> SupabaseLeadSubmitter:
        return SupabaseLeadSubmitter(
            url="https://clinic.example.supabase.co",
            api_key="anon-key",
            transport=httpx.MockTransport(backend(requests, **kwargs)),
        )

    @pytest.mark.asyncio
    async def test_submit(self, result, contact, context):
        """Completed leads go to the submit-lead function."""
        requests = []
        submitter = self.make(requests)

        outcome = await submitter.submit(result, contact, context)
        await submitter.close()

        assert outcome.ok
        assert outcome.lead_id == "lead-42"
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/functions/v1/submit-lead"
        assert request.headers["authorization"] == "Bearer anon-key"
        assert json.loads(request.content)["quiz_type"] == "NOSE"

    @pytest.mark.asyncio
    async def test_record_partial(self, context):
        """Partial rows are inserted into the leads table."""
        requests = []
        submitter = self.make(requests)

        outcome = await submitter.record_partial("NOSE", context)

        assert outcome.ok
        assert outcome.lead_id == "7"
        assert requests[0].url.path == "/rest/v1/quiz_leads"
        assert requests[0].headers["prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_rejected(self, result, contact, context):
        """A 400 from the function is reported, not raised."""
        requests = []
        submitter = self.make(
            requests,
            status_code=400,
            body={"success": False, "error": "Missing required field: phone"},
        )

        outcome = await submitter.submit(result, contact, context)

        assert not outcome.ok
        assert "Missing required field: phone" in outcome.error

    @pytest.mark.asyncio
    async def test_success_false(self, result, contact, context):
        """A 200 with success=false is still a failure."""
        requests = []
        submitter = self.make(requests, body={"success": False, "error": "nope"})

        outcome = await submitter.submit(result, contact, context)

        assert outcome == SubmissionResult(ok=False, error="nope")

    @pytest.mark.asyncio
    async def test_connection_error(self, result, contact, context):
        """Transport failures are reported, not raised."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        submitter = SupabaseLeadSubmitter(
            url="https://clinic.example.supabase.co",
            api_key="anon-key",
            transport=httpx.MockTransport(handler),
        )

        outcome = await submitter.submit(result, contact, context)

        assert not outcome.ok
        assert outcome.error.startswith("Connection error")

    @pytest.mark.asyncio
    async def test_no_doctor(self, result, contact):
        """Leads without a doctor never reach the backend."""
        requests = []
        submitter = self.make(requests)

        outcome = await submitter.submit(result, contact, LeadContext(doctor_id=""))

        assert not outcome.ok
        assert requests == []


class TestLeadCapture:
    """Tests for LeadCapture."""

    @pytest.mark.asyncio
    async def test_partial_then_submit(self, contact, context):
        """The first answer queues a partial; submit sends the lead."""
        submitter = MockLeadSubmitter()
        capture = LeadCapture(submitter, context, track_partial=True)
        engine = capture.attach(AssessmentEngine(default_catalog(warn_on_load=False)))

        engine.start("NOSE_SNOT")
        engine.answer(0, 1)
        assert capture.pending == ["NOSE_SNOT"]

        await capture.flush_partial()
        assert capture.pending == []
        assert submitter.partials[0]["quiz_type"] == "NOSE_SNOT"

        while engine.state.value != "completed":
            engine.answer(engine.current_question_index, 0)

        outcome = await capture.submit(engine, contact)

        assert outcome.ok
        assert submitter.submitted[0]["quiz_type"] == "SNOT12"
        assert len(submitter.partials) == 1

    @pytest.mark.asyncio
    async def test_partial_tracking_off(self, context):
        """No partial rows when tracking is disabled."""
        capture = LeadCapture(MockLeadSubmitter(), context, track_partial=False)
        engine = capture.attach(AssessmentEngine(default_catalog(warn_on_load=False)))

        engine.start("TNSS")
        engine.answer(0, 0)

        assert capture.pending == []

    def test_keeps_existing_hook(self, context):
        """Attaching does not drop a hook already on the engine."""
        calls = []
        engine = AssessmentEngine(default_catalog(warn_on_load=False), on_first_answer=calls.append)
        LeadCapture(MockLeadSubmitter(), context, track_partial=True).attach(engine)

        engine.start("TNSS")
        engine.answer(0, 0)

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_incomplete(self, contact, context):
        """Only completed assessments can be submitted."""
        capture = LeadCapture(MockLeadSubmitter(), context)
        engine = AssessmentEngine(default_catalog(warn_on_load=False))
        engine.start("TNSS")

        with pytest.raises(InvalidState):
            await capture.submit(engine, contact)

    @pytest.mark.asyncio
    async def test_invalid_contact(self, context):
        """Invalid contact details raise with every message."""
        capture = LeadCapture(MockLeadSubmitter(), context)

        with pytest.raises(ValueError) as exc_info:
            await capture.submit(completed_engine(), ContactInfo("J", "bad", "1"))

        assert "name" in str(exc_info.value)
        assert "email" in str(exc_info.value)
        assert "phone" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_submitter_failure(self, contact, context):
        """Submitter failures come back in the result."""
        capture = LeadCapture(MockLeadSubmitter(fail_with="backend down"), context)

        outcome = await capture.submit(completed_engine(), contact)

        assert not outcome.ok
