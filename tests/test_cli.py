"""
Tests for the command-line interface.
"""

import argparse
import json
from unittest.mock import patch

import pytest

from assessment_engine import cli
from assessment_engine.cli import main, run_take
from assessment_engine.leads.submitter import MockLeadSubmitter


def feed(monkeypatch, *answers):
    """Script input() responses."""
    responses = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(responses))


class TestListAndShow:
    """Tests for list and show."""

    def test_list(self, capsys):
        """Every built-in is listed."""
        assert main(["list"]) == 0

        out = capsys.readouterr().out
        assert "NOSE_SNOT" in out
        assert "SLEEP_CHECK" in out

    def test_list_json(self, capsys):
        """Test JSON output."""
        assert main(["list", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        by_id = {q["id"]: q for q in data}
        assert len(data) == 11
        assert by_id["NOSE"]["max_score"] == 100
        assert by_id["NOSE_SNOT"]["kind"] == "triage"

    def test_show(self, capsys):
        """Questions, point values and bands are shown."""
        assert main(["show", "stop"]) == 0

        out = capsys.readouterr().out
        assert "Yes (1) (1 pts)" in out
        assert "very high risk" in out
        assert "Max score: 8" in out

    def test_show_unknown(self, capsys):
        """Unknown ids are an error."""
        assert main(["show", "FAKE123"]) == 1
        assert "Assessment not found" in capsys.readouterr().err


class TestScore:
    """Tests for score."""

    def test_score_json(self, capsys):
        """Test scoring answer indices."""
        assert main(["score", "NOSE", "2", "2", "2", "2", "2", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["score"] == 50
        assert data["severity"] == "mild"

    def test_score_text(self, capsys):
        """Test human-readable output."""
        assert main(["score", "TNSS", "3", "3", "3", "3"]) == 0

        assert "TNSS Score: 12/12 - Severe" in capsys.readouterr().out

    def test_score_wrong_count(self, capsys):
        """Missing answers are an error."""
        assert main(["score", "TNSS", "0", "0"]) == 1
        assert "Error" in capsys.readouterr().err


class TestValidate:
    """Tests for validate."""

    def test_reports_warnings(self, capsys):
        """DHI's unreachable band is reported."""
        assert main(["validate"]) == 0

        out = capsys.readouterr().out
        assert "DHI" in out
        assert "can never be reached" in out

    def test_strict(self):
        """--strict fails on any warning."""
        assert main(["validate", "--strict"]) == 1


class TestTake:
    """Tests for interactive take."""

    def test_triage_walk(self, monkeypatch, capsys):
        """Triage then the NOSE questions."""
        feed(monkeypatch, "1", "3", "3", "3", "3", "3")

        assert main(["take", "NOSE_SNOT"]) == 0

        out = capsys.readouterr().out
        assert "NOSE Score: 50/100 - Mild" in out

    def test_retry_bad_choice(self, monkeypatch, capsys):
        """Out-of-range choices are asked again."""
        feed(monkeypatch, "9", "x", "1", "1", "1", "1")

        assert main(["take", "TNSS"]) == 0

        out = capsys.readouterr().out
        assert "Please enter a number from 1 to 4" in out
        assert "TNSS Score: 0/12 - Normal" in out

    def test_submit_mock(self, monkeypatch, capsys):
        """--submit collects contact details and submits."""
        feed(
            monkeypatch,
            "2", "2", "2", "2",
            "J", "jamie@example.com", "555-123-4567",
            "Jamie Rivera", "jamie@example.com", "555-123-4567",
        )

        assert main(["take", "TNSS", "--submit", "--mock", "--doctor", "doc-1"]) == 0

        out = capsys.readouterr().out
        assert "at least 2 characters" in out
        assert "Submitted (lead mock-1)" in out

    def test_submit_without_doctor(self, monkeypatch, capsys):
        """Leads without a doctor are not submitted."""
        feed(monkeypatch, "1", "1", "1", "1", "Jamie", "jamie@example.com", "555-123-4567")

        assert main(["take", "TNSS", "--submit", "--mock"]) == 1
        assert "No doctor associated" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_submitter_closed_on_abort(self):
        """The submitter is closed when the walk is interrupted."""
        closed = []

        class ClosingSubmitter(MockLeadSubmitter):
            async def close(self):
                closed.append(True)

        def interrupted(prompt=""):
            raise EOFError

        args = argparse.Namespace(
            quiz_id="TNSS", submit=True, mock=True, doctor="doc-1", source=None, json=False,
        )
        with patch.object(cli, "make_submitter", return_value=ClosingSubmitter()):
            with pytest.raises(EOFError):
                await run_take(args, input_fn=interrupted)

        assert closed == [True]


def test_no_command(capsys):
    """No sub-command prints help."""
    assert main([]) == 1


def test_unknown_quiz_take(capsys):
    """Unknown ids are an error before any prompt."""
    assert main(["take", "FAKE123"]) == 1


@pytest.mark.parametrize("argv", [["score", "NOSE"], ["show"]])
def test_missing_arguments(argv):
    """argparse rejects incomplete commands."""
    with pytest.raises(SystemExit):
        main(argv)
