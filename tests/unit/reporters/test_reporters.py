"""Tests for stdout reporters."""

from __future__ import annotations

import io
import json

from codeant_ci.core.models import FinalResult, ResultStatus
from codeant_ci.reporters import (
    JSONReporter,
    SummaryReporter,
    get_reporter,
    list_available_reporters,
)


def _result(status: ResultStatus = ResultStatus.SUCCESS, **kwargs) -> FinalResult:
    values = dict(
        repository="org/repo",
        service="github",
        commit_id="abc123",
        status=status,
    )
    values.update(kwargs)
    return FinalResult(**values)


class TestRegistry:
    def test_lookup(self) -> None:
        assert isinstance(get_reporter("json"), JSONReporter)
        assert isinstance(get_reporter("summary"), SummaryReporter)
        assert get_reporter("sarif") is None

    def test_list(self) -> None:
        assert list_available_reporters() == ["json", "summary"]


class TestJSONReporter:
    def test_writes_result_document(self) -> None:
        result = _result(security_issues=[{"id": 1}], security_found=True, sca_found=True)
        output = io.StringIO()

        JSONReporter().report(result, output)

        assert json.loads(output.getvalue()) == result.to_dict()


class TestSummaryReporter:
    """Tests for SummaryReporter."""

    def test_success_counts(self) -> None:
        result = _result(
            security_issues=[{"id": 1}, {"id": 2}],
            sca_vulnerabilities=[{"id": 3}],
            security_found=True,
            sca_found=True,
        )
        output = io.StringIO()

        SummaryReporter().report(result, output)
        text = output.getvalue()

        assert "Repository: org/repo" in text
        assert "Status: success" in text
        assert "Security issues: 2" in text
        assert "SCA vulnerabilities: 1" in text
        assert "Not retrieved" not in text

    def test_partial_names_missing_kind(self) -> None:
        result = _result(ResultStatus.PARTIAL, security_found=True)
        lines = SummaryReporter()._format_summary(result)
        assert "Not retrieved before timeout: SCA" in lines

    def test_failed_shows_error(self) -> None:
        lines = SummaryReporter()._format_summary(
            _result(ResultStatus.FAILED, error="nothing arrived")
        )
        assert "Error: nothing arrived" in lines

    def test_triggered_shows_message(self) -> None:
        lines = SummaryReporter()._format_summary(
            _result(ResultStatus.TRIGGERED, message="queued")
        )
        assert lines[-1] == "queued"
