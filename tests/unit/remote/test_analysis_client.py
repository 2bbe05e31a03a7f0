"""Tests for the analysis API client."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from codeant_ci.core.http import HttpClient, HttpResponse, TransportError
from codeant_ci.core.models import FetchState, ResultKind, ScanRequest, Service
from codeant_ci.remote.analysis import AnalysisClient, AuthenticationError


@pytest.fixture
def scan_request() -> ScanRequest:
    return ScanRequest(
        repo="org/repo",
        service=Service.GITHUB,
        commit_id="abc123",
        access_token="token",
        branch="main",
    )


@pytest.fixture
def http() -> MagicMock:
    return MagicMock(spec=HttpClient)


class TestUrls:
    def test_trailing_slash_is_stripped(self, http) -> None:
        client = AnalysisClient("https://api.example.com/", http=http)
        assert client.start_scan_url == "https://api.example.com/api/analysis/start"
        assert client.results_url(ResultKind.SCA) == "https://api.example.com/api/analysis/results/sca"


class TestStartScan:
    """Tests for AnalysisClient.start_scan."""

    def test_success(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(200, json.dumps({"scan_id": "s-1"}))
        client = AnalysisClient("https://api.example.com", http=http)

        result = client.start_scan(scan_request)

        assert result.success is True
        assert result.data == {"scan_id": "s-1"}
        url, payload = http.post_json.call_args.args
        assert url == "https://api.example.com/api/analysis/start"
        assert payload == scan_request.trigger_payload()

    def test_http_error_includes_body(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(403, "forbidden repo")
        result = AnalysisClient(http=http).start_scan(scan_request)

        assert result.success is False
        assert result.status_code == 403
        assert result.error == "HTTP 403: forbidden repo"

    def test_invalid_json(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(200, "<html>")
        result = AnalysisClient(http=http).start_scan(scan_request)

        assert result.success is False
        assert result.error.startswith("Invalid JSON in response")

    def test_transport_failure(self, http, scan_request) -> None:
        http.post_json.side_effect = TransportError("connection refused")
        result = AnalysisClient(http=http).start_scan(scan_request)

        assert result.success is False
        assert result.error == "Request failed: connection refused"


class TestFetchResults:
    """Tests for AnalysisClient.fetch_results."""

    def test_ready(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(200, json.dumps({"issues": []}))
        outcome = AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SECURITY)

        assert outcome.state is FetchState.READY
        assert outcome.data == {"issues": []}
        url, payload = http.post_json.call_args.args
        assert url.endswith("/api/analysis/results")
        assert payload == scan_request.results_payload()

    def test_list_body_is_ready(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(200, "[]")
        outcome = AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SCA)
        assert outcome.is_ready

    def test_pending(self, http, scan_request) -> None:
        body = {"status": "pending", "vulnerabilities": [{"id": 1}]}
        http.post_json.return_value = HttpResponse(200, json.dumps(body))
        outcome = AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SCA)

        assert outcome.state is FetchState.PENDING
        assert outcome.data == body

    @pytest.mark.parametrize("status", [204, 404])
    def test_not_found(self, http, scan_request, status) -> None:
        http.post_json.return_value = HttpResponse(status, "")
        outcome = AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SECURITY)
        assert outcome.state is FetchState.NOT_FOUND

    def test_unauthorized_raises(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(401, "unauthorized")
        with pytest.raises(AuthenticationError, match="check your access token"):
            AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SECURITY)

    def test_server_error(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(502, "bad gateway")
        outcome = AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SECURITY)

        assert outcome.state is FetchState.ERROR
        assert outcome.message == "HTTP 502"

    def test_invalid_json_is_error(self, http, scan_request) -> None:
        http.post_json.return_value = HttpResponse(200, "not json")
        outcome = AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SECURITY)
        assert outcome.state is FetchState.ERROR

    def test_transport_error(self, http, scan_request) -> None:
        http.post_json.side_effect = TransportError("timed out")
        outcome = AnalysisClient(http=http).fetch_results(scan_request, ResultKind.SCA)

        assert outcome.state is FetchState.ERROR
        assert outcome.message == "timed out"
