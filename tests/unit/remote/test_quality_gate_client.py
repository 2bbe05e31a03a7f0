"""Tests for the quality-gate API client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from codeant_ci.core.http import HttpClient, HttpResponse
from codeant_ci.core.models import Service, ValidationError
from codeant_ci.remote.quality_gates import QualityGateClient, QualityGateRequest


class TestQualityGateRequest:
    """Tests for QualityGateRequest."""

    def test_requires_token(self) -> None:
        with pytest.raises(ValidationError, match="ACCESS_TOKEN"):
            QualityGateRequest(repo="org/repo", commit_id="abc", access_token="")

    def test_requires_repo_and_commit(self) -> None:
        with pytest.raises(ValidationError, match="REPO"):
            QualityGateRequest(repo="", commit_id="abc", access_token="t")
        with pytest.raises(ValidationError, match="COMMIT_ID"):
            QualityGateRequest(repo="org/repo", commit_id="", access_token="t")

    def test_payload_without_base_url(self) -> None:
        request = QualityGateRequest(repo="org/repo", commit_id="abc", access_token="t")
        assert request.payload() == {"repo": "org/repo", "service": "github", "commit_id": "abc"}

    def test_payload_with_base_url(self) -> None:
        request = QualityGateRequest(
            repo="org/repo",
            commit_id="abc",
            access_token="t",
            service="gitlab",
            base_url="https://gitlab.internal",
        )
        assert request.service is Service.GITLAB
        assert request.payload()["base_url"] == "https://gitlab.internal"

    def test_bearer_header(self) -> None:
        request = QualityGateRequest(repo="org/repo", commit_id="abc", access_token="t0k")
        assert request.headers() == {"Authorization": "Bearer t0k"}


class TestQualityGateClient:
    """Tests for QualityGateClient."""

    def test_start_posts_to_start_endpoint(self) -> None:
        http = MagicMock(spec=HttpClient)
        http.post_json.return_value = HttpResponse(200, "{}")
        request = QualityGateRequest(repo="org/repo", commit_id="abc", access_token="t")

        response = QualityGateClient("https://api.example.com", http=http).start(request)

        assert response.status_code == 200
        http.post_json.assert_called_once_with(
            "https://api.example.com/analysis/ci/quality-gates/scan/start",
            request.payload(),
            headers={"Authorization": "Bearer t"},
        )

    def test_fetch_results_returns_raw_response(self) -> None:
        http = MagicMock(spec=HttpClient)
        http.post_json.return_value = HttpResponse(404, "not yet")
        request = QualityGateRequest(repo="org/repo", commit_id="abc", access_token="t")

        response = QualityGateClient(http=http).fetch_results(request)

        assert response == HttpResponse(404, "not yet")
        assert http.post_json.call_args.args[0].endswith("/analysis/ci/quality-gates/scan/results")
