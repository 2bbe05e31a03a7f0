"""Tests for core data models."""

from __future__ import annotations

import pytest

from codeant_ci.core.models import (
    AggregateState,
    FetchOutcome,
    FetchState,
    FinalResult,
    ResultKind,
    ResultStatus,
    ScanRequest,
    Service,
    ValidationError,
)


def _request(**overrides) -> ScanRequest:
    values = dict(
        repo="org/repo",
        service=Service.GITHUB,
        commit_id="abc123",
        access_token="secret-token",
    )
    values.update(overrides)
    return ScanRequest(**values)


class TestService:
    """Tests for Service enum."""

    def test_parse_is_case_insensitive(self) -> None:
        assert Service.parse("GitLab") is Service.GITLAB

    def test_parse_unknown_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError, match="Unknown service 'svn'"):
            Service.parse("svn")

    def test_base_url_keys(self) -> None:
        assert Service.GITHUB.base_url_key == "github_base_url"
        assert Service.GITLAB.base_url_key == "gitlab_base_url"
        assert Service.AZUREDEVOPS.base_url_key == "azure_devops_base_url"
        assert Service.BITBUCKET.base_url_key == "bitbucket_base_url"

    def test_default_base_urls(self) -> None:
        assert Service.GITHUB.default_base_url == "https://github.com"
        assert Service.AZUREDEVOPS.default_base_url == "https://dev.azure.com"


class TestScanRequest:
    """Tests for ScanRequest construction and payloads."""

    def test_missing_token_raises(self) -> None:
        with pytest.raises(ValidationError, match="access token"):
            _request(access_token="")

    def test_missing_repo_raises(self) -> None:
        with pytest.raises(ValidationError, match="repository"):
            _request(repo="")

    def test_missing_commit_raises(self) -> None:
        with pytest.raises(ValidationError, match="commit"):
            _request(commit_id="")

    def test_service_string_is_coerced(self) -> None:
        request = _request(service="gitlab")
        assert request.service is Service.GITLAB

    def test_token_hidden_from_repr(self) -> None:
        assert "secret-token" not in repr(_request())

    def test_is_immutable(self) -> None:
        request = _request()
        with pytest.raises(Exception):
            request.repo = "other/repo"  # type: ignore[misc]

    def test_trigger_payload_uses_default_base_url(self) -> None:
        payload = _request(branch="main").trigger_payload()
        assert payload == {
            "repo": "org/repo",
            "service": "github",
            "commit_id": "abc123",
            "access_token": "secret-token",
            "include_files": "",
            "exclude_files": "",
            "branch": "main",
            "github_base_url": "https://github.com",
        }

    def test_trigger_payload_uses_override_for_selected_service_only(self) -> None:
        request = _request(service=Service.GITLAB, base_url="https://gitlab.internal")
        payload = request.trigger_payload()
        assert payload["gitlab_base_url"] == "https://gitlab.internal"
        assert "github_base_url" not in payload
        assert "azure_devops_base_url" not in payload

    def test_results_payload_omits_trigger_only_fields(self) -> None:
        payload = _request(service=Service.AZUREDEVOPS, include_files="src/**").results_payload()
        assert payload == {
            "repo": "org/repo",
            "service": "azuredevops",
            "commit_id": "abc123",
            "access_token": "secret-token",
            "azure_devops_base_url": "https://dev.azure.com",
        }


class TestResultKind:
    """Tests for ResultKind properties."""

    def test_endpoints(self) -> None:
        assert ResultKind.SECURITY.endpoint == "/api/analysis/results"
        assert ResultKind.SCA.endpoint == "/api/analysis/results/sca"

    def test_item_fields(self) -> None:
        assert ResultKind.SECURITY.item_field == "issues"
        assert ResultKind.SCA.item_field == "vulnerabilities"


class TestAggregateState:
    """Tests for AggregateState bookkeeping."""

    def test_ready_sets_flag_and_data(self) -> None:
        state = AggregateState()
        state.record(ResultKind.SCA, FetchOutcome.ready({"vulnerabilities": []}))

        assert state.sca_found is True
        assert state.sca_data == {"vulnerabilities": []}
        assert state.security_found is False

    def test_pending_stores_snapshot_without_flag(self) -> None:
        state = AggregateState()
        snapshot = {"status": "pending", "issues": [{"id": 1}]}
        state.record(ResultKind.SECURITY, FetchOutcome.pending(snapshot))

        assert state.security_found is False
        assert state.security_data == snapshot

    def test_not_found_and_error_leave_state_alone(self) -> None:
        state = AggregateState()
        state.record(ResultKind.SECURITY, FetchOutcome.pending({"status": "pending"}))
        state.record(ResultKind.SECURITY, FetchOutcome.not_found())
        state.record(ResultKind.SECURITY, FetchOutcome.error("HTTP 500"))

        assert state.security_data == {"status": "pending"}
        assert state.security_found is False

    def test_data_frozen_once_found(self) -> None:
        state = AggregateState()
        state.record(ResultKind.SECURITY, FetchOutcome.ready({"issues": [1]}))
        state.record(ResultKind.SECURITY, FetchOutcome.ready({"issues": [2]}))
        state.record(ResultKind.SECURITY, FetchOutcome.pending({"status": "pending"}))

        assert state.security_found is True
        assert state.security_data == {"issues": [1]}

    def test_all_and_any_found(self) -> None:
        state = AggregateState()
        assert not state.any_found
        state.record(ResultKind.SECURITY, FetchOutcome.ready([]))
        assert state.any_found and not state.all_found
        state.record(ResultKind.SCA, FetchOutcome.ready([]))
        assert state.all_found


class TestFetchOutcome:
    def test_constructors(self) -> None:
        assert FetchOutcome.ready([1]).state is FetchState.READY
        assert FetchOutcome.pending({}).state is FetchState.PENDING
        assert FetchOutcome.not_found().state is FetchState.NOT_FOUND
        error = FetchOutcome.error("boom")
        assert error.state is FetchState.ERROR
        assert error.message == "boom"


class TestFinalResult:
    """Tests for FinalResult serialization."""

    def test_success_document(self) -> None:
        result = FinalResult(
            repository="org/repo",
            service="github",
            commit_id="abc",
            status=ResultStatus.SUCCESS,
            security_issues=[{"id": 1}],
            sca_vulnerabilities=[{"id": 2}, {"id": 3}],
            security_found=True,
            sca_found=True,
        )
        data = result.to_dict()

        assert data["status"] == "success"
        assert data["security_issues_count"] == 1
        assert data["sca_vulnerabilities_count"] == 2
        assert data["security_found"] is True
        assert "error" not in data

    def test_failed_document(self) -> None:
        result = FinalResult(
            repository="org/repo",
            service="github",
            commit_id="abc",
            status=ResultStatus.FAILED,
            error="nothing",
        )
        assert result.to_dict() == {
            "repository": "org/repo",
            "service": "github",
            "commit_id": "abc",
            "status": "failed",
            "error": "nothing",
            "security_issues": [],
            "sca_vulnerabilities": [],
        }

    def test_triggered_document(self) -> None:
        result = FinalResult(
            repository="org/repo",
            service="gitlab",
            commit_id="abc",
            status=ResultStatus.TRIGGERED,
            message="queued",
            scan_response={"ok": True},
        )
        data = result.to_dict()
        assert data["status"] == "triggered"
        assert data["message"] == "queued"
        assert data["scan_response"] == {"ok": True}
        assert "security_issues" not in data
