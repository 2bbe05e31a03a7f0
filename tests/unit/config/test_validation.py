"""Tests for configuration validation."""

from __future__ import annotations

import logging

from codeant_ci.config.validation import (
    ValidationSeverity,
    has_errors,
    validate_config,
)


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_config(self) -> None:
        data = {
            "version": 1,
            "access_token": "t",
            "api": {"base_url": "https://api.codeant.ai", "request_timeout": 30},
            "scan": {"poll_interval": 10, "timeout": 120, "results_file": "out.json"},
            "quality_gates": {"poll_interval": 5, "timeout": 60},
            "output": {"format": "summary"},
        }
        assert validate_config(data, "test.yml") == []

    def test_non_mapping(self) -> None:
        issues = validate_config(["a"], "test.yml")  # type: ignore[arg-type]
        assert has_errors(issues)

    def test_unknown_top_level_key_warns_with_suggestion(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            issues = validate_config({"sacn": {}}, "test.yml")

        assert len(issues) == 1
        assert issues[0].severity == ValidationSeverity.WARNING
        assert issues[0].suggestion == "scan"
        assert not has_errors(issues)
        assert "did you mean 'scan'" in caplog.text

    def test_unknown_section_key(self) -> None:
        issues = validate_config({"scan": {"pol_interval": 10}}, "test.yml")
        assert issues[0].key == "scan.pol_interval"
        assert issues[0].suggestion == "poll_interval"

    def test_section_must_be_mapping(self) -> None:
        issues = validate_config({"scan": "fast"}, "test.yml")
        assert has_errors(issues)
        assert issues[0].key == "scan"

    def test_bad_values(self) -> None:
        data = {
            "access_token": 123,
            "api": {"base_url": "api.codeant.ai", "request_timeout": 0},
            "scan": {"poll_interval": True, "timeout": "300", "results_file": ""},
            "output": {"format": "xml"},
        }
        issues = validate_config(data, "test.yml")
        keys = {issue.key for issue in issues}

        assert all(issue.severity == ValidationSeverity.ERROR for issue in issues)
        assert keys == {
            "access_token",
            "api.base_url",
            "api.request_timeout",
            "scan.poll_interval",
            "scan.timeout",
            "scan.results_file",
            "output.format",
        }
