"""Configuration validation for codeant-ci.

Unknown keys produce warnings (with a did-you-mean suggestion); values of
the wrong type or out of range produce errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from codeant_ci.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config cannot be used
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


VALID_TOP_LEVEL_KEYS: Set[str] = {
    "version",
    "access_token",
    "api",
    "scan",
    "quality_gates",
    "output",
}

# Valid keys per section, mapped to the check applied to their values
SECTION_KEYS: Dict[str, Dict[str, str]] = {
    "api": {
        "base_url": "url",
        "request_timeout": "positive_number",
    },
    "scan": {
        "poll_interval": "positive_int",
        "timeout": "positive_int",
        "results_file": "string",
    },
    "quality_gates": {
        "poll_interval": "positive_int",
        "timeout": "positive_int",
    },
    "output": {
        "format": "output_format",
    },
}

VALID_OUTPUT_FORMATS: Set[str] = {"json", "summary"}


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a configuration dictionary.

    Args:
        data: Config dictionary to validate.
        source: Source file path for messages.

    Returns:
        List of issues; warnings are also logged.
    """
    issues: List[ConfigValidationIssue] = []

    if not isinstance(data, dict):
        issues.append(ConfigValidationIssue(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return issues

    for key in data.keys():
        if key not in VALID_TOP_LEVEL_KEYS:
            _warn_unknown(issues, f"Unknown top-level key '{key}'", source, key,
                          _suggest_key(key, VALID_TOP_LEVEL_KEYS))

    token = data.get("access_token")
    if token is not None and not isinstance(token, str):
        issues.append(ConfigValidationIssue(
            message=f"'access_token' must be a string, got {type(token).__name__}",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="access_token",
        ))

    for section, valid_keys in SECTION_KEYS.items():
        section_data = data.get(section)
        if section_data is None:
            continue
        if not isinstance(section_data, dict):
            issues.append(ConfigValidationIssue(
                message=f"'{section}' must be a mapping, got {type(section_data).__name__}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=section,
            ))
            continue

        for key, value in section_data.items():
            dotted = f"{section}.{key}"
            check = valid_keys.get(key)
            if check is None:
                _warn_unknown(issues, f"Unknown key '{dotted}'", source, dotted,
                              _suggest_key(key, set(valid_keys)))
                continue
            problem = _check_value(check, value)
            if problem:
                issues.append(ConfigValidationIssue(
                    message=f"'{dotted}' {problem}",
                    source=source,
                    severity=ValidationSeverity.ERROR,
                    key=dotted,
                ))

    return issues


def has_errors(issues: List[ConfigValidationIssue]) -> bool:
    return any(issue.severity == ValidationSeverity.ERROR for issue in issues)


def _check_value(check: str, value: Any) -> Optional[str]:
    """Return a description of what is wrong with ``value``, or None."""
    if check == "string":
        if not isinstance(value, str) or not value:
            return "must be a non-empty string"
    elif check == "url":
        if not isinstance(value, str) or not value.startswith(("https://", "http://")):
            return "must be an http(s) URL"
    elif check == "positive_int":
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            return f"must be a positive integer, got {value!r}"
    elif check == "positive_number":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            return f"must be a positive number, got {value!r}"
    elif check == "output_format":
        if value not in VALID_OUTPUT_FORMATS:
            return f"must be one of: {', '.join(sorted(VALID_OUTPUT_FORMATS))}"
    return None


def _warn_unknown(
    issues: List[ConfigValidationIssue],
    message: str,
    source: str,
    key: str,
    suggestion: Optional[str],
) -> None:
    issue = ConfigValidationIssue(
        message=message,
        source=source,
        severity=ValidationSeverity.WARNING,
        key=key,
        suggestion=suggestion,
    )
    issues.append(issue)
    _log_warning(issue)


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(issue: ConfigValidationIssue) -> None:
    msg = f"{issue.message} in {issue.source}"
    if issue.suggestion:
        msg += f" (did you mean '{issue.suggestion}'?)"
    LOGGER.warning(msg)
