from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ValidationError(ValueError):
    """Invalid or missing user input, detected before any network call."""

    pass


class Service(str, Enum):
    """VCS providers understood by the analysis API."""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    AZUREDEVOPS = "azuredevops"

    @property
    def base_url_key(self) -> str:
        """Payload key carrying this provider's base URL."""
        return _SERVICE_BASE_URL_KEYS[self]

    @property
    def default_base_url(self) -> str:
        return _SERVICE_DEFAULT_BASE_URLS[self]

    @classmethod
    def parse(cls, value: str) -> "Service":
        """Look up a service by name, raising ValidationError if unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValidationError(
                f"Unknown service '{value}' (expected one of: {choices})"
            ) from None


_SERVICE_BASE_URL_KEYS = {
    Service.GITHUB: "github_base_url",
    Service.GITLAB: "gitlab_base_url",
    Service.BITBUCKET: "bitbucket_base_url",
    Service.AZUREDEVOPS: "azure_devops_base_url",
}

_SERVICE_DEFAULT_BASE_URLS = {
    Service.GITHUB: "https://github.com",
    Service.GITLAB: "https://gitlab.com",
    Service.BITBUCKET: "https://bitbucket.org",
    Service.AZUREDEVOPS: "https://dev.azure.com",
}


class ResultKind(str, Enum):
    """Independently polled kinds of analysis results."""

    SECURITY = "security"
    SCA = "sca"

    @property
    def endpoint(self) -> str:
        """Path of the results endpoint, relative to the API base URL."""
        if self is ResultKind.SECURITY:
            return "/api/analysis/results"
        return "/api/analysis/results/sca"

    @property
    def item_field(self) -> str:
        """Response field holding this kind's list of findings."""
        if self is ResultKind.SECURITY:
            return "issues"
        return "vulnerabilities"

    @property
    def label(self) -> str:
        if self is ResultKind.SECURITY:
            return "Security"
        return "SCA"


# Polling order within one iteration.
RESULT_KINDS = (ResultKind.SECURITY, ResultKind.SCA)


@dataclass(frozen=True)
class ScanRequest:
    """Identifies one remote analysis: repository, commit and provider.

    The access token is excluded from repr so requests can be logged safely.
    """

    repo: str
    service: Service
    commit_id: str
    access_token: str = field(repr=False)
    branch: str = ""
    include_files: str = ""
    exclude_files: str = ""
    base_url: str = ""

    def __post_init__(self) -> None:
        if not self.access_token:
            raise ValidationError("access token is required (-a)")
        if not self.repo:
            raise ValidationError("repository name is required (-r)")
        if not self.commit_id:
            raise ValidationError("commit ID is required (-c)")
        if not isinstance(self.service, Service):
            object.__setattr__(self, "service", Service.parse(str(self.service)))

    @property
    def service_base_url(self) -> str:
        """VCS base URL sent to the API: the override, else the default."""
        return self.base_url or self.service.default_base_url

    def trigger_payload(self) -> Dict[str, Any]:
        """Body of the start-scan request."""
        payload: Dict[str, Any] = {
            "repo": self.repo,
            "service": self.service.value,
            "commit_id": self.commit_id,
            "access_token": self.access_token,
            "include_files": self.include_files,
            "exclude_files": self.exclude_files,
            "branch": self.branch,
        }
        payload[self.service.base_url_key] = self.service_base_url
        return payload

    def results_payload(self) -> Dict[str, Any]:
        """Body of the result-fetch requests."""
        payload: Dict[str, Any] = {
            "repo": self.repo,
            "service": self.service.value,
            "commit_id": self.commit_id,
            "access_token": self.access_token,
        }
        payload[self.service.base_url_key] = self.service_base_url
        return payload


@dataclass
class ScanTriggerResult:
    """Outcome of a single start-scan call."""

    success: bool
    data: Any = None
    status_code: int = 0
    error: Optional[str] = None


class FetchState(str, Enum):
    READY = "ready"
    PENDING = "pending"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class FetchOutcome:
    """Classification of one result-fetch attempt.

    ``data`` holds the response body for READY, and the latest snapshot for
    PENDING. ``message`` is only set for ERROR.
    """

    state: FetchState
    data: Any = None
    message: str = ""

    @classmethod
    def ready(cls, data: Any) -> "FetchOutcome":
        return cls(FetchState.READY, data=data)

    @classmethod
    def pending(cls, snapshot: Any) -> "FetchOutcome":
        return cls(FetchState.PENDING, data=snapshot)

    @classmethod
    def not_found(cls) -> "FetchOutcome":
        return cls(FetchState.NOT_FOUND)

    @classmethod
    def error(cls, message: str) -> "FetchOutcome":
        return cls(FetchState.ERROR, message=message)

    @property
    def is_ready(self) -> bool:
        return self.state is FetchState.READY


class PollPhase(str, Enum):
    POLLING = "polling"
    DONE = "done"
    TIMED_OUT = "timed_out"
    ABORTED = "aborted"


@dataclass
class AggregateState:
    """Accumulator threaded through the poll loop.

    Found-flags only ever go from False to True, and a kind's data is frozen
    once its flag is set.
    """

    security_found: bool = False
    security_data: Any = None
    sca_found: bool = False
    sca_data: Any = None
    attempt_count: int = 0
    elapsed_seconds: float = 0.0
    phase: PollPhase = PollPhase.POLLING

    def is_found(self, kind: ResultKind) -> bool:
        return bool(getattr(self, f"{kind.value}_found"))

    def data_for(self, kind: ResultKind) -> Any:
        return getattr(self, f"{kind.value}_data")

    def record(self, kind: ResultKind, outcome: FetchOutcome) -> None:
        """Fold one fetch outcome into the state.

        READY sets the found-flag and stores the body, PENDING only refreshes
        the snapshot. Anything recorded for an already-found kind is ignored.
        """
        if self.is_found(kind):
            return
        if outcome.state is FetchState.READY:
            setattr(self, f"{kind.value}_data", outcome.data)
            setattr(self, f"{kind.value}_found", True)
        elif outcome.state is FetchState.PENDING:
            setattr(self, f"{kind.value}_data", outcome.data)

    @property
    def all_found(self) -> bool:
        return all(self.is_found(kind) for kind in RESULT_KINDS)

    @property
    def any_found(self) -> bool:
        return any(self.is_found(kind) for kind in RESULT_KINDS)


class ResultStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    TRIGGERED = "triggered"


@dataclass
class FinalResult:
    """Summary of one run, written to the results file."""

    repository: str
    service: str
    commit_id: str
    status: ResultStatus
    security_issues: List[Any] = field(default_factory=list)
    sca_vulnerabilities: List[Any] = field(default_factory=list)
    security_found: bool = False
    sca_found: bool = False
    error: Optional[str] = None
    message: Optional[str] = None
    scan_response: Any = None

    @property
    def security_issues_count(self) -> int:
        return len(self.security_issues)

    @property
    def sca_vulnerabilities_count(self) -> int:
        return len(self.sca_vulnerabilities)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON document shape consumed by CI automation."""
        data: Dict[str, Any] = {
            "repository": self.repository,
            "service": self.service,
            "commit_id": self.commit_id,
            "status": self.status.value,
        }
        if self.status is ResultStatus.TRIGGERED:
            data["message"] = self.message
            data["scan_response"] = self.scan_response
        elif self.status is ResultStatus.FAILED:
            data["error"] = self.error
            data["security_issues"] = self.security_issues
            data["sca_vulnerabilities"] = self.sca_vulnerabilities
        else:
            data["security_issues_count"] = self.security_issues_count
            data["sca_vulnerabilities_count"] = self.sca_vulnerabilities_count
            data["security_issues"] = self.security_issues
            data["sca_vulnerabilities"] = self.sca_vulnerabilities
            data["security_found"] = self.security_found
            data["sca_found"] = self.sca_found
        return data
