"""Client for the CI quality-gate endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from codeant_ci.core.http import HttpClient, HttpResponse
from codeant_ci.core.models import Service, ValidationError
from codeant_ci.remote.analysis import DEFAULT_API_BASE_URL

START_PATH = "/analysis/ci/quality-gates/scan/start"
RESULTS_PATH = "/analysis/ci/quality-gates/scan/results"


@dataclass(frozen=True)
class QualityGateRequest:
    """Identifies a quality-gate scan. Authenticated with a bearer token."""

    repo: str
    commit_id: str
    access_token: str = field(repr=False)
    service: Service = Service.GITHUB
    base_url: str = ""

    def __post_init__(self) -> None:
        if not self.access_token:
            raise ValidationError("ACCESS_TOKEN is required (use -a).")
        if not self.repo:
            raise ValidationError("REPO is required (use -r).")
        if not self.commit_id:
            raise ValidationError("COMMIT_ID is required (use -c).")
        if not isinstance(self.service, Service):
            object.__setattr__(self, "service", Service.parse(str(self.service)))

    def payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "repo": self.repo,
            "service": self.service.value,
            "commit_id": self.commit_id,
        }
        if self.base_url:
            payload["base_url"] = self.base_url
        return payload

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


class QualityGateClient:
    """Starts quality-gate scans and fetches their verdicts.

    Both calls return the raw HttpResponse; interpretation of status codes
    and bodies belongs to the caller.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        http: Optional[HttpClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http or HttpClient()

    @property
    def start_url(self) -> str:
        return f"{self._base_url}{START_PATH}"

    @property
    def results_url(self) -> str:
        return f"{self._base_url}{RESULTS_PATH}"

    def start(self, request: QualityGateRequest) -> HttpResponse:
        """Start a quality-gate scan.

        Raises:
            TransportError: If the API could not be reached.
        """
        return self._http.post_json(self.start_url, request.payload(), headers=request.headers())

    def fetch_results(self, request: QualityGateRequest) -> HttpResponse:
        """Fetch the current quality-gate results.

        Raises:
            TransportError: If the API could not be reached.
        """
        return self._http.post_json(self.results_url, request.payload(), headers=request.headers())
