"""Client for the CodeAnt analysis API.

Wraps the start-scan endpoint and the per-kind result endpoints. Every
remote failure except an authentication failure is turned into a value
(ScanTriggerResult or FetchOutcome) rather than an exception.
"""

from __future__ import annotations

from typing import Optional

from codeant_ci.core.http import HttpClient, TransportError
from codeant_ci.core.logging import get_logger
from codeant_ci.core.models import (
    FetchOutcome,
    ResultKind,
    ScanRequest,
    ScanTriggerResult,
)

LOGGER = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://api.codeant.ai"

START_SCAN_PATH = "/api/analysis/start"

# Statuses meaning "results not published yet".
NOT_READY_STATUS_CODES = frozenset({204, 404})


class AuthenticationError(Exception):
    """The API rejected the access token (HTTP 401)."""

    pass


class AnalysisClient:
    """Triggers analysis scans and fetches their results."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        http: Optional[HttpClient] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, without trailing slash.
            http: HTTP adapter; a default HttpClient is created if omitted.
        """
        self._base_url = base_url.rstrip("/")
        self._http = http or HttpClient()

    @property
    def start_scan_url(self) -> str:
        return f"{self._base_url}{START_SCAN_PATH}"

    def results_url(self, kind: ResultKind) -> str:
        return f"{self._base_url}{kind.endpoint}"

    def start_scan(self, request: ScanRequest) -> ScanTriggerResult:
        """Start an analysis scan.

        Args:
            request: What to scan.

        Returns:
            ScanTriggerResult; success carries the parsed response body.
        """
        try:
            response = self._http.post_json(self.start_scan_url, request.trigger_payload())
        except TransportError as e:
            return ScanTriggerResult(success=False, error=f"Request failed: {e}")

        if not response.ok:
            return ScanTriggerResult(
                success=False,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}: {response.body}",
            )

        try:
            data = response.json()
        except ValueError as e:
            return ScanTriggerResult(
                success=False,
                status_code=response.status_code,
                error=f"Invalid JSON in response: {e}",
            )

        return ScanTriggerResult(success=True, data=data, status_code=response.status_code)

    def fetch_results(self, request: ScanRequest, kind: ResultKind) -> FetchOutcome:
        """Fetch one kind of analysis results.

        Args:
            request: Which scan to fetch results for.
            kind: Security or SCA results.

        Returns:
            FetchOutcome classifying the response.

        Raises:
            AuthenticationError: On HTTP 401.
        """
        try:
            response = self._http.post_json(self.results_url(kind), request.results_payload())
        except TransportError as e:
            LOGGER.warning(f"Error fetching {kind.label} results: {e}")
            return FetchOutcome.error(str(e))

        if response.status_code == 401:
            raise AuthenticationError("Authentication failed. Please check your access token.")

        if response.status_code in NOT_READY_STATUS_CODES:
            return FetchOutcome.not_found()

        if not response.ok:
            LOGGER.warning(f"Error fetching {kind.label} results: HTTP {response.status_code}")
            return FetchOutcome.error(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            LOGGER.warning(f"Error fetching {kind.label} results: invalid JSON ({e})")
            return FetchOutcome.error(f"invalid JSON: {e}")

        if isinstance(data, dict) and data.get("status") == "pending":
            return FetchOutcome.pending(data)
        return FetchOutcome.ready(data)
