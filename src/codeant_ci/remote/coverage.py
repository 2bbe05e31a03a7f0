"""Coverage report upload: presign, PUT, complete.

Each failure mode has its own exception type carrying the process exit
code CI pipelines branch on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from codeant_ci.cli.exit_codes import (
    EXIT_BAD_PRESIGN,
    EXIT_COMPLETION_FAILED,
    EXIT_FAILURE,
    EXIT_MISSING_FILE,
)
from codeant_ci.core.http import HttpClient, TransportError
from codeant_ci.core.logging import get_logger
from codeant_ci.core.models import Service, ValidationError
from codeant_ci.remote.analysis import DEFAULT_API_BASE_URL

LOGGER = get_logger(__name__)

COVERAGE_PATH = "/pr/analysis/coverage"
COVERAGE_CONTENT_TYPE = "application/xml"


class CoverageError(Exception):
    """Base class for coverage upload failures."""

    exit_code = EXIT_FAILURE


class CoverageFileMissing(CoverageError):
    exit_code = EXIT_MISSING_FILE


class PresignError(CoverageError):
    """Presign response was unusable (not JSON, or no coverage_url)."""

    exit_code = EXIT_BAD_PRESIGN


class UploadError(CoverageError):
    exit_code = EXIT_FAILURE


class CompletionError(CoverageError):
    """The completion call returned HTTP >= 400."""

    exit_code = EXIT_COMPLETION_FAILED


@dataclass(frozen=True)
class CoverageUploadRequest:
    """Identifies the commit a coverage report belongs to."""

    repo: str
    commit_id: str
    access_token: str = field(repr=False)
    platform: Service = Service.GITHUB
    coverage_file: Path = Path("coverage.xml")
    module: str = ""
    branch: str = ""
    vcs_base_url: str = ""

    def __post_init__(self) -> None:
        if not (self.access_token and self.repo and self.commit_id):
            raise ValidationError("access token, repo and commit ID are required")
        if not isinstance(self.platform, Service):
            object.__setattr__(self, "platform", Service.parse(str(self.platform)))
        object.__setattr__(self, "coverage_file", Path(self.coverage_file))

    def payload(self) -> Dict[str, Any]:
        """Body shared by the presign and complete calls."""
        payload: Dict[str, Any] = {
            "repo": self.repo,
            "commit_id": self.commit_id,
            "access_token": self.access_token,
            "platform": self.platform.value,
        }
        if self.module:
            payload["module"] = self.module
        if self.branch:
            payload["branch"] = self.branch
        if self.vcs_base_url:
            payload["vcs_base_url"] = self.vcs_base_url
        return payload


@dataclass
class CoverageUploadResult:
    coverage_url: str
    status_code: int
    response_body: str


class CoverageUploader:
    """Runs the three-step coverage upload protocol."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        http: Optional[HttpClient] = None,
    ) -> None:
        self._coverage_base = f"{base_url.rstrip('/')}{COVERAGE_PATH}"
        self._http = http or HttpClient()

    @property
    def presign_url(self) -> str:
        return f"{self._coverage_base}/presign"

    @property
    def complete_url(self) -> str:
        return f"{self._coverage_base}/complete"

    def upload(self, request: CoverageUploadRequest) -> CoverageUploadResult:
        """Upload a coverage report and notify the service.

        Args:
            request: Report location and commit identifiers.

        Returns:
            CoverageUploadResult describing the completion call.

        Raises:
            CoverageFileMissing: The report file does not exist.
            PresignError: No usable presigned URL was returned.
            UploadError: The PUT failed, or the API was unreachable.
            CompletionError: The completion call returned HTTP >= 400.
        """
        if not request.coverage_file.is_file():
            raise CoverageFileMissing(f"coverage file not found: {request.coverage_file}")

        coverage_url = self._presign(request)

        LOGGER.info(f"Uploading {request.coverage_file.name}...")
        try:
            response = self._http.put_file(
                coverage_url, request.coverage_file, COVERAGE_CONTENT_TYPE
            )
        except TransportError as e:
            raise UploadError(f"Upload failed: {e}") from e
        if not response.ok:
            raise UploadError(f"Upload failed with HTTP {response.status_code}: {response.body}")

        LOGGER.info("Notifying service to set status/comment...")
        try:
            response = self._http.post_json(self.complete_url, request.payload())
        except TransportError as e:
            raise UploadError(f"Completion request failed: {e}") from e

        LOGGER.info(f"Result: {response.body}")
        if response.status_code >= 400:
            raise CompletionError(
                f"Request failed with HTTP {response.status_code}\nResponse: {response.body}"
            )

        return CoverageUploadResult(
            coverage_url=coverage_url,
            status_code=response.status_code,
            response_body=response.body,
        )

    def _presign(self, request: CoverageUploadRequest) -> str:
        LOGGER.info("Requesting presigned URLs...")
        try:
            response = self._http.post_json(self.presign_url, request.payload())
        except TransportError as e:
            raise UploadError(f"Presign request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        coverage_url = data.get("coverage_url") if isinstance(data, dict) else None
        if not coverage_url or not isinstance(coverage_url, str):
            raise PresignError(f"no coverage_url in presign response\n{response.body}")

        LOGGER.info("Presigned URLs received.")
        return coverage_url
