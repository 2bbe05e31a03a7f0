"""Coverage command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import Optional

from codeant_ci.cli.commands import Command
from codeant_ci.cli.exit_codes import EXIT_FAILURE, EXIT_SUCCESS
from codeant_ci.config.models import CodeAntConfig
from codeant_ci.core.http import HttpClient
from codeant_ci.core.logging import get_logger
from codeant_ci.core.models import ValidationError
from codeant_ci.remote.coverage import CoverageError, CoverageUploader, CoverageUploadRequest

LOGGER = get_logger(__name__)


class CoverageCommand(Command):
    """Uploads a coverage report for a commit."""

    def __init__(self, http: Optional[HttpClient] = None):
        self._http = http

    @property
    def name(self) -> str:
        return "coverage"

    def execute(self, args: Namespace, config: CodeAntConfig) -> int:
        """Execute the coverage command.

        Returns:
            0 on success, otherwise the failing step's exit code
            (2 missing file, 3 bad presign response, 4 completion error).
        """
        try:
            request = CoverageUploadRequest(
                repo=args.repo,
                commit_id=args.commit_id,
                access_token=config.access_token or "",
                platform=args.platform,
                coverage_file=args.coverage_file,
                module=args.module,
                branch=args.branch,
                vcs_base_url=args.vcs_base_url,
            )
        except ValidationError as e:
            LOGGER.error(str(e))
            return EXIT_FAILURE

        http = self._http or HttpClient(timeout=config.api.request_timeout)
        uploader = CoverageUploader(config.api.base_url, http=http)

        try:
            result = uploader.upload(request)
        except CoverageError as e:
            LOGGER.error(f"Error: {e}")
            return e.exit_code

        LOGGER.info(f"Coverage report uploaded (HTTP {result.status_code}).")
        return EXIT_SUCCESS
