"""Scan command implementation."""

from __future__ import annotations

import sys
import time
from argparse import Namespace
from pathlib import Path
from typing import Callable, Optional

from codeant_ci.cli.commands import Command
from codeant_ci.cli.exit_codes import EXIT_FAILURE
from codeant_ci.config.models import CodeAntConfig
from codeant_ci.core.formatter import (
    build_final_result,
    build_triggered_result,
    exit_code_for,
    write_results,
)
from codeant_ci.core.http import HttpClient
from codeant_ci.core.logging import get_logger
from codeant_ci.core.models import FinalResult, ResultStatus, ScanRequest, ValidationError
from codeant_ci.core.poller import ResultPoller
from codeant_ci.remote.analysis import AnalysisClient, AuthenticationError
from codeant_ci.reporters import Reporter, get_reporter

LOGGER = get_logger(__name__)


class ScanCommand(Command):
    """Triggers an analysis scan and collects security and SCA results."""

    def __init__(
        self,
        version: str,
        http: Optional[HttpClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize ScanCommand.

        Args:
            version: Current codeant-ci version string.
            http: HTTP adapter; built from config when omitted.
            clock: Time source for the poll deadline.
            sleep: Sleep function used between poll attempts.
        """
        self._version = version
        self._http = http
        self._clock = clock
        self._sleep = sleep

    @property
    def name(self) -> str:
        return "scan"

    def execute(self, args: Namespace, config: CodeAntConfig) -> int:
        """Execute the scan command.

        Args:
            args: Parsed command-line arguments.
            config: Effective configuration.

        Returns:
            0 for success, partial or triggered; 1 otherwise.
        """
        LOGGER.debug(f"codeant-ci {self._version} scan of {args.repo}@{args.commit_id}")

        try:
            request = ScanRequest(
                repo=args.repo,
                service=args.service,
                commit_id=args.commit_id,
                access_token=config.access_token or "",
                branch=args.branch,
                include_files=args.include_files,
                exclude_files=args.exclude_files,
                base_url=args.base_url,
            )
        except ValidationError as e:
            LOGGER.error(f"Error: {e}")
            return EXIT_FAILURE

        reporter = get_reporter(config.output.format)
        if reporter is None:
            LOGGER.error(f"Unknown output format '{config.output.format}'")
            return EXIT_FAILURE

        http = self._http or HttpClient(timeout=config.api.request_timeout)
        client = AnalysisClient(config.api.base_url, http=http)

        LOGGER.info("Starting analysis scan...")
        trigger = client.start_scan(request)
        if not trigger.success:
            LOGGER.error(f"Failed to start analysis scan: {trigger.error}")
            return EXIT_FAILURE
        LOGGER.info("Analysis scan started successfully")

        if args.no_wait:
            LOGGER.info("Scan triggered successfully (--no-wait flag set)")
            LOGGER.info("Skipping result polling as requested")
            result = build_triggered_result(request, trigger)
        else:
            poller = ResultPoller(
                client,
                poll_interval=config.scan.poll_interval,
                timeout=config.scan.timeout,
                clock=self._clock,
                sleep=self._sleep,
            )
            try:
                state = poller.poll(request)
            except AuthenticationError as e:
                LOGGER.error(str(e))
                return EXIT_FAILURE
            result = build_final_result(request, state)

        return self._finish(result, reporter, Path(config.scan.results_file))

    def _finish(self, result: FinalResult, reporter: Reporter, results_path: Path) -> int:
        if result.status is ResultStatus.FAILED:
            LOGGER.error(f"Failed to get results: {result.error}")
        elif result.status is not ResultStatus.TRIGGERED:
            LOGGER.info(
                f"Status: {result.status.value}, "
                f"security issues: {result.security_issues_count}, "
                f"SCA vulnerabilities: {result.sca_vulnerabilities_count}"
            )

        reporter.report(result, sys.stdout)

        try:
            write_results(result, results_path)
        except OSError as e:
            LOGGER.error(f"Could not write results to {results_path}: {e}")
            return EXIT_FAILURE

        return exit_code_for(result.status)
