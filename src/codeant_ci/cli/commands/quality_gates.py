"""Quality-gates command implementation."""

from __future__ import annotations

import json
import time
from argparse import Namespace
from typing import Callable, Optional

from codeant_ci.cli.commands import Command
from codeant_ci.cli.exit_codes import EXIT_FAILURE, EXIT_SUCCESS
from codeant_ci.config.models import CodeAntConfig
from codeant_ci.core.http import HttpClient, TransportError
from codeant_ci.core.logging import get_logger
from codeant_ci.core.models import ValidationError
from codeant_ci.core.quality_gates import QualityGatePoller
from codeant_ci.remote.quality_gates import QualityGateClient, QualityGateRequest

LOGGER = get_logger(__name__)


class QualityGatesCommand(Command):
    """Starts a quality gate scan, or waits for its verdict."""

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._http = http
        self._clock = clock
        self._sleep = sleep

    @property
    def name(self) -> str:
        return "quality-gates"

    def execute(self, args: Namespace, config: CodeAntConfig) -> int:
        """Execute the quality-gates command.

        Returns:
            0 when the scan started (start) or the gate passed (results),
            1 otherwise.
        """
        try:
            request = QualityGateRequest(
                repo=args.repo,
                commit_id=args.commit_id,
                access_token=config.access_token or "",
                service=args.service,
                base_url=args.base_url,
            )
        except ValidationError as e:
            LOGGER.error(str(e))
            return EXIT_FAILURE

        http = self._http or HttpClient(timeout=config.api.request_timeout)
        client = QualityGateClient(config.api.base_url, http=http)

        if args.operation == "start":
            return self._start(client, request)

        poller = QualityGatePoller(
            client,
            poll_interval=config.quality_gates.poll_interval,
            timeout=config.quality_gates.timeout,
            clock=self._clock,
            sleep=self._sleep,
        )
        outcome = poller.poll(request)

        if outcome.body is not None:
            print(json.dumps(outcome.body, indent=2))

        if outcome.passed:
            LOGGER.info(outcome.message)
            return EXIT_SUCCESS
        LOGGER.error(outcome.message)
        return EXIT_FAILURE

    def _start(self, client: QualityGateClient, request: QualityGateRequest) -> int:
        LOGGER.info(f"Starting quality gate scan for {request.repo}@{request.commit_id}")

        try:
            response = client.start(request)
        except TransportError as e:
            LOGGER.error(f"Quality gate scan failed: {e}")
            return EXIT_FAILURE

        if not response.ok:
            LOGGER.error(
                f"Quality gate scan failed (HTTP {response.status_code}): {response.body}"
            )
            return EXIT_FAILURE

        print(response.body)

        LOGGER.info("Quality gate scan started successfully")
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("scan_id"):
            LOGGER.info(f"Scan ID: {data['scan_id']}")

        return EXIT_SUCCESS
