"""Quality-gate verdict evaluation and polling."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from codeant_ci.core.http import TransportError
from codeant_ci.core.logging import get_logger
from codeant_ci.remote.quality_gates import QualityGateClient, QualityGateRequest

LOGGER = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 15
DEFAULT_TIMEOUT = 300

# Sub-gates whose FAILED status fails the whole gate.
GATE_SECTIONS = ("secret_quality_gate", "duplicate_quality_gate")


class GateVerdict(str, Enum):
    """Interpretation of one quality-gate results body."""

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    PENDING = "pending"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (GateVerdict.PASSED, GateVerdict.FAILED, GateVerdict.ERROR)


VERDICT_MESSAGES = {
    GateVerdict.PASSED: "Quality gate PASSED",
    GateVerdict.FAILED: "Quality gate FAILED",
    GateVerdict.ERROR: "Quality gate scan encountered an error",
}


def evaluate_quality_gate(body: Any) -> GateVerdict:
    """Map a results body to a verdict.

    A COMPLETED scan fails if any sub-gate in GATE_SECTIONS reports FAILED.
    """
    if not isinstance(body, dict):
        return GateVerdict.UNKNOWN

    status = body.get("status", "")
    if status == "COMPLETED":
        for section in GATE_SECTIONS:
            gate = body.get(section)
            if isinstance(gate, dict) and gate.get("status") == "FAILED":
                return GateVerdict.FAILED
        return GateVerdict.PASSED
    if status == "ERROR":
        return GateVerdict.ERROR
    if status == "PENDING":
        return GateVerdict.PENDING
    return GateVerdict.UNKNOWN


@dataclass
class QualityGateOutcome:
    """Terminal result of polling a quality gate."""

    passed: bool
    message: str
    verdict: Optional[GateVerdict] = None
    body: Any = None
    attempts: int = 0


class QualityGatePoller:
    """Polls the quality-gate results endpoint until a verdict is reached.

    404 means "not published yet". Any other error status, or a transport
    failure, ends polling immediately.
    """

    def __init__(
        self,
        client: QualityGateClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._clock = clock
        self._sleep = sleep

    def poll(self, request: QualityGateRequest) -> QualityGateOutcome:
        LOGGER.info(
            f"Polling for quality gate scan results "
            f"(timeout: {self._timeout}s, interval: {self._poll_interval}s)"
        )

        start_time = self._clock()
        attempts = 0
        last_body: Any = None

        while True:
            elapsed = self._clock() - start_time
            if elapsed >= self._timeout:
                return QualityGateOutcome(
                    passed=False,
                    message=f"Timeout reached ({self._timeout} seconds). Results not available yet.",
                    body=last_body,
                    attempts=attempts,
                )

            attempts += 1
            LOGGER.info(f"Checking results (attempt {attempts})...")

            try:
                response = self._client.fetch_results(request)
            except TransportError as e:
                return QualityGateOutcome(
                    passed=False,
                    message=f"Failed to get results: {e}",
                    attempts=attempts,
                )

            if response.ok:
                try:
                    last_body = response.json()
                except ValueError:
                    last_body = None
                verdict = evaluate_quality_gate(last_body)

                if verdict.is_terminal:
                    return QualityGateOutcome(
                        passed=verdict is GateVerdict.PASSED,
                        message=VERDICT_MESSAGES[verdict],
                        verdict=verdict,
                        body=last_body,
                        attempts=attempts,
                    )
                if verdict is GateVerdict.PENDING:
                    LOGGER.info("Scan still in progress...")
                else:
                    status = last_body.get("status", "") if isinstance(last_body, dict) else ""
                    LOGGER.info(f"Unknown status: {status}")
            elif response.status_code != 404:
                return QualityGateOutcome(
                    passed=False,
                    message=f"Failed to get results (HTTP {response.status_code}): {response.body}",
                    attempts=attempts,
                )

            LOGGER.info(f"Results not ready yet, waiting {self._poll_interval} seconds...")
            self._sleep(self._poll_interval)
