"""Poll loop that collects security and SCA results for one scan."""

from __future__ import annotations

import time
from typing import Callable, Optional

from codeant_ci.core.logging import get_logger
from codeant_ci.core.models import (
    RESULT_KINDS,
    AggregateState,
    FetchState,
    PollPhase,
    ScanRequest,
)
from codeant_ci.remote.analysis import AnalysisClient, AuthenticationError

LOGGER = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 30
DEFAULT_TIMEOUT = 300


class ResultPoller:
    """Polls each result kind until all are ready or the deadline passes.

    Kinds are polled independently: once a kind is retrieved it is not
    requested again, while the others keep being polled. Within one
    iteration kinds are fetched sequentially in RESULT_KINDS order.
    """

    def __init__(
        self,
        client: AnalysisClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the poller.

        Args:
            client: Source of fetch outcomes (AnalysisClient.fetch_results).
            poll_interval: Seconds to sleep between iterations.
            timeout: Overall deadline in seconds, measured from poll() start.
            clock: Monotonic time source.
            sleep: Blocking sleep function.
        """
        self._client = client
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._clock = clock
        self._sleep = sleep

    def poll(
        self, request: ScanRequest, state: Optional[AggregateState] = None
    ) -> AggregateState:
        """Run the loop to completion.

        Args:
            request: Scan whose results are collected.
            state: Accumulator to fill; a fresh one is created if omitted.

        Returns:
            Final state, with phase DONE or TIMED_OUT.

        Raises:
            AuthenticationError: On a 401 from any result endpoint; the
                state's phase is set to ABORTED first.
        """
        LOGGER.info("Polling for analysis results")
        LOGGER.info(f"Repository: {request.repo}")
        LOGGER.info(f"Commit: {request.commit_id}")
        LOGGER.info(f"Service: {request.service.value}")
        LOGGER.info(f"Timeout: {self._timeout}s, Poll interval: {self._poll_interval}s")

        if state is None:
            state = AggregateState()
        start_time = self._clock()

        while True:
            state.elapsed_seconds = self._clock() - start_time

            if state.elapsed_seconds >= self._timeout:
                state.phase = PollPhase.TIMED_OUT
                LOGGER.warning(f"Timeout reached ({self._timeout} seconds)")
                if state.any_found:
                    LOGGER.info("Partial results obtained before timeout")
                return state

            state.attempt_count += 1
            LOGGER.info(
                f"Polling attempt #{state.attempt_count} "
                f"({int(state.elapsed_seconds)}s elapsed)..."
            )

            try:
                self._poll_pending_kinds(request, state)
            except AuthenticationError:
                state.phase = PollPhase.ABORTED
                raise

            if state.all_found:
                state.phase = PollPhase.DONE
                LOGGER.info("All analysis results retrieved successfully!")
                return state

            LOGGER.info(f"Waiting {self._poll_interval} seconds before next attempt...")
            self._sleep(self._poll_interval)

    def _poll_pending_kinds(self, request: ScanRequest, state: AggregateState) -> None:
        for kind in RESULT_KINDS:
            if state.is_found(kind):
                continue

            outcome = self._client.fetch_results(request, kind)
            state.record(kind, outcome)

            if outcome.is_ready:
                LOGGER.info(f"{kind.label} analysis results retrieved")
            elif outcome.state is FetchState.PENDING:
                LOGGER.info(f"{kind.label} results pending - saving partial data")
            else:
                LOGGER.info(f"{kind.label} results not ready yet")
