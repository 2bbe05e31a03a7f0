"""Build, persist and grade the final result of a scan run."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path

from codeant_ci.cli.exit_codes import EXIT_FAILURE, EXIT_SUCCESS
from codeant_ci.core.extraction import extract_items
from codeant_ci.core.logging import get_logger
from codeant_ci.core.models import (
    AggregateState,
    FinalResult,
    ResultKind,
    ResultStatus,
    ScanRequest,
    ScanTriggerResult,
)

LOGGER = get_logger(__name__)

DEFAULT_RESULTS_FILE = "results.json"

NO_RESULTS_ERROR = "No results were available within the timeout period"
TRIGGERED_MESSAGE = "Scan triggered successfully. Results will be available later."


def build_final_result(request: ScanRequest, state: AggregateState) -> FinalResult:
    """Turn the poll loop's accumulated state into a FinalResult.

    Args:
        request: The scan that was polled.
        state: Final poll state.

    Returns:
        FinalResult with status success (both kinds found), partial (one
        found) or failed (none found).
    """
    if not state.any_found:
        return FinalResult(
            repository=request.repo,
            service=request.service.value,
            commit_id=request.commit_id,
            status=ResultStatus.FAILED,
            error=NO_RESULTS_ERROR,
        )

    status = ResultStatus.SUCCESS if state.all_found else ResultStatus.PARTIAL
    return FinalResult(
        repository=request.repo,
        service=request.service.value,
        commit_id=request.commit_id,
        status=status,
        security_issues=extract_items(
            state.data_for(ResultKind.SECURITY), ResultKind.SECURITY.item_field
        ),
        sca_vulnerabilities=extract_items(
            state.data_for(ResultKind.SCA), ResultKind.SCA.item_field
        ),
        security_found=state.security_found,
        sca_found=state.sca_found,
    )


def build_triggered_result(request: ScanRequest, trigger: ScanTriggerResult) -> FinalResult:
    """Result for --no-wait runs, where only the trigger call was made."""
    return FinalResult(
        repository=request.repo,
        service=request.service.value,
        commit_id=request.commit_id,
        status=ResultStatus.TRIGGERED,
        message=TRIGGERED_MESSAGE,
        scan_response=trigger.data,
    )


def write_results(result: FinalResult, path: Path) -> None:
    """Write the result as JSON, replacing ``path`` atomically.

    The document is written to a temporary file next to ``path`` and then
    renamed over it, so readers never observe a half-written file.
    """
    path = Path(path)
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(directory)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
            f.write("\n")
        os.chmod(temp_name, _results_file_mode(path))
        os.replace(temp_name, path)
    except BaseException:
        try:
            os.unlink(temp_name)
        except OSError:
            pass
        raise

    LOGGER.info(f"Results written to {path}")


def _results_file_mode(path: Path) -> int:
    """Mode for the results file: the existing file's, else 0666 minus umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def exit_code_for(status: ResultStatus) -> int:
    """Process exit code for a final status.

    Partial results exit 0 like full success; only a run that produced
    nothing at all fails.
    """
    if status is ResultStatus.FAILED:
        return EXIT_FAILURE
    return EXIT_SUCCESS
