"""Summary reporter."""

from __future__ import annotations

from typing import IO, List

from codeant_ci.core.models import FinalResult, ResultStatus
from codeant_ci.reporters.base import Reporter


class SummaryReporter(Reporter):
    """Reporter that outputs a brief human-readable summary.

    Produces:
    - Repository, commit and service
    - Final status
    - Security issue and SCA vulnerability counts (or the error)
    """

    @property
    def name(self) -> str:
        return "summary"

    def report(self, result: FinalResult, output: IO[str]) -> None:
        lines = self._format_summary(result)
        output.write("\n".join(lines))
        output.write("\n")

    def _format_summary(self, result: FinalResult) -> List[str]:
        lines: List[str] = [
            "Analysis Results Summary",
            "=" * 40,
            f"Repository: {result.repository}",
            f"Commit: {result.commit_id}",
            f"Service: {result.service}",
            f"Status: {result.status.value}",
        ]

        if result.status is ResultStatus.TRIGGERED:
            lines.append(result.message or "")
        elif result.status is ResultStatus.FAILED:
            lines.append(f"Error: {result.error}")
        else:
            lines.append(f"Security issues: {result.security_issues_count}")
            lines.append(f"SCA vulnerabilities: {result.sca_vulnerabilities_count}")
            missing = []
            if not result.security_found:
                missing.append("security")
            if not result.sca_found:
                missing.append("SCA")
            if missing:
                lines.append(f"Not retrieved before timeout: {', '.join(missing)}")

        return lines
