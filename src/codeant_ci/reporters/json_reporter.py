"""JSON reporter."""

from __future__ import annotations

import json
from typing import IO

from codeant_ci.core.models import FinalResult
from codeant_ci.reporters.base import Reporter


class JSONReporter(Reporter):
    """Writes the result document exactly as stored in the results file."""

    @property
    def name(self) -> str:
        return "json"

    def report(self, result: FinalResult, output: IO[str]) -> None:
        json.dump(result.to_dict(), output, indent=2)
        output.write("\n")
