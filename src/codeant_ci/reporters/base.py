"""Base class for result reporters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO

from codeant_ci.core.models import FinalResult


class Reporter(ABC):
    """Base class for all reporters.

    Reporters render a FinalResult to a text stream. The results file is
    always JSON and is written separately; reporters only shape stdout.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Reporter identifier (e.g., 'json', 'summary')."""

    @abstractmethod
    def report(self, result: FinalResult, output: IO[str]) -> None:
        """Format and write the result.

        Args:
            result: The final result of a run.
            output: Output stream to write the formatted result.
        """
