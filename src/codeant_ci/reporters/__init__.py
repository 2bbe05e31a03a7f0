"""Reporters for codeant-ci stdout output."""

from typing import Dict, List, Optional, Type

from codeant_ci.reporters.base import Reporter
from codeant_ci.reporters.json_reporter import JSONReporter
from codeant_ci.reporters.summary_reporter import SummaryReporter

_REPORTERS: Dict[str, Type[Reporter]] = {
    "json": JSONReporter,
    "summary": SummaryReporter,
}


def get_reporter(name: str) -> Optional[Reporter]:
    """Get an instantiated reporter by name, or None if unknown."""
    reporter_class = _REPORTERS.get(name)
    return reporter_class() if reporter_class else None


def list_available_reporters() -> List[str]:
    return sorted(_REPORTERS)


__all__ = [
    "Reporter",
    "JSONReporter",
    "SummaryReporter",
    "get_reporter",
    "list_available_reporters",
]
