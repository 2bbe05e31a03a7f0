"""Typed configuration for codeant-ci."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from codeant_ci.core.http import DEFAULT_REQUEST_TIMEOUT
from codeant_ci.core.formatter import DEFAULT_RESULTS_FILE
from codeant_ci.core import poller, quality_gates
from codeant_ci.remote.analysis import DEFAULT_API_BASE_URL


@dataclass
class ApiConfig:
    """Remote API endpoint settings."""

    base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class ScanConfig:
    """Polling settings for the scan command."""

    poll_interval: int = poller.DEFAULT_POLL_INTERVAL
    timeout: int = poller.DEFAULT_TIMEOUT
    results_file: str = DEFAULT_RESULTS_FILE


@dataclass
class QualityGatesConfig:
    """Polling settings for the quality-gates command."""

    poll_interval: int = quality_gates.DEFAULT_POLL_INTERVAL
    timeout: int = quality_gates.DEFAULT_TIMEOUT


@dataclass
class OutputConfig:
    """Stdout output settings."""

    format: str = "json"


@dataclass
class CodeAntConfig:
    """Complete codeant-ci configuration.

    Built from built-in defaults, the global config file, the project (or
    --config) file and CLI overrides, in increasing order of precedence.
    """

    access_token: Optional[str] = None
    api: ApiConfig = field(default_factory=ApiConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    quality_gates: QualityGatesConfig = field(default_factory=QualityGatesConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Where values came from, for debug output.
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def sources(self) -> List[str]:
        return list(self._config_sources)
