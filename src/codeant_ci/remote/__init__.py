"""Clients for the remote CodeAnt HTTP API."""

from codeant_ci.remote.analysis import (
    DEFAULT_API_BASE_URL,
    AnalysisClient,
    AuthenticationError,
)
from codeant_ci.remote.coverage import CoverageError, CoverageUploader, CoverageUploadRequest
from codeant_ci.remote.quality_gates import QualityGateClient, QualityGateRequest

__all__ = [
    "DEFAULT_API_BASE_URL",
    "AnalysisClient",
    "AuthenticationError",
    "CoverageError",
    "CoverageUploader",
    "CoverageUploadRequest",
    "QualityGateClient",
    "QualityGateRequest",
]
