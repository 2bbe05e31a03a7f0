"""codeant-ci - trigger CodeAnt analysis scans from CI and collect results."""

__version__ = "0.3.0"
