"""Configuration loading for codeant-ci."""

from codeant_ci.config.loader import ConfigError, load_config
from codeant_ci.config.models import CodeAntConfig

__all__ = ["CodeAntConfig", "ConfigError", "load_config"]
