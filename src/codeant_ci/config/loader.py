"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.codeant.yml in the working directory)
- Global config ($CODEANT_CI_HOME/config.yml, default ~/.codeant-ci)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from codeant_ci.config.models import (
    ApiConfig,
    CodeAntConfig,
    OutputConfig,
    QualityGatesConfig,
    ScanConfig,
)
from codeant_ci.config.validation import has_errors, validate_config
from codeant_ci.core.logging import get_logger

LOGGER = get_logger(__name__)

PROJECT_CONFIG_NAMES = [".codeant.yml", ".codeant.yaml", "codeant.yml", "codeant.yaml"]
GLOBAL_CONFIG_NAME = "config.yml"

DEFAULT_HOME_DIR_NAME = ".codeant-ci"
CODEANT_HOME_ENV = "CODEANT_CI_HOME"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


def get_codeant_home() -> Path:
    """Get the codeant-ci home directory.

    Resolution order:
    1. CODEANT_CI_HOME environment variable (if set)
    2. ~/.codeant-ci (default)
    """
    env_home = os.environ.get(CODEANT_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
) -> CodeAntConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config (.codeant.yml)
    3. Global config ($CODEANT_CI_HOME/config.yml)
    4. Built-in defaults

    Args:
        project_root: Directory searched for a project config file.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.

    Returns:
        Merged CodeAntConfig instance.

    Raises:
        ConfigError: If a config file is missing, unparsable or invalid.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    global_path = find_global_config()
    if global_path is not None:
        try:
            merged = merge_configs(merged, _load_validated(global_path))
            sources.append(f"global:{global_path}")
            LOGGER.debug(f"Loaded global config from {global_path}")
        except ConfigError as e:
            LOGGER.warning(f"Failed to load global config: {e}")

    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = merge_configs(merged, _load_validated(cli_config_path))
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")
    else:
        project_path = find_project_config(project_root)
        if project_path is not None:
            merged = merge_configs(merged, _load_validated(project_path))
            sources.append(f"project:{project_path}")
            LOGGER.debug(f"Loaded project config from {project_path}")

    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find a config file in the project root, in PROJECT_CONFIG_NAMES order."""
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def find_global_config() -> Optional[Path]:
    config_path = get_codeant_home() / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def _load_validated(path: Path) -> Dict[str, Any]:
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    issues = validate_config(data, source=str(path))
    if has_errors(issues):
        details = "; ".join(issue.message for issue in issues)
        raise ConfigError(f"Invalid configuration in {path}: {details}")
    return data


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed dictionary.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def dict_to_config(data: Dict[str, Any]) -> CodeAntConfig:
    """Convert a validated dict to a typed CodeAntConfig."""
    defaults = CodeAntConfig()

    api_data = data.get("api") or {}
    api = ApiConfig(
        base_url=api_data.get("base_url", defaults.api.base_url),
        request_timeout=api_data.get("request_timeout", defaults.api.request_timeout),
    )

    scan_data = data.get("scan") or {}
    scan = ScanConfig(
        poll_interval=scan_data.get("poll_interval", defaults.scan.poll_interval),
        timeout=scan_data.get("timeout", defaults.scan.timeout),
        results_file=scan_data.get("results_file", defaults.scan.results_file),
    )

    gates_data = data.get("quality_gates") or {}
    quality_gates = QualityGatesConfig(
        poll_interval=gates_data.get("poll_interval", defaults.quality_gates.poll_interval),
        timeout=gates_data.get("timeout", defaults.quality_gates.timeout),
    )

    output_data = data.get("output") or {}
    output = OutputConfig(format=output_data.get("format", defaults.output.format))

    return CodeAntConfig(
        access_token=data.get("access_token") or None,
        api=api,
        scan=scan,
        quality_gates=quality_gates,
        output=output,
    )
