"""Bridge between CLI arguments and configuration models."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from codeant_ci.core.logging import get_logger

LOGGER = get_logger(__name__)


class ConfigBridge:
    """Translates CLI arguments to configuration overrides."""

    @staticmethod
    def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
        """Convert CLI arguments to a config override dict.

        Only options explicitly given on the command line are included, so
        config file values survive when a flag is omitted.

        Args:
            args: Parsed CLI arguments.

        Returns:
            Dictionary of config overrides.
        """
        overrides: Dict[str, Any] = {}

        access_token = getattr(args, "access_token", None)
        if access_token:
            overrides["access_token"] = access_token

        api_url = getattr(args, "api_url", None)
        if api_url:
            overrides["api"] = {"base_url": api_url}

        command = getattr(args, "command", None)

        if command == "scan":
            scan: Dict[str, Any] = {}
            if args.polling_interval is not None:
                scan["poll_interval"] = args.polling_interval
            if args.timeout is not None:
                scan["timeout"] = args.timeout
            if args.output:
                scan["results_file"] = args.output
            if scan:
                overrides["scan"] = scan
            if args.format:
                overrides["output"] = {"format": args.format}

        elif command == "quality-gates":
            gates: Dict[str, Any] = {}
            if args.poll_interval is not None:
                gates["poll_interval"] = args.poll_interval
            if args.timeout is not None:
                gates["timeout"] = args.timeout
            if gates:
                overrides["quality_gates"] = gates

        LOGGER.debug(f"CLI overrides for sections: {sorted(overrides)}")
        return overrides
