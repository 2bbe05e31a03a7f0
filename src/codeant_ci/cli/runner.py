"""CLI runner orchestration.

This module handles command dispatch and execution for the codeant-ci CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional

from importlib.metadata import version, PackageNotFoundError

from codeant_ci.cli.arguments import UsageError, build_parser
from codeant_ci.cli.commands import Command
from codeant_ci.cli.commands.coverage import CoverageCommand
from codeant_ci.cli.commands.quality_gates import QualityGatesCommand
from codeant_ci.cli.commands.scan import ScanCommand
from codeant_ci.cli.config_bridge import ConfigBridge
from codeant_ci.cli.exit_codes import EXIT_FAILURE, EXIT_SUCCESS
from codeant_ci.config import load_config
from codeant_ci.config.loader import ConfigError
from codeant_ci.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get codeant-ci version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("codeant-ci")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from codeant_ci import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.scan_cmd = ScanCommand(version=self._version)
        self.quality_gates_cmd = QualityGatesCommand()
        self.coverage_cmd = CoverageCommand()

    @property
    def commands(self) -> Dict[str, Command]:
        return {
            cmd.name: cmd
            for cmd in (self.scan_cmd, self.quality_gates_cmd, self.coverage_cmd)
        }

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        argv_list = list(argv) if argv is not None else None

        try:
            args = self.parser.parse_args(argv_list)
        except UsageError:
            return EXIT_FAILURE
        except SystemExit as e:
            # --help
            return e.code if isinstance(e.code, int) else EXIT_SUCCESS

        # Configure logging as early as possible
        configure_logging(debug=args.debug, quiet=args.quiet)

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = self.commands.get(getattr(args, "command", None) or "")
        if command is None:
            self.parser.print_help()
            return EXIT_SUCCESS

        try:
            config = load_config(
                project_root=Path.cwd(),
                cli_config_path=args.config,
                cli_overrides=ConfigBridge.args_to_overrides(args),
            )
        except ConfigError as e:
            LOGGER.error(str(e))
            return EXIT_FAILURE

        LOGGER.debug(f"Using config from: {', '.join(config.sources) or 'defaults'}")

        try:
            return command.execute(args, config)
        except Exception as e:
            if args.debug:
                import traceback
                traceback.print_exc()
            LOGGER.error(f"{command.name} failed: {e}")
            return EXIT_FAILURE
