"""Argument parser construction for codeant-ci CLI.

This module builds the argument parser with subcommands:
- codeant-ci scan           - Trigger an analysis and collect its results
- codeant-ci quality-gates  - Start a quality gate scan or poll its verdict
- codeant-ci coverage       - Upload a coverage report
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from codeant_ci.core.models import Service
from codeant_ci.reporters import list_available_reporters

SERVICE_CHOICES = [service.value for service in Service]


class UsageError(Exception):
    """Invalid command line; the parser has already printed the message."""

    pass


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with 2.

    Exit code 2 is reserved for a missing coverage file.
    """

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        sys.stderr.write(f"{self.prog}: error: {message}\n")
        raise UsageError(message)


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got '{value}'")
    return number


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show codeant-ci version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to config file (default: .codeant.yml in the working directory).",
    )
    parser.add_argument(
        "--api-url",
        metavar="URL",
        help="CodeAnt API base URL (default: https://api.codeant.ai).",
    )


def _build_scan_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'scan' subcommand parser."""
    scan_parser = subparsers.add_parser(
        "scan",
        help="Trigger an analysis scan and collect its results.",
        description=(
            "Start a security and SCA analysis for a commit, poll both result "
            "endpoints until they are ready or the timeout elapses, and write "
            "the aggregated results to a JSON file."
        ),
    )

    target_group = scan_parser.add_argument_group("target")
    target_group.add_argument(
        "-a", "--access-token",
        help="Access token for authentication (or access_token in config).",
    )
    target_group.add_argument(
        "-r", "--repo",
        required=True,
        help="Repository name in format org/repo.",
    )
    target_group.add_argument(
        "-c", "--commit-id",
        required=True,
        help="Commit ID to analyze.",
    )
    target_group.add_argument(
        "-s", "--service",
        required=True,
        choices=SERVICE_CHOICES,
        help="VCS provider.",
    )
    target_group.add_argument(
        "-b", "--branch",
        default="",
        help="Branch name.",
    )
    target_group.add_argument(
        "-i", "--include-files",
        default="",
        help="Files to include (glob patterns).",
    )
    target_group.add_argument(
        "-e", "--exclude-files",
        default="",
        help="Files to exclude (glob patterns).",
    )
    target_group.add_argument(
        "-u", "--base-url",
        default="",
        help="Custom base URL for the git provider (e.g. GitHub Enterprise).",
    )

    polling_group = scan_parser.add_argument_group("polling")
    polling_group.add_argument(
        "-p", "--polling-interval",
        type=positive_int,
        default=None,
        help="Polling interval in seconds (default: 30).",
    )
    polling_group.add_argument(
        "-t", "--timeout",
        type=positive_int,
        default=None,
        help="Timeout in seconds (default: 300).",
    )
    polling_group.add_argument(
        "-n", "--no-wait",
        action="store_true",
        help="Skip waiting for results, only trigger the scan.",
    )

    output_group = scan_parser.add_argument_group("output")
    output_group.add_argument(
        "-o", "--output",
        metavar="FILE",
        default=None,
        help="Results file (default: results.json).",
    )
    output_group.add_argument(
        "--format",
        choices=list_available_reporters(),
        default=None,
        help="Stdout format (default: json, or as specified in config file).",
    )


def _build_quality_gates_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'quality-gates' subcommand parser."""
    gates_parser = subparsers.add_parser(
        "quality-gates",
        help="Start a quality gate scan or wait for its verdict.",
        description=(
            "With --operation start, trigger a quality gate scan. With "
            "--operation results, poll until the gate passes or fails."
        ),
    )
    gates_parser.add_argument(
        "-a", "--access-token",
        help="Repository token / PAT (or access_token in config).",
    )
    gates_parser.add_argument(
        "-r", "--repo",
        required=True,
        help="Repository in format org/repo.",
    )
    gates_parser.add_argument(
        "-c", "--commit-id",
        required=True,
        help="Commit SHA to scan.",
    )
    gates_parser.add_argument(
        "-s", "--service",
        choices=SERVICE_CHOICES,
        default=Service.GITHUB.value,
        help="VCS provider (default: github).",
    )
    gates_parser.add_argument(
        "-u", "--base-url",
        default="",
        help="Base URL for the VCS service.",
    )
    gates_parser.add_argument(
        "-o", "--operation",
        choices=["start", "results"],
        default="start",
        help="Operation to perform (default: start).",
    )
    gates_parser.add_argument(
        "-t", "--timeout",
        type=positive_int,
        default=None,
        help="Timeout in seconds for polling results (default: 300).",
    )
    gates_parser.add_argument(
        "-p", "--poll-interval",
        type=positive_int,
        default=None,
        help="Poll interval in seconds (default: 15).",
    )


def _build_coverage_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'coverage' subcommand parser."""
    coverage_parser = subparsers.add_parser(
        "coverage",
        help="Upload a coverage report.",
        description=(
            "Request a presigned upload URL, upload the coverage file to it "
            "and notify the service so it can set commit status/comments."
        ),
    )
    coverage_parser.add_argument(
        "-t", "--access-token",
        help="Your service access token (or access_token in config).",
    )
    coverage_parser.add_argument(
        "-r", "--repo",
        required=True,
        help="Repo slug (e.g. myorg/myrepo).",
    )
    coverage_parser.add_argument(
        "-c", "--commit-id",
        required=True,
        help="Commit SHA.",
    )
    coverage_parser.add_argument(
        "-f", "--file",
        dest="coverage_file",
        type=Path,
        required=True,
        help="Path to coverage.xml.",
    )
    coverage_parser.add_argument(
        "-p", "--platform",
        required=True,
        choices=SERVICE_CHOICES,
        help="The git provider.",
    )
    coverage_parser.add_argument(
        "-m", "--module",
        default="",
        help="Module name in a monorepo (e.g. frontend).",
    )
    coverage_parser.add_argument(
        "-b", "--branch",
        default="",
        help="Branch name.",
    )
    coverage_parser.add_argument(
        "-u", "--vcs-base-url",
        default="",
        help="Custom VCS base URL (e.g. https://github.enterprise.com).",
    )


def build_parser() -> ArgumentParser:
    """Build and return the argument parser for codeant-ci CLI.

    Returns:
        Configured ArgumentParser instance with subcommands.
    """
    parser = ArgumentParser(
        prog="codeant-ci",
        description="codeant-ci - run CodeAnt analysis from CI pipelines.",
        epilog=(
            "Examples:\n"
            "  codeant-ci scan -a $TOKEN -r org/repo -c $SHA -s github\n"
            "  codeant-ci scan -a $TOKEN -r org/repo -c $SHA -s gitlab --no-wait\n"
            "  codeant-ci quality-gates -a $TOKEN -r org/repo -c $SHA -o results\n"
            "  codeant-ci coverage -t $TOKEN -r org/repo -c $SHA -f coverage.xml -p github\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    _add_global_options(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands:",
        metavar="COMMAND",
    )

    _build_scan_parser(subparsers)
    _build_quality_gates_parser(subparsers)
    _build_coverage_parser(subparsers)

    return parser
