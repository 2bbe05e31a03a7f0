"""CLI commands package.

This module provides the base Command class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codeant_ci.config.models import CodeAntConfig


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier, as typed on the command line."""

    @abstractmethod
    def execute(self, args: Namespace, config: "CodeAntConfig") -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Effective configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


__all__ = ["Command"]
