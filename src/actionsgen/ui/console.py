"""Console output formatting utilities for actionsgen."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_generation_started(
        self,
        build_file: str,
        root: str,
        workflow_count: int,
    ) -> None:
        """Print generation start information."""
        print("\nGENERATION STARTED")
        print(f"Build file: {build_file}")
        print(f"Root: {root}")
        print(f"Workflows: {workflow_count}")
        print()

    def print_written(self, name: str, path: str) -> None:
        """Print a written workflow file."""
        print(f"WROTE: {name} -> {path}")

    def print_stale(self, name: str, path: str) -> None:
        """Print a workflow file that differs from a fresh render."""
        print(f"STALE: {name} ({path})")

    def print_up_to_date(self, name: str) -> None:
        print(f"OK: {name}")

    def print_plan(self, workflow: str, targets: list[str]) -> None:
        """Print the relevant targets of a workflow."""
        self.print_header(f"PLAN: {workflow}")
        for i, name in enumerate(targets, start=1):
            print(f"  {i}. {name}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
