"""Console output formatting utilities for betterbuild."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from ..deps import DepStatus, FetchReport


def format_table(rows: Sequence[Tuple[str, str]], prefix: str = "") -> list[str]:
    """
    Align `name # doc` rows on the longest name.

        format_table([("compile.app", "Writes app resource file")], prefix="betterbuild ")
        -> ["betterbuild compile.app # Writes app resource file"]
    """
    width = max((len(name) for name, _ in rows), default=0)
    return [f"{prefix}{name:<{width}} # {doc}" for name, doc in rows]


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_table(self, rows: Sequence[Tuple[str, str]], prefix: str = "") -> None:
        """Print aligned `name # doc` rows."""
        for line in format_table(rows, prefix=prefix):
            print(line)

    def print_compiled(self, compiler: str, count: int) -> None:
        print(f"Compiled {count} file(s) ({compiler})")

    def print_generated(self, path: str) -> None:
        print(f"Generated {path}")

    def print_dep_statuses(self, statuses: Iterable["DepStatus"]) -> None:
        """Print one block per dependency, like `deps.check` does."""
        for s in statuses:
            scm = f" ({s.scm})" if s.scm else ""
            print(f"* {s.dependency.name}{scm}")
            if s.ok:
                print("  ok")
            else:
                print(f"  {s.message or s.status}")

    def print_fetch_report(self, report: "FetchReport") -> None:
        for name, lock in report.locks.items():
            pinned = f" at {lock}" if lock is not None else ""
            print(f"* {name}{pinned}")
        for name in report.current:
            print(f"* {name} (up to date)")
        for err in report.errors:
            self.print_failure(str(err))

    def print_failure(self, reason: str, hint: Optional[str] = None) -> None:
        """
        Print a non-fatal failure.

        Args:
            reason: Failure reason/error message
            hint: Optional hint for user
        """
        if self.debug:
            print(f"FAILED: {reason}", file=sys.stderr)
        else:
            # first line only outside debug mode
            print(f"FAILED: {reason.splitlines()[0] if reason else 'Unknown error'}", file=sys.stderr)
        if hint:
            print(f"Hint: {hint}", file=sys.stderr)

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
            traceback.print_exception(type(exc), exc, exc.__traceback__)
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
