"""Exception hierarchy for harness failures."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class HarnessError(Exception):
    """Base class for every error raised by simtest."""


class ConfigError(HarnessError, ValueError):
    """Suite configuration is missing or invalid."""


class ToolNotFoundError(HarnessError):
    """An external toolchain executable could not be resolved.

    This is fatal for a whole run: no test can build its memory image.
    """

    def __init__(self, pattern: str, searched: Sequence[Path], hint: str) -> None:
        self.pattern = pattern
        self.searched = tuple(searched)
        dirs = ", ".join(str(path) for path in self.searched) or "<nothing>"
        super().__init__(
            f"Could not find an executable matching {pattern!r} (searched: {dirs}). {hint}"
        )


class FileOpenError(HarnessError):
    """A file the pipeline depends on is missing, unreadable or empty."""

    def __init__(self, path: Path, role: str, reason: str = "could not be opened") -> None:
        self.path = Path(path)
        self.role = role
        super().__init__(f"{role} file {reason}: {self.path}")


class ExternalProcessError(HarnessError):
    """An assembler, disassembler or simulator invocation failed."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: Optional[int],
        stderr: str = "",
        reason: str = "",
    ) -> None:
        self.argv = tuple(str(part) for part in argv)
        self.returncode = returncode
        self.stderr = stderr
        command = " ".join(self.argv)
        if reason:
            message = f"command '{command}' {reason}"
        else:
            message = f"command '{command}' failed (exit code {returncode})"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)
