"""Line-by-line comparison of simulator dumps against golden results."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional

from .errors import FileOpenError


@dataclass
class ComparisonResult:
    """Outcome of comparing an actual dump with its expected file."""

    passed: bool
    compared: int = 0
    line_number: Optional[int] = None
    expected_line: Optional[str] = None
    actual_line: Optional[str] = None
    message: Optional[str] = None

    def describe(self) -> str:
        if self.passed:
            return f"{self.compared} line(s) matched"
        if self.line_number is not None:
            return (
                f"line {self.line_number} differs: "
                f"expected {self.expected_line!r}, actual {self.actual_line!r}"
            )
        return self.message or "comparison failed"


def compare_results(
    actual: Path,
    expected: Path,
    *,
    strict_length: bool = False,
) -> ComparisonResult:
    """Compare ``actual`` with ``expected`` line by line, ignoring case.

    Stops at the first differing pair. A comparison that examined no line
    pairs never passes. Without ``strict_length`` the loop ends as soon as
    either file is exhausted, so a shared prefix is enough to pass; with it,
    leftover lines in either file fail the comparison.
    """

    with _open(actual, "actual result") as actual_fh, _open(expected, "expected result") as expected_fh:
        compared = 0
        while True:
            actual_line = actual_fh.readline()
            if not actual_line:
                break
            expected_line = expected_fh.readline()
            if not expected_line:
                break
            compared += 1
            got = actual_line.rstrip("\r\n")
            want = expected_line.rstrip("\r\n")
            if got.casefold() != want.casefold():
                return ComparisonResult(
                    passed=False,
                    compared=compared,
                    line_number=compared,
                    expected_line=want,
                    actual_line=got,
                )
        if compared == 0:
            return ComparisonResult(
                passed=False,
                message=f"no lines compared ({_emptiness(actual, expected)})",
            )
        if strict_length:
            leftover = _leftover(actual_line, actual_fh, expected_fh)
            if leftover:
                return ComparisonResult(passed=False, compared=compared, message=leftover)
        return ComparisonResult(passed=True, compared=compared)


def _open(path: Path, role: str) -> IO[str]:
    try:
        return open(path, "r", encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FileOpenError(Path(path), role) from exc


def _leftover(last_actual: str, actual_fh: IO[str], expected_fh: IO[str]) -> Optional[str]:
    # The loop stops on the first exhausted stream; ``last_actual`` is
    # non-empty only when expected ran out first.
    if last_actual:
        return "actual result has more lines than expected result"
    if expected_fh.readline():
        return "expected result has more lines than actual result"
    return None


def _emptiness(actual: Path, expected: Path) -> str:
    if Path(expected).stat().st_size == 0:
        return f"expected result {expected} is empty"
    return f"actual result {actual} is empty"
