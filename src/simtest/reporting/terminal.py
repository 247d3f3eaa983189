"""Terminal reporter rendering progress and summaries."""
from __future__ import annotations

import time
from typing import Sequence

import click
from colorama import Fore, Style, init as colorama_init

from simtest.core.models import CaseConfig
from simtest.core.results import CaseResult

from .base import Reporter


STATUS_COLORS = {
    "passed": Fore.GREEN,
    "failed": Fore.RED,
    "error": Fore.YELLOW,
}

STATUS_LABELS = {
    "passed": "PASS",
    "failed": "FAIL",
    "error": "ERROR",
}


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True) -> None:
        self._use_color = use_color
        self._start_time = 0.0
        self._failures: list[tuple[int, CaseResult]] = []
        if use_color:
            colorama_init()

    def on_start(self, cases: Sequence[CaseConfig]) -> None:
        self._start_time = time.perf_counter()
        self._failures.clear()
        categories = sorted({case.category for case in cases})
        click.echo(
            self._paint(
                f"Starting run: {len(cases)} case(s) in {len(categories)} categor"
                + ("y" if len(categories) == 1 else "ies")
                + (f" ({', '.join(categories)})" if categories else ""),
                Fore.CYAN,
            )
        )

    def on_case_result(self, result: CaseResult, index: int, total: int) -> None:
        label = STATUS_LABELS.get(result.status, result.status.upper())
        status_text = self._paint(f"{label:<5}", STATUS_COLORS.get(result.status))
        ms = result.duration_s * 1000
        click.echo(f"[{index}/{total}] {status_text} {result.case.identifier()} ({ms:.2f} ms)")
        if not result.passed:
            self._failures.append((index, result))
            self._print_failure_details(result)

    def on_complete(self, results: Sequence[CaseResult]) -> None:
        duration = time.perf_counter() - self._start_time
        total = len(results)
        passed = sum(1 for result in results if result.status == "passed")
        failed = sum(1 for result in results if result.status == "failed")
        errors = sum(1 for result in results if result.status == "error")
        color = Fore.GREEN if passed == total and total else Fore.RED
        click.echo(
            self._paint(
                f"Summary: total={total} passed={passed} failed={failed} errors={errors} "
                f"duration={duration:.2f}s",
                color,
            )
        )
        if self._failures:
            click.echo(self._paint("Failure details:", Fore.RED))
            for index, result in self._failures:
                click.echo(f"  [{index}] {result.case.identifier()} -> {result.status}")
                self._print_failure_details(result, indent="    ")

    def _paint(self, text: str, color: str | None) -> str:
        if not self._use_color or not color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"

    def _print_failure_details(self, result: CaseResult, *, indent: str = "    ") -> None:
        if result.error:
            click.echo(f"{indent}error: {result.error}")
        comparison = result.comparison
        if comparison is not None and not comparison.passed:
            if comparison.line_number is not None:
                click.echo(f"{indent}line {comparison.line_number}:")
                click.echo(f"{indent}  expected: {comparison.expected_line}")
                click.echo(f"{indent}  actual:   {comparison.actual_line}")
            else:
                click.echo(f"{indent}reason: {comparison.describe()}")
        if result.simulator_returncode not in (None, 0):
            click.echo(f"{indent}simulator exit status: {result.simulator_returncode}")
