"""JSON reporter emitting structured execution results."""
from __future__ import annotations

import datetime as dt
import json
import pathlib
import time
from typing import Any, Dict, Sequence

import click
from jsonschema import validate

from simtest.core.models import CaseConfig
from simtest.core.results import CaseResult

from .base import Reporter
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION


class JsonReporter(Reporter):
    """Writes results to a JSON file validated against the schema.

    Without a path the payload is printed to stdout instead.
    """

    def __init__(self, path: str | None = None) -> None:
        self._path = pathlib.Path(path) if path else None
        self._records: list[Dict[str, Any]] = []
        self._start_time = 0.0

    def on_start(self, cases: Sequence[CaseConfig]) -> None:
        self._records.clear()
        self._start_time = time.perf_counter()

    def on_case_result(self, result: CaseResult, index: int, total: int) -> None:
        self._records.append(case_to_dict(result))

    def on_complete(self, results: Sequence[CaseResult]) -> None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "generated_at": dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds"),
            "summary": _build_summary(results, time.perf_counter() - self._start_time),
            "cases": self._records,
        }
        validate(instance=payload, schema=JSON_SCHEMA_V1)
        text = json.dumps(payload, indent=2)
        if self._path is None:
            click.echo(text)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem protection
            raise RuntimeError(f"Failed to write JSON report to {self._path}: {exc}") from exc
        click.echo(f"JSON report written to {self._path}")


def _build_summary(results: Sequence[CaseResult], duration: float) -> Dict[str, Any]:
    return {
        "total": len(results),
        "passed": sum(1 for result in results if result.status == "passed"),
        "failed": sum(1 for result in results if result.status == "failed"),
        "errors": sum(1 for result in results if result.status == "error"),
        "duration_s": duration,
    }


def case_to_dict(result: CaseResult) -> Dict[str, Any]:
    case = result.case
    record: Dict[str, Any] = {
        "id": case.identifier(),
        "category": case.category,
        "name": case.name,
        "status": result.status,
        "duration_ms": result.duration_s * 1000,
        "simulator_returncode": result.simulator_returncode,
    }
    if result.error:
        record["error"] = result.error
    if result.comparison is not None:
        comparison = result.comparison
        record["comparison"] = {
            "passed": comparison.passed,
            "compared": comparison.compared,
            "line_number": comparison.line_number,
            "expected_line": comparison.expected_line,
            "actual_line": comparison.actual_line,
            "message": comparison.message,
        }
    return record
