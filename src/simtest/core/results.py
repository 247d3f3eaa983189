"""Result data structures produced by the test runner."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .comparator import ComparisonResult
from .models import CaseConfig


@dataclass
class CaseResult:
    """Outcome of executing a single test case."""

    case: CaseConfig
    status: str
    duration_s: float
    comparison: Optional[ComparisonResult] = None
    error: Optional[str] = None
    simulator_returncode: Optional[int] = None

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    def details(self) -> str:
        if self.error:
            return self.error
        if self.comparison is not None:
            return self.comparison.describe()
        return ""
