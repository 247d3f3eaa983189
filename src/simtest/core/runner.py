"""Test runner orchestrating image builds, simulator runs and comparisons."""
from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from simtest.config.models import SuiteConfig
from simtest.generators.suite import discover_tests
from simtest.toolchain.locator import locate_toolchain

from .case import TestCase
from .models import RESOURCE_DIR, CaseConfig, ToolchainPaths
from .results import CaseResult


class SuiteRunner:
    """Executes a collection of test cases sequentially."""

    def __init__(
        self,
        *,
        toolchain: Optional[ToolchainPaths] = None,
        fail_fast: bool = False,
        keep_artifacts: bool = False,
    ) -> None:
        self._toolchain = toolchain
        self._fail_fast = fail_fast
        self._keep_artifacts = keep_artifacts

    @property
    def toolchain(self) -> ToolchainPaths:
        # Resolved once; a missing tool aborts before any case runs.
        if self._toolchain is None:
            self._toolchain = locate_toolchain()
        return self._toolchain

    def run(
        self,
        cases: Sequence[CaseConfig],
        *,
        on_result: Optional[Callable[[CaseResult, int, int], None]] = None,
    ) -> List[CaseResult]:
        results: List[CaseResult] = []
        toolchain = self.toolchain
        total = len(cases)
        for index, config in enumerate(cases, start=1):
            with TestCase(config, toolchain, keep_artifacts=self._keep_artifacts) as case:
                result = case.run()
            results.append(result)
            if on_result:
                on_result(result, index, total)
            if self._fail_fast and not result.passed:
                break
        return results


def collect_cases(
    suite: SuiteConfig,
    categories: Sequence[str],
    *,
    patterns: Sequence[str] = (),
) -> List[CaseConfig]:
    """Expand ``categories`` into one config per assembly source on disk."""

    root = Path(suite.root or Path.cwd())
    cases: List[CaseConfig] = []
    for category in categories:
        assembly_dir = root / category / RESOURCE_DIR / "assembly"
        for name in discover_tests(assembly_dir):
            if patterns and not any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns):
                continue
            cases.append(suite.case(category, name))
    return cases


def discover_categories(root: Path) -> List[str]:
    """Categories are directories under ``root`` that hold an assembly folder."""

    root = Path(root)
    if not root.is_dir():
        return []
    return sorted(
        entry.name
        for entry in root.iterdir()
        if (entry / RESOURCE_DIR / "assembly").is_dir()
    )
