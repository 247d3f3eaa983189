"""A single named regression test: build, simulate, compare, clean up."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Mapping, Optional

from simtest.backends.simulator import SimulatorInvoker
from simtest.toolchain.image import ImageBuilder
from simtest.toolchain.locator import locate_toolchain

from .comparator import compare_results
from .errors import ExternalProcessError, FileOpenError
from .models import CaseConfig, CasePaths, ToolchainPaths
from .results import CaseResult

logger = logging.getLogger(__name__)


class TestCase:
    """Owns the derived artifacts of one (category, name) test.

    The memory image is built on the first :meth:`run`. Generated files are
    removed by :meth:`close` only after a recorded pass, so failures leave
    everything behind for inspection. Use it as a context manager to get
    that teardown automatically.
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        config: CaseConfig,
        toolchain: Optional[ToolchainPaths] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
        keep_artifacts: bool = False,
    ) -> None:
        self.config = config.resolved(environ)
        self.paths: CasePaths = self.config.paths()
        self.passed: Optional[bool] = None
        self.result: Optional[CaseResult] = None
        self._toolchain = toolchain
        self._keep_artifacts = keep_artifacts
        self._image: Optional[Path] = None

    @property
    def category(self) -> str:
        return self.config.category

    @property
    def name(self) -> str:
        return self.config.name

    def identifier(self) -> str:
        return self.config.identifier()

    def build_image(self) -> Path:
        """Assemble the source and (re)generate the memory image."""

        if self._toolchain is None:
            self._toolchain = locate_toolchain()
        builder = ImageBuilder(
            self._toolchain,
            march=self.config.march,
            mabi=self.config.mabi,
            timeout=self.config.timeout,
        )
        self._image = builder.build(
            self.paths.source,
            object_path=self.paths.object,
            disassembly_path=self.paths.disassembly,
            image_path=self.paths.memory_image,
        )
        return self._image

    def run(self) -> CaseResult:
        """Execute the test once and record its outcome.

        Missing files and failing external tools become an ``error`` result
        for this test alone. A missing toolchain still propagates.
        """

        start = time.perf_counter()
        returncode: Optional[int] = None
        try:
            image = self._image or self.build_image()
            invoker = SimulatorInvoker(
                simulator=self.config.simulator_path,  # type: ignore[arg-type]
                quiet=self.config.quiet,
                memory_size=self.config.memory_size,
                timeout=self.config.timeout,
                extra_args=self.config.simulator_args,
            )
            self._discard_stale_result()
            returncode = invoker.invoke(image, self.paths.actual).returncode
            comparison = compare_results(
                self.paths.actual,
                self.paths.expected,
                strict_length=self.config.strict_length,
            )
        except (FileOpenError, ExternalProcessError) as exc:
            logger.error("%s: %s", self.identifier(), exc)
            result = CaseResult(
                case=self.config,
                status="error",
                duration_s=time.perf_counter() - start,
                error=str(exc),
                simulator_returncode=returncode,
            )
        else:
            status = "passed" if comparison.passed else "failed"
            if not comparison.passed:
                logger.warning("%s failed: %s", self.identifier(), comparison.describe())
            result = CaseResult(
                case=self.config,
                status=status,
                duration_s=time.perf_counter() - start,
                comparison=comparison,
                simulator_returncode=returncode,
            )
        self.passed = result.passed
        self.result = result
        return result

    def close(self) -> None:
        """Delete generated artifacts when, and only when, the test passed."""

        if self.passed is not True or self._keep_artifacts:
            return
        for path in self.paths.artifacts():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
        self._image = None

    def _discard_stale_result(self) -> None:
        try:
            self.paths.actual.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise FileOpenError(self.paths.actual, "actual result", "could not be removed") from exc

    def __enter__(self) -> "TestCase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
