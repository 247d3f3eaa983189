"""Simulator backend which shells out to the external ISA simulator."""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from simtest.core.errors import ExternalProcessError, FileOpenError

logger = logging.getLogger(__name__)


@dataclass
class SimulatorRun:
    """Record of one simulator invocation.

    ``returncode`` is kept for diagnostics only; pass/fail comes from the
    dumped result file.
    """

    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""


@dataclass
class SimulatorInvoker:
    """Runs the simulator against a memory image and dumps its final state."""

    simulator: Path
    quiet: bool = True
    memory_size: Optional[int] = None
    timeout: Optional[float] = None
    extra_args: Sequence[str] = field(default_factory=tuple)

    def command(self, image: Path, result: Path) -> List[str]:
        argv = [str(self.simulator), str(image), "--dump-to", str(result)]
        if self.quiet:
            argv.append("--quiet")
        if self.memory_size is not None:
            argv.extend(["-s", str(self.memory_size)])
        argv.extend(str(arg) for arg in self.extra_args)
        return argv

    def invoke(self, image: Path, result: Path) -> SimulatorRun:
        try:
            Path(result).parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileOpenError(Path(result), "actual result", "could not be created") from exc
        argv = self.command(image, result)
        logger.debug("running %s", " ".join(argv))
        try:
            process = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise ExternalProcessError(argv, None, reason=f"could not be started ({exc})") from exc
        except PermissionError as exc:
            raise ExternalProcessError(argv, None, reason=f"is not executable ({exc})") from exc
        except subprocess.TimeoutExpired as exc:
            raise ExternalProcessError(argv, None, reason=f"timed out after {self.timeout}s") from exc
        if process.returncode != 0:
            logger.warning(
                "simulator exited with status %s for %s%s",
                process.returncode,
                image,
                f": {process.stderr.strip()}" if process.stderr.strip() else "",
            )
        return SimulatorRun(
            argv=argv,
            returncode=process.returncode,
            stdout=process.stdout,
            stderr=process.stderr,
        )
