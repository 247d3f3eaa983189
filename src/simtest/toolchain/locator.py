"""Resolve external toolchain executables from the environment."""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterator, List, Mapping, Optional, Sequence

from simtest.core.errors import ToolNotFoundError
from simtest.core.models import ToolchainPaths

logger = logging.getLogger(__name__)

TOOLCHAIN_ROOT_ENV = "RISCV"
SEARCH_PATH_ENV = "PATH"

DEFAULT_ASSEMBLER_PATTERN = r"riscv(32|64)?-.*-as$"
DEFAULT_DISASSEMBLER_PATTERN = r"riscv(32|64)?-.*-objdump$"

REMEDY = (
    f"Install a RISC-V GNU toolchain and either export {TOOLCHAIN_ROOT_ENV}=/path/to/toolchain "
    f"(the directory holding its executables or their bin/ folder) or add the toolchain bin/ "
    f"directory to {SEARCH_PATH_ENV}, e.g. export {SEARCH_PATH_ENV}=/opt/riscv/bin:${SEARCH_PATH_ENV}"
)


class ToolchainLocator:
    """Finds executables by name pattern.

    Candidate directories are the toolchain root (and its ``bin/``) when
    ``RISCV`` is set, followed by every entry of ``PATH``. Files inside each
    directory are checked in sorted order; a file matches when the pattern
    is a substring of its name or ``re.search`` finds it. The first match
    wins.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = os.environ if environ is None else environ

    def search_dirs(self) -> List[Path]:
        dirs: List[Path] = []
        root = self._environ.get(TOOLCHAIN_ROOT_ENV, "").strip()
        if root:
            root_path = Path(root).expanduser()
            dirs.extend([root_path, root_path / "bin"])
        for entry in self._environ.get(SEARCH_PATH_ENV, "").split(os.pathsep):
            entry = entry.strip()
            if entry:
                dirs.append(Path(entry).expanduser())
        unique: List[Path] = []
        for path in dirs:
            if path not in unique:
                unique.append(path)
        return unique

    def locate(self, pattern: str) -> Path:
        if not pattern:
            raise ValueError("Executable pattern cannot be empty")
        regex = _compile(pattern)
        searched = self.search_dirs()
        for directory in searched:
            for candidate in _candidates(directory):
                if pattern in candidate.name or (regex is not None and regex.search(candidate.name)):
                    logger.debug("resolved %r to %s", pattern, candidate)
                    return candidate
        raise ToolNotFoundError(pattern, searched, REMEDY)


def locate_toolchain(
    *,
    assembler: str = DEFAULT_ASSEMBLER_PATTERN,
    disassembler: str = DEFAULT_DISASSEMBLER_PATTERN,
    environ: Optional[Mapping[str, str]] = None,
) -> ToolchainPaths:
    """Resolve both toolchain executables once for a whole run."""

    locator = ToolchainLocator(environ)
    return ToolchainPaths(
        assembler=locator.locate(assembler),
        disassembler=locator.locate(disassembler),
    )


def _compile(pattern: str) -> Optional["re.Pattern[str]"]:
    try:
        return re.compile(pattern)
    except re.error:
        # Plain names such as "riscv64-unknown-elf-as" are still usable as substrings.
        return None


def _candidates(directory: Path) -> Iterator[Path]:
    try:
        entries: Sequence[Path] = sorted(directory.iterdir())
    except OSError:
        return
    for entry in entries:
        if entry.is_file():
            yield entry
