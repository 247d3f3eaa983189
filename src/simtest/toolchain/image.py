"""Build memory images by assembling a source and parsing its disassembly."""
from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Sequence

from simtest.core.errors import ExternalProcessError, FileOpenError
from simtest.core.models import DEFAULT_MABI, DEFAULT_MARCH, ImageLine, ToolchainPaths

logger = logging.getLogger(__name__)

# "   1004:\t00a50513\taddi\ta0,a0,10" as well as the legacy "  12  00a50513".
DISASSEMBLY_LINE = re.compile(
    r"^\s*(?P<address>[0-9a-fA-F]+):?\s+(?P<encoding>[0-9a-fA-F]{8})(?=\s|$)"
)


def parse_disassembly_line(line: str) -> Optional[ImageLine]:
    """Return the instruction on ``line`` or ``None`` for headers, labels and blanks."""

    match = DISASSEMBLY_LINE.match(line)
    if match is None:
        return None
    return ImageLine(address=match.group("address"), encoding=match.group("encoding").lower())


def iter_disassembly(path: Path) -> Iterator[ImageLine]:
    """Lazily yield the instructions of a disassembly file in program order.

    Single pass; iterate again to re-read the file.
    """

    try:
        handle: IO[str] = open(path, "r", encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FileOpenError(Path(path), "disassembly") from exc
    with handle:
        for line in handle:
            parsed = parse_disassembly_line(line)
            if parsed is not None:
                yield parsed


def write_memory_image(lines: Iterable[ImageLine], path: Path) -> int:
    """Write ``lines`` to ``path`` and return how many were written."""

    path = Path(path)
    _make_parent(path, "memory image")
    count = 0
    try:
        with open(path, "w", encoding="utf-8") as handle:
            for line in lines:
                handle.write(line.render() + "\n")
                count += 1
    except OSError as exc:
        raise FileOpenError(path, "memory image", "could not be written") from exc
    return count


class ImageBuilder:
    """Drives the external assembler and disassembler for one toolchain."""

    def __init__(
        self,
        toolchain: ToolchainPaths,
        *,
        march: str = DEFAULT_MARCH,
        mabi: str = DEFAULT_MABI,
        timeout: Optional[float] = None,
    ) -> None:
        self.toolchain = toolchain
        self.march = march
        self.mabi = mabi
        self.timeout = timeout

    def assemble_command(self, source: Path, object_path: Path) -> List[str]:
        return [
            str(self.toolchain.assembler),
            f"-march={self.march}",
            f"-mabi={self.mabi}",
            str(source),
            "-o",
            str(object_path),
        ]

    def disassemble_command(self, object_path: Path) -> List[str]:
        return [str(self.toolchain.disassembler), "-d", str(object_path)]

    def build(
        self,
        source: Path,
        *,
        object_path: Optional[Path] = None,
        disassembly_path: Optional[Path] = None,
        image_path: Optional[Path] = None,
    ) -> Path:
        """Assemble ``source`` and write its memory image; returns the image path."""

        source = Path(source)
        if not source.is_file():
            raise FileOpenError(source, "assembly source")
        object_path = Path(object_path or source.with_suffix(".out"))
        disassembly_path = Path(disassembly_path or source.with_suffix(".dis"))
        image_path = Path(image_path or source.with_suffix(".mem"))

        _make_parent(object_path, "object")
        self._run(self.assemble_command(source, object_path))
        _make_parent(disassembly_path, "disassembly")
        try:
            handle: IO[str] = open(disassembly_path, "w", encoding="utf-8")
        except OSError as exc:
            raise FileOpenError(disassembly_path, "disassembly", "could not be written") from exc
        with handle:
            self._run(self.disassemble_command(object_path), stdout=handle)

        if not disassembly_path.exists():
            raise FileOpenError(disassembly_path, "disassembly")
        if disassembly_path.stat().st_size == 0:
            raise FileOpenError(disassembly_path, "disassembly", "is empty")
        count = write_memory_image(iter_disassembly(disassembly_path), image_path)
        if count == 0:
            logger.warning("no instructions found in %s", disassembly_path)
        logger.info("built %s (%d instruction(s)) from %s", image_path, count, source)
        return image_path

    def _run(self, argv: Sequence[str], stdout: Optional[IO[str]] = None) -> None:
        logger.debug("running %s", " ".join(argv))
        try:
            process = subprocess.run(
                list(argv),
                stdout=stdout if stdout is not None else subprocess.PIPE,
                stderr=subprocess.PIPE,
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
            raise ExternalProcessError(argv, process.returncode, process.stderr or "")


def _make_parent(path: Path, role: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOpenError(path, role, "could not be created") from exc
