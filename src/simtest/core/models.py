"""Core dataclasses shared across simtest subsystems."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .errors import ConfigError

SIMULATOR_ENV = "SIMTEST_SIMULATOR"
ROOT_ENV = "SIMTEST_ROOT"

DEFAULT_MARCH = "rv32i"
DEFAULT_MABI = "ilp32"

RESOURCE_DIR = "testResources"


@dataclass(frozen=True)
class ToolchainPaths:
    """Resolved assembler/disassembler executables, shared read-only by a run."""

    assembler: Path
    disassembler: Path


@dataclass(frozen=True)
class ImageLine:
    """One instruction taken from the disassembly: address field plus encoding."""

    address: str
    encoding: str

    def render(self) -> str:
        return f"{self.address}:   {self.encoding}"


@dataclass(frozen=True)
class CasePaths:
    """Filesystem layout of a single test; a pure function of root, category and name."""

    source: Path
    object: Path
    disassembly: Path
    memory_image: Path
    expected: Path
    actual: Path

    @classmethod
    def for_case(cls, root: Path, category: str, name: str) -> "CasePaths":
        resources = Path(root) / category / RESOURCE_DIR
        assembly = resources / "assembly"
        return cls(
            source=assembly / f"{name}.s",
            object=assembly / f"{name}.out",
            disassembly=assembly / f"{name}.dis",
            memory_image=resources / "memImages" / f"{name}.mem",
            expected=resources / "expected" / f"{name}.txt",
            actual=resources / "results" / f"{name}.txt",
        )

    def artifacts(self) -> Tuple[Path, ...]:
        """Files generated by a run (inputs and golden results excluded)."""

        return (self.object, self.disassembly, self.memory_image, self.actual)


@dataclass(frozen=True)
class CaseConfig:
    """Everything needed to build and verify one named test."""

    category: str
    name: str
    simulator_path: Optional[Path] = None
    root_path: Optional[Path] = None
    quiet: bool = True
    memory_size: Optional[int] = None
    timeout: Optional[float] = None
    strict_length: bool = False
    simulator_args: Tuple[str, ...] = field(default_factory=tuple)
    march: str = DEFAULT_MARCH
    mabi: str = DEFAULT_MABI

    def __post_init__(self) -> None:
        for label, value in (("category", self.category), ("name", self.name)):
            text = str(value).strip()
            if not text:
                raise ConfigError(f"Test {label} cannot be empty")
            if "/" in text or "\\" in text:
                raise ConfigError(f"Test {label} {text!r} must not contain path separators")

    def identifier(self) -> str:
        return f"{self.category}/{self.name}"

    def resolved(self, environ: Optional[Mapping[str, str]] = None) -> "CaseConfig":
        """Fill unset simulator/root fields from the environment."""

        env = os.environ if environ is None else environ
        simulator = self.simulator_path or env.get(SIMULATOR_ENV)
        if not simulator:
            raise ConfigError(
                f"No simulator configured for {self.identifier()}: "
                f"export {SIMULATOR_ENV}=/path/to/simulator or set 'simulator' in the suite file"
            )
        root = self.root_path or env.get(ROOT_ENV) or Path.cwd()
        return replace(
            self,
            simulator_path=Path(simulator).expanduser(),
            root_path=Path(root).expanduser(),
        )

    def paths(self) -> CasePaths:
        if self.root_path is None:
            raise ConfigError(f"Root path for {self.identifier()} is unresolved")
        return CasePaths.for_case(self.root_path, self.category, self.name)
