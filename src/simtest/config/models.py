"""Suite-level settings shared by every case of a run."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from simtest.core.models import (
    DEFAULT_MABI,
    DEFAULT_MARCH,
    ROOT_ENV,
    SIMULATOR_ENV,
    CaseConfig,
)
from simtest.toolchain.locator import DEFAULT_ASSEMBLER_PATTERN, DEFAULT_DISASSEMBLER_PATTERN


@dataclass(frozen=True)
class ToolchainConfig:
    assembler: str = DEFAULT_ASSEMBLER_PATTERN
    disassembler: str = DEFAULT_DISASSEMBLER_PATTERN
    march: str = DEFAULT_MARCH
    mabi: str = DEFAULT_MABI


@dataclass(frozen=True)
class SuiteConfig:
    simulator: Optional[Path] = None
    root: Optional[Path] = None
    categories: Sequence[str] = field(default_factory=tuple)
    quiet: bool = True
    memory_size: Optional[int] = None
    timeout: Optional[float] = None
    strict_length: bool = False
    simulator_args: Sequence[str] = field(default_factory=tuple)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)

    def resolved(self, environ: Optional[Mapping[str, str]] = None) -> "SuiteConfig":
        """Fill simulator/root from the environment where the file left them unset."""

        env = os.environ if environ is None else environ
        simulator = self.simulator or env.get(SIMULATOR_ENV) or None
        root = self.root or env.get(ROOT_ENV) or Path.cwd()
        return replace(
            self,
            simulator=Path(simulator).expanduser() if simulator else None,
            root=Path(root).expanduser(),
        )

    def generator_settings(self) -> Dict[str, object]:
        """Values baked into generated suites."""

        return {
            "simulator": self.simulator,
            "root": self.root,
            "quiet": self.quiet,
            "memory_size": self.memory_size,
            "timeout": self.timeout,
            "strict_length": self.strict_length,
            "simulator_args": tuple(self.simulator_args),
            "assembler": self.toolchain.assembler,
            "disassembler": self.toolchain.disassembler,
            "march": self.toolchain.march,
            "mabi": self.toolchain.mabi,
        }

    def case(self, category: str, name: str) -> CaseConfig:
        return CaseConfig(
            category=category,
            name=name,
            simulator_path=self.simulator,
            root_path=self.root,
            quiet=self.quiet,
            memory_size=self.memory_size,
            timeout=self.timeout,
            strict_length=self.strict_length,
            simulator_args=tuple(self.simulator_args),
            march=self.toolchain.march,
            mabi=self.toolchain.mabi,
        )
