from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from typing import Callable, Optional

import pytest

from simtest.core.models import ToolchainPaths

ASSEMBLER_NAME = "riscv32-unknown-elf-as"
DISASSEMBLER_NAME = "riscv32-unknown-elf-objdump"

FAKE_ASSEMBLER = """
import re
import sys

ENCODINGS = {
    "addi a0,a0,10": "00a50513",
    "addi a1,a1,1": "00158593",
    "nop": "00000013",
}

args = sys.argv[1:]
if not any(arg.startswith("-march=") for arg in args) or "-o" not in args:
    sys.stderr.write("usage: as -march=ISA -mabi=ABI SRC -o OUT\\n")
    sys.exit(2)
out = args[args.index("-o") + 1]
source = [arg for arg in args if not arg.startswith("-") and arg != out][0]
lines = []
with open(source) as handle:
    for raw in handle:
        text = raw.split("#", 1)[0].strip()
        if not text or text.startswith(".") or text.endswith(":"):
            continue
        text = re.sub(r"\\s*,\\s*", ",", re.sub(r"\\s+", " ", text))
        if text not in ENCODINGS:
            sys.stderr.write(f"{source}: Error: unrecognized opcode `{text}'\\n")
            sys.exit(1)
        lines.append(f"{ENCODINGS[text]}\\t{text}")
with open(out, "w") as handle:
    handle.write("\\n".join(lines))
"""

FAKE_DISASSEMBLER = """
import sys

if sys.argv[1:2] != ["-d"]:
    sys.stderr.write("usage: objdump -d OBJ\\n")
    sys.exit(2)
obj = sys.argv[2]
print()
print(f"{obj}:     file format elf32-littleriscv")
print()
print()
print("Disassembly of section .text:")
print()
print("00000000 <_start>:")
with open(obj) as handle:
    for index, line in enumerate(handle.read().splitlines()):
        encoding, text = line.split("\\t", 1)
        mnemonic, _, operands = text.partition(" ")
        print(f"{index * 4:>4x}:\\t{encoding}          \\t{mnemonic}\\t{operands}")
"""

FAKE_SIMULATOR = """
import os
import sys

args = sys.argv[1:]
image = args[0]
dump_to = args[args.index("--dump-to") + 1]
regs = [0] * 32
pc = 0
with open(image) as handle:
    for line in handle:
        if not line.strip():
            continue
        _, encoding = line.split(":", 1)
        word = int(encoding.strip(), 16)
        if word & 0x7F == 0x13 and (word >> 12) & 0x7 == 0:
            rd = (word >> 7) & 0x1F
            rs1 = (word >> 15) & 0x1F
            imm = word >> 20
            if imm & 0x800:
                imm -= 0x1000
            if rd:
                regs[rd] = (regs[rs1] + imm) & 0xFFFFFFFF
        pc += 4
if not os.environ.get("FAKE_SIM_NO_DUMP"):
    with open(dump_to, "w") as handle:
        handle.write(f"pc:0x{pc:08x}\\n")
        handle.write(f"a0:0x{regs[10]:08x}\\n")
        handle.write(f"a1:0x{regs[11]:08x}\\n")
sys.exit(int(os.environ.get("FAKE_SIM_EXIT", "0")))
"""


def write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body).lstrip(), encoding="utf-8")
    path.chmod(path.stat().st_mode | 0o111)
    return path


@pytest.fixture
def toolchain_root(tmp_path: Path) -> Path:
    root = tmp_path / "riscv"
    write_script(root / "bin" / ASSEMBLER_NAME, FAKE_ASSEMBLER)
    write_script(root / "bin" / DISASSEMBLER_NAME, FAKE_DISASSEMBLER)
    return root


@pytest.fixture
def fake_toolchain(toolchain_root: Path, monkeypatch: pytest.MonkeyPatch) -> ToolchainPaths:
    """Fake RISC-V toolchain exported through ``RISCV``."""

    monkeypatch.setenv("RISCV", str(toolchain_root))
    bin_dir = toolchain_root / "bin"
    return ToolchainPaths(
        assembler=bin_dir / ASSEMBLER_NAME,
        disassembler=bin_dir / DISASSEMBLER_NAME,
    )


@pytest.fixture
def fake_simulator(tmp_path: Path) -> Path:
    return write_script(tmp_path / "sim" / "riscv-sim", FAKE_SIMULATOR)


@pytest.fixture
def testing_root(tmp_path: Path) -> Path:
    root = tmp_path / "testing"
    root.mkdir()
    return root


@pytest.fixture
def make_case(testing_root: Path) -> Callable[..., Path]:
    """Lay out a test's assembly source and golden result under the testing root."""

    def _make(
        category: str,
        name: str,
        source: str = "addi a0, a0, 10\n",
        expected: Optional[str] = "pc:0x00000004\na0:0x0000000a\n",
    ) -> Path:
        resources = testing_root / category / "testResources"
        assembly = resources / "assembly"
        assembly.mkdir(parents=True, exist_ok=True)
        (assembly / f"{name}.s").write_text(source, encoding="utf-8")
        if expected is not None:
            golden = resources / "expected"
            golden.mkdir(parents=True, exist_ok=True)
            (golden / f"{name}.txt").write_text(expected, encoding="utf-8")
        return resources

    return _make
