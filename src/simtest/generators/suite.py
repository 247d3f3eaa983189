"""Generate pytest suites from the assembly sources found on disk.

Run offline whenever the assembly corpus changes; the output depends only
on the directory listing and the configuration, so rerunning it on an
unchanged directory rewrites the same bytes.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from simtest.core.errors import FileOpenError
from simtest.core.models import DEFAULT_MABI, DEFAULT_MARCH, RESOURCE_DIR, ROOT_ENV, SIMULATOR_ENV
from simtest.toolchain.locator import DEFAULT_ASSEMBLER_PATTERN, DEFAULT_DISASSEMBLER_PATTERN

logger = logging.getLogger(__name__)

ASSEMBLY_EXTENSION = ".s"

HEADER = '''\
# This is a generated file. Do not add to git.
# Regenerate with `simtest generate {category}` after changing the assembly sources.
"""Regression tests for the {category} category."""
import pytest

from simtest.core.case import TestCase
from simtest.core.errors import ToolNotFoundError
from simtest.core.models import CaseConfig
from simtest.toolchain.locator import locate_toolchain

'''

CONSTANTS = '''\
CATEGORY = {category!r}
SIMULATOR = {simulator!r}
ROOT = {root!r}
QUIET = {quiet!r}
MEMORY_SIZE = {memory_size!r}
TIMEOUT = {timeout!r}
STRICT_LENGTH = {strict_length!r}
SIMULATOR_ARGS = {simulator_args!r}
ASSEMBLER = {assembler!r}
DISASSEMBLER = {disassembler!r}
MARCH = {march!r}
MABI = {mabi!r}


@pytest.fixture(scope="module")
def toolchain():
    try:
        return locate_toolchain(assembler=ASSEMBLER, disassembler=DISASSEMBLER)
    except ToolNotFoundError as exc:
        pytest.exit(str(exc), returncode=4)


def _config(name):
    return CaseConfig(
        category=CATEGORY,
        name=name,
        simulator_path=SIMULATOR,
        root_path=ROOT,
        quiet=QUIET,
        memory_size=MEMORY_SIZE,
        timeout=TIMEOUT,
        strict_length=STRICT_LENGTH,
        simulator_args=SIMULATOR_ARGS,
        march=MARCH,
        mabi=MABI,
    )
'''

STANZA = '''

def test_{function}(toolchain):
    with TestCase(_config({name!r}), toolchain) as case:
        result = case.run()
        assert result.passed, result.details()
'''


def discover_tests(assembly_dir: Path, extension: str = ASSEMBLY_EXTENSION) -> List[str]:
    """Return the sorted base names of the assembly sources in ``assembly_dir``."""

    folder = Path(assembly_dir)
    if not folder.is_dir():
        logger.debug("assembly directory %s does not exist", folder)
        return []
    return sorted(
        entry.stem
        for entry in folder.iterdir()
        if entry.is_file() and entry.suffix == extension
    )


def render_suite(
    names: Sequence[str],
    category: str,
    *,
    settings: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Render the source of a pytest module with one test per name.

    Simulator and root paths come from ``settings`` or, failing that, from the
    environment at generation time.
    """

    env = os.environ if environ is None else environ
    values: Dict[str, object] = {
        "simulator": env.get(SIMULATOR_ENV) or None,
        "root": env.get(ROOT_ENV) or None,
        "quiet": True,
        "memory_size": None,
        "timeout": None,
        "strict_length": False,
        "simulator_args": (),
        "assembler": None,
        "disassembler": None,
        "march": None,
        "mabi": None,
    }
    for key, value in (settings or {}).items():
        if key not in values:
            raise KeyError(f"Unknown suite setting '{key}'")
        if value is not None:
            values[key] = value
    for key in ("simulator", "root"):
        if values[key] is not None:
            values[key] = str(values[key])
    values["simulator_args"] = tuple(str(arg) for arg in values["simulator_args"])  # type: ignore[union-attr]
    _fill_toolchain_defaults(values)

    parts = [HEADER.format(category=category), CONSTANTS.format(category=category, **values)]
    for function, name in _function_names(names):
        parts.append(STANZA.format(function=function, name=name))
    return "".join(parts)


def generate_suite(
    assembly_dir: Path,
    output_path: Path,
    category: str,
    *,
    settings: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Scan ``assembly_dir`` and (re)write ``output_path``; returns the test names."""

    names = discover_tests(assembly_dir)
    source = render_suite(names, category, settings=settings, environ=environ)
    output = Path(output_path)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(source, encoding="utf-8")
    except OSError as exc:
        raise FileOpenError(output, "generated suite", "could not be written") from exc
    logger.info("wrote %d test(s) for %s to %s", len(names), category, output)
    return names


def suite_path(root: Path, category: str) -> Path:
    return Path(root) / category / f"test_{category}.py"


def generate_all(
    root: Path,
    categories: Sequence[str],
    *,
    settings: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, List[str]]:
    """Regenerate ``<root>/<category>/test_<category>.py`` for every category."""

    generated: Dict[str, List[str]] = {}
    for category in categories:
        assembly_dir = Path(root) / category / RESOURCE_DIR / "assembly"
        generated[category] = generate_suite(
            assembly_dir,
            suite_path(root, category),
            category,
            settings=settings,
            environ=environ,
        )
    return generated


def _function_names(names: Sequence[str]) -> List[Tuple[str, str]]:
    issued: Set[str] = set()
    pairs = []
    for name in names:
        base = re.sub(r"\W", "_", name)
        function = base
        suffix = 1
        while function in issued:
            suffix += 1
            function = f"{base}_{suffix}"
        issued.add(function)
        pairs.append((function, name))
    return pairs


def _fill_toolchain_defaults(values: Dict[str, object]) -> None:
    defaults = {
        "assembler": DEFAULT_ASSEMBLER_PATTERN,
        "disassembler": DEFAULT_DISASSEMBLER_PATTERN,
        "march": DEFAULT_MARCH,
        "mabi": DEFAULT_MABI,
    }
    for key, value in defaults.items():
        if values[key] is None:
            values[key] = value
