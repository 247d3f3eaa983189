"""YAML loader and validation for suite configuration files."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from jsonschema import Draft7Validator

from simtest.core.errors import ConfigError

from .models import SuiteConfig, ToolchainConfig

DEFAULT_SUITE_FILE = "simtest.yaml"

SUITE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "simulator": {"type": "string", "minLength": 1},
        "root": {"type": "string", "minLength": 1},
        "categories": {
            "type": "array",
            "items": {"type": "string", "minLength": 1, "pattern": "^[^/\\\\]+$"},
            "uniqueItems": True,
        },
        "quiet": {"type": "boolean"},
        "memory_size": {"type": "integer", "minimum": 1},
        "timeout": {"type": "number", "exclusiveMinimum": 0},
        "strict_length": {"type": "boolean"},
        "simulator_args": {"type": "array", "items": {"type": ["string", "number"]}},
        "toolchain": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "assembler": {"type": "string", "minLength": 1},
                "disassembler": {"type": "string", "minLength": 1},
                "march": {"type": "string", "minLength": 1},
                "mabi": {"type": "string", "minLength": 1},
            },
        },
    },
}
_validator = Draft7Validator(SUITE_SCHEMA)


def load_suite(path: str) -> SuiteConfig:
    """Load and validate a suite file; relative paths resolve against its directory."""

    suite_path = Path(path).expanduser().resolve()
    try:
        text = suite_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read suite file {suite_path}: {exc}") from exc
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Suite file {suite_path} is not valid YAML: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError("Suite file must contain a mapping at the top level")
    errors = sorted(_validator.iter_errors(raw), key=lambda e: list(e.path))
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise ConfigError(f"Suite schema validation failed: {messages}")
    return parse_suite(raw, suite_path.parent)


def parse_suite(raw: Mapping[str, Any], base: Path) -> SuiteConfig:
    toolchain_raw = raw.get("toolchain") or {}
    defaults = ToolchainConfig()
    toolchain = ToolchainConfig(
        assembler=str(toolchain_raw.get("assembler", defaults.assembler)),
        disassembler=str(toolchain_raw.get("disassembler", defaults.disassembler)),
        march=str(toolchain_raw.get("march", defaults.march)),
        mabi=str(toolchain_raw.get("mabi", defaults.mabi)),
    )
    timeout = raw.get("timeout")
    memory_size = raw.get("memory_size")
    return SuiteConfig(
        simulator=_resolve_path(raw.get("simulator"), base),
        root=_resolve_path(raw.get("root"), base),
        categories=tuple(str(item) for item in raw.get("categories", []) or []),
        quiet=bool(raw.get("quiet", True)),
        memory_size=int(memory_size) if memory_size is not None else None,
        timeout=float(timeout) if timeout is not None else None,
        strict_length=bool(raw.get("strict_length", False)),
        simulator_args=tuple(str(arg) for arg in raw.get("simulator_args", []) or []),
        toolchain=toolchain,
    )


def find_suite_file(directory: Optional[Path] = None) -> Optional[Path]:
    candidate = Path(directory or Path.cwd()) / DEFAULT_SUITE_FILE
    return candidate if candidate.is_file() else None


def _resolve_path(value: Optional[str], base: Path) -> Optional[Path]:
    if value is None:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()
