"""Core models and helpers exposed at the package level."""
from .comparator import ComparisonResult, compare_results
from .errors import (
    ConfigError,
    ExternalProcessError,
    FileOpenError,
    HarnessError,
    ToolNotFoundError,
)
from .models import CaseConfig, CasePaths, ImageLine, ToolchainPaths

__all__ = [
    "CaseConfig",
    "CasePaths",
    "ComparisonResult",
    "ConfigError",
    "ExternalProcessError",
    "FileOpenError",
    "HarnessError",
    "ImageLine",
    "ToolNotFoundError",
    "ToolchainPaths",
    "compare_results",
]
