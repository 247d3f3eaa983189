"""Suite configuration loading."""
from .loader import DEFAULT_SUITE_FILE, find_suite_file, load_suite, parse_suite
from .models import SuiteConfig, ToolchainConfig

__all__ = [
    "DEFAULT_SUITE_FILE",
    "SuiteConfig",
    "ToolchainConfig",
    "find_suite_file",
    "load_suite",
    "parse_suite",
]
