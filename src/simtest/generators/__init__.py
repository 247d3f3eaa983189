"""Suite generation from assembly sources."""
from .suite import discover_tests, generate_all, generate_suite, render_suite, suite_path

__all__ = [
    "discover_tests",
    "generate_all",
    "generate_suite",
    "render_suite",
    "suite_path",
]
