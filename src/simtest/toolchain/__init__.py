"""Toolchain discovery and memory-image construction."""
from .image import ImageBuilder, iter_disassembly, parse_disassembly_line, write_memory_image
from .locator import ToolchainLocator, locate_toolchain

__all__ = [
    "ImageBuilder",
    "ToolchainLocator",
    "iter_disassembly",
    "locate_toolchain",
    "parse_disassembly_line",
    "write_memory_image",
]
