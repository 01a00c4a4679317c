"""Domain source modules."""

from .modules import MODULE_ADAPTERS, MODULE_ORDER, SourceModule, build_source_modules

__all__ = [
    "MODULE_ADAPTERS",
    "MODULE_ORDER",
    "SourceModule",
    "build_source_modules",
]
