"""
machina Utilities

Common utilities used across the package.
"""

from .merge import deep_copy_value, deep_merge

__all__ = [
    "deep_copy_value",
    "deep_merge",
]
