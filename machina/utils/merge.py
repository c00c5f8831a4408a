"""
Deep-merge utilities for machine configuration.

Configured inputs and exit handlers accumulate across calls:
- Nested mappings merge key by key
- Any other value replaces what was there
- Values are copied on the way in, so later mutation of the caller's
  objects has no effect on the merged state
"""
from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)


def deep_copy_value(value: Any) -> Any:
    """
    Deep-copy a configured value.

    Callables are kept by reference (copy.deepcopy already does this for
    functions; bound methods and callable objects are treated the same way).
    Objects that refuse to be copied are kept by reference as well.

    Args:
        value: Value to copy

    Returns:
        Independent copy of ``value``
    """
    if callable(value):
        return value
    if isinstance(value, Mapping):
        return {key: deep_copy_value(item) for key, item in value.items()}
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error) as e:
        logger.debug(f"[merge] Keeping uncopyable {type(value).__name__} by reference: {e}")
        return value


def deep_merge(base: dict[str, Any], partial: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Merge ``partial`` into ``base`` in place.

    Mappings present on both sides are merged recursively; everything else
    in ``partial`` overwrites ``base``. An empty or None partial is a no-op.

    Args:
        base: Mapping to update
        partial: Values to merge in

    Returns:
        ``base``, for chaining
    """
    if not partial:
        return base

    for key, value in partial.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            base[key] = deep_copy_value(value)

    return base
