"""Field-level diffing of record snapshots.

Comparison is structural: mappings are equal when they hold the same keys
with equal values in any order, sequences when they are element-wise equal.
Booleans never equal numbers, and a missing key differs from an explicit
None, matching how the snapshots serialize to JSON.
"""

from collections.abc import Mapping
from typing import Any

_MISSING = object()


def values_equal(left: Any, right: Any) -> bool:
    """Deep structural equality of two JSON-like values."""
    if left is _MISSING or right is _MISSING:
        return left is right

    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right

    if isinstance(left, (Mapping, list, tuple)) or isinstance(right, (Mapping, list, tuple)):
        return False

    return left == right


def changed_fields(
    old_values: Mapping[str, Any] | None,
    new_values: Mapping[str, Any] | None,
) -> list[str]:
    """Names of fields whose values differ, sorted.

    Returns an empty list when either snapshot is None: a creation or a
    deletion has no meaningful field diff.
    """
    if old_values is None or new_values is None:
        return []

    keys = set(old_values) | set(new_values)
    return sorted(
        key
        for key in keys
        if not values_equal(old_values.get(key, _MISSING), new_values.get(key, _MISSING))
    )
