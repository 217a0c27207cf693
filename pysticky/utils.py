"""Generic helpers."""

from typing import Any

__all__ = ["merge"]


def merge(merged: dict[str, Any], obj2: dict[str, Any], replace: bool = False) -> dict[str, Any]:
    """Merge the content of obj2 into merged.

    Args:
        merged: Dictionary to merge into
        obj2: Dictionary to merge from
        replace: If True, lists are replaced instead of concatenated

    Eg:
        merge({"a": {"b": 1}}, {"a": {"c": 2}}) == {"a": {"b": 1, "c": 2}}
    """
    for key, value in obj2.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merge(merged[key], value, replace)
        elif key in merged and isinstance(merged[key], list) and isinstance(value, list) and not replace:
            merged[key] += value
        else:
            merged[key] = value
    return merged
