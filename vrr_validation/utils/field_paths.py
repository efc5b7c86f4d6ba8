"""
Dotted field path extraction for nested report payloads.
"""

from typing import Any, Mapping


class _Absent:
    """Marker for a path that does not resolve to a value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def get_field_value(report: Any, field_path: str) -> Any:
    """
    Resolve a dotted path ("data.totalAssets") against nested mappings.

    Args:
        report: Report payload
        field_path: Dot-separated key path

    Returns:
        The value at the path, or ABSENT if any segment is missing,
        an intermediate is not a mapping, or the value is None
    """
    current = report
    for segment in field_path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return ABSENT
        current = current[segment]

    if current is None:
        return ABSENT
    return current


def is_present(value: Any) -> bool:
    return value is not ABSENT
