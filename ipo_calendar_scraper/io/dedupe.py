"""Utilities for deduplicating calendar rows and events."""

from __future__ import annotations

from typing import Any, Iterable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def _field(row: Any, key: str) -> Any:
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


def dedupe_by_key(
    rows: Iterable[T],
    keys: Sequence[str],
) -> List[T]:
    """Deduplicate rows (dicts or objects) by the composite key given by `keys`."""
    seen: set[Tuple] = set()
    unique_rows: List[T] = []
    for row in rows:
        key = tuple(_field(row, k) for k in keys)
        if key in seen:
            continue
        seen.add(key)
        unique_rows.append(row)
    return unique_rows
