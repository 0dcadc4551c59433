"""Range lookups over sorted sequences used by the fragment index."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from typing import Any, Callable, Optional, Sequence


def binary_search_slice(
    items: Sequence[Any],
    key: Optional[Callable[[Any], Any]],
    low: Any,
    high: Any,
) -> tuple[int, int]:
    """Return the widest ``(left, right)`` such that every item whose key lies
    in ``[low, high]`` is within ``items[left:right]``.

    ``items`` must be sorted by ``key`` (identity when ``None``). ``left`` is
    the last index whose key is below ``low`` (or 0), and ``right`` is the
    first index whose key is above ``high`` (or ``len(items)``).
    """
    left = max(bisect_left(items, low, key=key) - 1, 0)
    right = bisect_right(items, high, lo=left, key=key)
    return left, min(right, len(items))