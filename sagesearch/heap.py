"""In-place bounded k-selection using a min-heap."""

from __future__ import annotations

from typing import Any, MutableSequence, Sequence


def _sift_down(items: MutableSequence[Any], index: int, size: int) -> None:
    while True:
        left = 2 * index + 1
        if left >= size:
            return
        smallest = index
        if items[left] < items[smallest]:
            smallest = left
        right = left + 1
        if right < size and items[right] < items[smallest]:
            smallest = right
        if smallest == index:
            return
        items[smallest], items[index] = items[index], items[smallest]
        index = smallest


def check_heap(items: Sequence[Any]) -> bool:
    """Return True if ``items`` satisfies the min-heap property."""
    return not any(items[(i - 1) // 2] > items[i] for i in range(1, len(items)))


def bounded_min_heapify(items: MutableSequence[Any], k: int) -> None:
    """Move the ``k`` largest items to the front of ``items``, in place.

    The first ``k`` elements end up in min-heap order, not sorted order.
    Nothing is done when ``items`` holds ``k`` elements or fewer.
    """
    if len(items) <= k:
        return

    for index in reversed(range(k // 2)):
        _sift_down(items, index, k)

    for index in range(k, len(items)):
        if items[index] > items[0]:
            items[index], items[0] = items[0], items[index]
            _sift_down(items, 0, k)