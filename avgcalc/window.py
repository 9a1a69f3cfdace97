"""Deduplicated sliding window of fetched numbers."""

import threading
from typing import List, Sequence, Tuple, Union

Number = Union[int, float]


def merge_window(current: Sequence[Number], new_numbers: Sequence[Number], capacity: int) -> List[Number]:
    """
    Merge newly fetched numbers into a window.

    Numbers already in the window are skipped. The oldest entries are evicted
    by the full count of unseen numbers, then as many unseen numbers as fit are
    appended; the rest are dropped.

    Args:
        current: Window contents, oldest first
        new_numbers: Numbers from the latest fetch, in arrival order
        capacity: Maximum window length

    Returns:
        New window list (the input is never modified)
    """
    unique: List[Number] = []
    for num in new_numbers:
        if num not in current and num not in unique:
            unique.append(num)
    if not unique:
        return list(current)

    window = list(current)
    overflow = len(window) + len(unique) - capacity
    if overflow > 0:
        window = window[overflow:]

    take = capacity - len(window)
    return window + unique[:take]


def average(window: Sequence[Number]) -> float:
    """Arithmetic mean of the window, 0 when empty."""
    if not window:
        return 0
    return sum(window) / len(window)


class SlidingWindow:
    """Process-wide number window guarded by a lock."""

    def __init__(self, capacity: int):
        """
        Initialize an empty window.

        Args:
            capacity: Maximum number of values kept
        """
        if capacity < 1:
            raise ValueError(f"Window capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._values: List[Number] = []
        self._lock = threading.Lock()

    def snapshot(self) -> List[Number]:
        """Copy of the current contents, oldest first."""
        with self._lock:
            return list(self._values)

    def update(self, new_numbers: Sequence[Number]) -> Tuple[List[Number], List[Number], float]:
        """
        Merge numbers into the window as one atomic step.

        The window is only replaced once the merged contents and their average
        have both been computed, so a failure leaves it untouched.

        Args:
            new_numbers: Numbers from the latest fetch

        Returns:
            Tuple of (previous contents, current contents, current average)
        """
        with self._lock:
            previous = list(self._values)
            merged = merge_window(previous, new_numbers, self.capacity)
            avg = average(merged)
            self._values = merged
            return previous, list(merged), avg
