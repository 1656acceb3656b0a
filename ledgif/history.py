from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .gif_parser import Disposal

T = TypeVar('T')


def find_nearest(entries: Sequence[T], start: int, skip: Callable[[T], bool]) -> Optional[int]:
    """
    Index of the nearest entry at or before ``start`` that ``skip`` rejects.

    Scans backward from ``start``; returns None when every entry down to index
    0 is skipped or ``start`` is negative.
    """
    for index in range(min(start, len(entries) - 1), -1, -1):
        if not skip(entries[index]):
            return index
    return None


class HistoryBuffer(object):
    """Append-only record of every composited snapshot and its disposal."""

    def __init__(self):
        self._entries: List[Tuple[np.ndarray, Disposal]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Tuple[np.ndarray, Disposal]:
        return self._entries[index]

    def append(self, snapshot: np.ndarray, disposal: Disposal) -> None:
        self._entries.append((snapshot, disposal))

    def find_restore_point(self, start: int) -> Optional[np.ndarray]:
        """Snapshot a restore-to-previous frame falls back to, or None if there is none."""
        index = find_nearest(
            self._entries,
            start,
            lambda entry: entry[1] == Disposal.RESTORE_TO_PREVIOUS,
        )
        if index is None:
            return None
        return self._entries[index][0]
