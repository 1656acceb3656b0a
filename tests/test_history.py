import numpy as np

from ledgif.gif_parser import Disposal
from ledgif.history import HistoryBuffer, find_nearest


def _snapshot(value):
    return np.full((1, 1, 4), value, dtype=np.uint8)


def test_find_nearest_skips_backward():
    entries = ['keep', 'skip', 'skip']
    assert find_nearest(entries, 2, lambda e: e == 'skip') == 0


def test_find_nearest_includes_start():
    assert find_nearest(['a', 'b'], 1, lambda e: False) == 1


def test_find_nearest_none_when_all_skipped():
    assert find_nearest(['skip', 'skip'], 1, lambda e: e == 'skip') is None
    assert find_nearest([], 0, lambda e: False) is None
    assert find_nearest(['a'], -1, lambda e: False) is None


def test_history_append_and_index():
    history = HistoryBuffer()
    history.append(_snapshot(1), Disposal.NONE)
    history.append(_snapshot(2), Disposal.RESTORE_TO_BACKGROUND)

    assert len(history) == 2
    snapshot, disposal = history[1]
    assert snapshot[0, 0, 0] == 2
    assert disposal == Disposal.RESTORE_TO_BACKGROUND


def test_restore_point_skips_restore_to_previous():
    history = HistoryBuffer()
    history.append(_snapshot(1), Disposal.NONE)
    history.append(_snapshot(2), Disposal.RESTORE_TO_BACKGROUND)
    history.append(_snapshot(3), Disposal.RESTORE_TO_PREVIOUS)
    history.append(_snapshot(4), Disposal.RESTORE_TO_PREVIOUS)

    assert history.find_restore_point(3)[0, 0, 0] == 2
    assert history.find_restore_point(0)[0, 0, 0] == 1


def test_restore_point_missing():
    history = HistoryBuffer()
    history.append(_snapshot(1), Disposal.RESTORE_TO_PREVIOUS)
    assert history.find_restore_point(0) is None
