import numpy as np
import pytest

from ledgif.compositor import CanvasCompositor
from ledgif.errors import DimensionError
from ledgif.gif_parser import Disposal, SubImage

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
CLEAR = [0, 0, 0, 0]


def _sub_image(width, height, rgba, left=0, top=0, delay=10, disposal=Disposal.NONE):
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = rgba
    return SubImage(pixels=pixels, left=left, top=top, delay=delay, disposal=disposal)


def test_first_frame_starts_from_transparent_canvas():
    compositor = CanvasCompositor(3, 3)
    frame = compositor.composite(_sub_image(1, 1, RED, left=2, top=2))

    assert frame.index == 0
    assert frame.pixels.shape == (3, 3, 4)
    assert frame.pixels[2, 2].tolist() == list(RED)
    assert frame.pixels[0, 0].tolist() == CLEAR


def test_disposal_none_keeps_previous_composite():
    compositor = CanvasCompositor(2, 1)
    compositor.composite(_sub_image(2, 1, RED))
    frame = compositor.composite(_sub_image(1, 1, GREEN, left=1))
    assert frame.pixels[0].tolist() == [list(RED), list(GREEN)]


def test_disposal_is_not_applied_to_its_own_frame():
    compositor = CanvasCompositor(2, 2)
    frame = compositor.composite(_sub_image(2, 2, RED, disposal=Disposal.RESTORE_TO_BACKGROUND))
    assert frame.disposal == Disposal.RESTORE_TO_BACKGROUND
    assert (frame.pixels[:, :, 3] == 255).all()


def test_restore_to_background_clears_previous_box_only():
    compositor = CanvasCompositor(4, 4)
    compositor.composite(_sub_image(4, 4, RED))
    compositor.composite(_sub_image(2, 2, GREEN, left=1, top=1, disposal=Disposal.RESTORE_TO_BACKGROUND))
    frame = compositor.composite(_sub_image(1, 1, BLUE, left=3, top=3))

    pixels = frame.pixels
    assert pixels[1:3, 1:3].reshape(-1, 4).tolist() == [CLEAR] * 4
    assert pixels[0].tolist() == [list(RED)] * 4
    assert pixels[3, :3].tolist() == [list(RED)] * 3
    assert pixels[3, 3].tolist() == list(BLUE)


def test_restore_to_previous_uses_last_kept_snapshot():
    compositor = CanvasCompositor(2, 1)
    compositor.composite(_sub_image(2, 1, RED))
    compositor.composite(_sub_image(1, 1, GREEN, disposal=Disposal.RESTORE_TO_PREVIOUS))
    compositor.composite(_sub_image(1, 1, BLUE, left=1, disposal=Disposal.RESTORE_TO_PREVIOUS))
    frame = compositor.composite(_sub_image(0, 0, RED))

    # frame 0 is the nearest snapshot not tagged restore-to-previous
    assert frame.pixels[0].tolist() == [list(RED), list(RED)]


def test_restore_to_previous_without_history_falls_back_to_blank():
    compositor = CanvasCompositor(2, 1)
    compositor.composite(_sub_image(2, 1, RED, disposal=Disposal.RESTORE_TO_PREVIOUS))
    frame = compositor.composite(_sub_image(1, 1, GREEN))
    assert frame.pixels[0].tolist() == [list(GREEN), CLEAR]


def test_snapshots_do_not_alias():
    compositor = CanvasCompositor(1, 1)
    first = compositor.composite(_sub_image(1, 1, RED))
    compositor.composite(_sub_image(1, 1, GREEN))

    assert first.pixels[0, 0].tolist() == list(RED)
    assert not first.pixels.flags.writeable


def test_box_outside_screen_raises():
    compositor = CanvasCompositor(4, 4)
    with pytest.raises(DimensionError):
        compositor.composite(_sub_image(2, 2, RED, left=3))
    assert compositor.frame_count == 0
