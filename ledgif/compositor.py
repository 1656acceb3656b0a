import logging
from typing import Optional, Tuple

import numpy as np

from . import canvas
from .animation import DecodedFrame
from .gif_parser import Disposal, SubImage
from .history import HistoryBuffer
from .normalizer import normalize

logger = logging.getLogger(__name__)


class CanvasCompositor(object):
    """
    Turns the incremental frames of a GIF into complete frames.

    The compositor owns the surface for one decode session. Before each new
    frame it applies the disposal of the frame before it, then draws the new
    sub-image and records a snapshot. One instance per decode.
    """

    def __init__(self, width: int, height: int):
        self._width = width
        self._height = height
        self._history = HistoryBuffer()

        # None until the first frame arrives
        self._surface: Optional[np.ndarray] = None
        self._last_disposal = Disposal.NONE
        self._last_box: Optional[Tuple[int, int, int, int]] = None

    @property
    def frame_count(self) -> int:
        return len(self._history)

    def composite(self, sub_image: SubImage) -> DecodedFrame:
        """Draw the next stored frame and return the resulting full frame."""
        index = len(self._history)
        canvas.check_box(self._width, self._height, sub_image.box)

        if self._surface is None:
            surface = self._blank()
        else:
            surface = self._dispose(index)

        surface = canvas.draw(surface, sub_image.pixels, sub_image.left, sub_image.top)
        self._history.append(surface, sub_image.disposal)

        self._surface = surface
        self._last_disposal = sub_image.disposal
        self._last_box = sub_image.box

        logger.debug(
            'Frame %d: %dx%d at (%d, %d), delay=%d, disposal=%s',
            index, sub_image.width, sub_image.height, sub_image.left, sub_image.top,
            sub_image.delay, sub_image.disposal.value,
        )
        return DecodedFrame(
            index=index,
            pixels=normalize(surface),
            delay=sub_image.delay,
            disposal=sub_image.disposal,
        )

    def _dispose(self, index: int) -> np.ndarray:
        """Surface as it must look before frame ``index`` is drawn."""
        if self._last_disposal == Disposal.RESTORE_TO_BACKGROUND:
            return canvas.clear_region(self._surface, self._last_box)

        if self._last_disposal == Disposal.RESTORE_TO_PREVIOUS:
            restored = self._history.find_restore_point(index - 1)
            if restored is None:
                logger.warning(
                    'Frame %d restores to previous but no earlier frame qualifies, '
                    'starting from a blank canvas', index - 1,
                )
                return self._blank()
            return restored

        return self._surface

    def _blank(self) -> np.ndarray:
        return canvas.blank(self._width, self._height)
