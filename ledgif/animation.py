import os
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from PIL import Image

from .config import Config
from .gif_parser import Disposal


@dataclass(frozen=True, eq=False)
class DecodedFrame:
    """A fully composited frame, as the animation shows it."""
    index: int
    pixels: np.ndarray  # (height, width, 4) RGBA, read-only
    delay: int  # hundredths of a second
    disposal: Disposal

    __hash__ = None

    def __eq__(self, other):
        if not isinstance(other, DecodedFrame):
            return NotImplemented
        return (
            self.index == other.index
            and self.delay == other.delay
            and self.disposal == other.disposal
            and np.array_equal(self.pixels, other.pixels)
        )

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def duration_ms(self) -> int:
        return self.delay * 10

    @property
    def opaque_pixels(self) -> int:
        return int(np.count_nonzero(self.pixels[:, :, 3]))


class GifAnimation(object):
    """
    Decoded GIF animation: a fixed-size sequence of complete RGBA frames.

    Instances are produced by ``GifDecoder`` and never change afterwards.
    """

    @property
    def frames(self) -> Tuple[DecodedFrame, ...]:
        """All frames in display order."""
        return self._frames

    @property
    def width(self) -> int:
        """Logical screen width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Logical screen height in pixels."""
        return self._height

    @property
    def total_frames(self) -> int:
        return len(self._frames)

    @property
    def delays(self) -> List[int]:
        """Per-frame delay in hundredths of a second."""
        return [frame.delay for frame in self._frames]

    @property
    def frame_delay(self) -> int:
        """Delay of the first frame, for players that run at one fixed rate."""
        if not self._frames:
            return 0
        return self._frames[0].delay

    @property
    def total_duration_ms(self) -> int:
        return sum(frame.duration_ms for frame in self._frames)

    @property
    def version(self) -> str:
        """GIF version from the header ('87a' or '89a')."""
        return self._version

    @property
    def file_path(self) -> Optional[str]:
        """Path the animation was read from (None for streams)."""
        return self._file_path

    def __init__(
        self,
        width: int,
        height: int,
        frames: Sequence[DecodedFrame],
        version: str = '89a',
        file_path: Optional[str] = None,
    ):
        """
        Initialize GifAnimation.

        Args:
            width: Logical screen width
            height: Logical screen height
            frames: Composited frames, each of shape (height, width, 4)
            version: GIF version string from the header
            file_path: Optional path of the source file
        """
        for frame in frames:
            if frame.pixels.shape != (height, width, 4):
                raise ValueError(
                    f'Frame {frame.index} has shape {frame.pixels.shape}, '
                    f'expected {(height, width, 4)}'
                )
        self._width = width
        self._height = height
        self._frames = tuple(frames)
        self._version = version
        self._file_path = file_path

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self):
        return iter(self._frames)

    def __getitem__(self, index: int) -> DecodedFrame:
        return self._frames[index]

    def get_frame_image(
        self,
        frame_number: int,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> Image.Image:
        """
        Get Pillow Image of a frame.

        Args:
            frame_number: Frame number (1-indexed)
            scale: Optional scale factor
            target_width: Optional target width
            target_height: Optional target height

        Returns:
            RGBA PIL Image

        Raises:
            IndexError: If the frame number is out of range
        """
        if frame_number <= 0 or frame_number > self.total_frames:
            raise IndexError(f'Frame number {frame_number} out of range 1..{self.total_frames}')

        frame = self._frames[frame_number - 1]
        img = Image.fromarray(frame.pixels)
        size = _output_size(frame.width, frame.height, scale, target_width, target_height)
        if size != img.size:
            # Nearest neighbour keeps every LED pixel a hard-edged block
            img = img.resize(size, Image.NEAREST)
        return img

    def save_to_webp(
        self,
        output_path: str,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> None:
        """
        Write the composited frames as an animated WebP.

        Args:
            output_path: Path to save WebP file
            scale: Optional scale factor
            target_width: Optional target width
            target_height: Optional target height
        """
        if not self._frames:
            raise ValueError('Animation has no frames to save')

        webp_frames = [
            self.get_frame_image(
                frame_number,
                scale=scale,
                target_width=target_width,
                target_height=target_height,
            )
            for frame_number in range(1, self.total_frames + 1)
        ]

        webp_frames[0].save(
            output_path,
            append_images=webp_frames[1:],
            duration=[frame.duration_ms for frame in self._frames],
            save_all=True,
            loop=Config.WEBP_LOOP,
            lossless=Config.WEBP_LOSSLESS,
        )

    def save_frames(
        self,
        output_dir: str,
        scale: Union[int, float] = 1,
        target_width: int = None,
        target_height: int = None,
    ) -> List[str]:
        """Write one PNG per frame into ``output_dir`` and return the paths."""
        os.makedirs(output_dir, exist_ok=True)

        paths = []
        for frame_number in range(1, self.total_frames + 1):
            img = self.get_frame_image(
                frame_number,
                scale=scale,
                target_width=target_width,
                target_height=target_height,
            )
            path = os.path.join(output_dir, Config.FRAME_FILENAME.format(index=frame_number))
            img.save(path)
            paths.append(path)
        return paths

    def to_dataframe(self) -> pd.DataFrame:
        """One row per frame with its timing, disposal and coverage."""
        rows = []
        for frame in self._frames:
            row = {}
            for attribute, column in Config.FIELD_MAPPINGS.items():
                value = getattr(frame, attribute)
                if isinstance(value, Disposal):
                    value = value.value
                row[column] = value
            rows.append(row)
        return pd.DataFrame(rows, columns=list(Config.FIELD_MAPPINGS.values()))


def _output_size(
    width: int,
    height: int,
    scale: Union[int, float],
    target_width: Optional[int],
    target_height: Optional[int],
) -> Tuple[int, int]:
    # An explicit dimension wins over scale; a single one keeps the aspect ratio
    if target_width is not None and target_height is not None:
        return target_width, target_height
    if target_width is not None:
        return target_width, int(height * target_width / width)
    if target_height is not None:
        return int(width * target_height / height), target_height
    return int(width * scale), int(height * scale)
