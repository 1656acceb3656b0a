import logging
import struct
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterator, Optional, Tuple

import numpy as np

from .errors import DimensionError, FormatError, UnsupportedFormatError
from .lzw import lzw_decode

logger = logging.getLogger(__name__)


class Disposal(Enum):
    """What happens to a frame's area before the next frame is drawn."""
    NONE = "none"
    RESTORE_TO_BACKGROUND = "restore_to_background"
    RESTORE_TO_PREVIOUS = "restore_to_previous"

    @classmethod
    def from_code(cls, code: int) -> 'Disposal':
        """Map the 3-bit disposal field of a Graphic Control Extension."""
        if code in (0, 1):  # unspecified / do not dispose
            return cls.NONE
        if code == 2:
            return cls.RESTORE_TO_BACKGROUND
        if code == 3:
            return cls.RESTORE_TO_PREVIOUS
        logger.warning('Reserved disposal method %d, treating as none', code)
        return cls.NONE


@dataclass(frozen=True)
class ScreenDescriptor:
    """Header data shared by every frame of the stream."""
    version: str
    width: int
    height: int
    background_index: int
    global_color_table: Optional[np.ndarray]

    @property
    def has_dimensions(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True, eq=False)
class SubImage:
    """One stored frame: the changed pixels, where they go and how long they show."""
    pixels: np.ndarray  # (height, width, 4) RGBA, alpha 0 where transparent
    left: int
    top: int
    delay: int  # hundredths of a second
    disposal: Disposal

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Bounding box as (left, top, right, bottom), right/bottom exclusive."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)


@dataclass
class _GraphicControl:
    delay: int
    disposal: Disposal
    transparent_index: Optional[int]


class GifParser(object):
    """
    Reads the block structure of a GIF stream.

    The parser only extracts data; it keeps no compositing state. Frames are
    produced lazily by ``iter_sub_images`` and the generator cannot be
    restarted, since it consumes ``fp``.
    """

    SIGNATURES = (b'GIF87a', b'GIF89a')

    # Block types
    IMAGE_SEPARATOR = 0x2C
    EXTENSION_INTRODUCER = 0x21
    TRAILER = 0x3B

    # Extension labels
    PLAIN_TEXT_LABEL = 0x01
    GRAPHICS_CONTROL_LABEL = 0xF9
    COMMENT_LABEL = 0xFE
    APPLICATION_LABEL = 0xFF

    def __init__(self, fp: BinaryIO):
        self._fp = fp
        self._screen = None
        self._pending_control = None

    @property
    def screen(self) -> Optional[ScreenDescriptor]:
        return self._screen

    def parse_header(self) -> ScreenDescriptor:
        """Read the signature, logical screen descriptor and global color table."""
        if self._screen is not None:
            return self._screen

        signature = self._fp.read(6)
        if signature not in self.SIGNATURES:
            raise UnsupportedFormatError(f'Not a GIF stream (signature {signature!r})')

        width, height, packed, background_index, _aspect = struct.unpack(
            '<HHBBB', self._read(7, 'logical screen descriptor')
        )

        global_color_table = None
        if packed & 0b10000000:
            table_size = 2 << (packed & 0b00000111)
            global_color_table = self._read_color_table(table_size)

        self._screen = ScreenDescriptor(
            version=signature[3:].decode('ascii'),
            width=width,
            height=height,
            background_index=background_index,
            global_color_table=global_color_table,
        )
        logger.debug(
            'GIF%s screen %dx%d, global color table: %s',
            self._screen.version, width, height,
            'none' if global_color_table is None else len(global_color_table),
        )
        return self._screen

    def iter_sub_images(self) -> Iterator[SubImage]:
        """Yield every stored frame in storage order."""
        self.parse_header()

        while True:
            block = self._fp.read(1)
            if not block:
                logger.debug('End of stream without trailer')
                return

            block_type = block[0]
            if block_type == self.IMAGE_SEPARATOR:
                yield self._parse_image()
            elif block_type == self.EXTENSION_INTRODUCER:
                self._parse_extension()
            elif block_type == self.TRAILER:
                return
            else:
                raise FormatError(f'Unknown block type 0x{block_type:02X}')

    def _parse_extension(self) -> None:
        label = self._read(1, 'extension label')[0]

        if label == self.GRAPHICS_CONTROL_LABEL:
            self._pending_control = self._parse_graphics_control()
        elif label == self.PLAIN_TEXT_LABEL:
            # Plain text is a rendering block of its own and uses up the control block
            self._pending_control = None
            self._skip_data_blocks()
        else:
            # Application (loop count), comment and unknown extensions carry nothing we draw
            self._skip_data_blocks()

    def _parse_graphics_control(self) -> _GraphicControl:
        block_size = self._read(1, 'graphic control extension')[0]
        if block_size < 4:
            raise FormatError(f'Graphic control extension too short ({block_size} bytes)')

        data = self._read(block_size, 'graphic control extension')
        packed, delay, transparent_index = struct.unpack('<BHB', data[:4])
        self._skip_data_blocks()

        control = _GraphicControl(
            delay=delay,
            disposal=Disposal.from_code((packed & 0b00011100) >> 2),
            transparent_index=transparent_index if packed & 0b00000001 else None,
        )
        logger.debug(
            'Graphic control: delay=%d disposal=%s transparent=%s',
            control.delay, control.disposal.value, control.transparent_index,
        )
        return control

    def _parse_image(self) -> SubImage:
        left, top, width, height, packed = struct.unpack(
            '<HHHHB', self._read(9, 'image descriptor')
        )

        control = self._pending_control
        self._pending_control = None
        if control is None:
            raise FormatError(
                f'Image at ({left}, {top}) has no graphic control extension (delay/disposal)'
            )

        color_table = self._screen.global_color_table
        if packed & 0b10000000:
            color_table = self._read_color_table(2 << (packed & 0b00000111))
        interlaced = bool(packed & 0b01000000)

        min_code_size = self._read(1, 'LZW minimum code size')[0]
        if not 2 <= min_code_size <= 11:
            raise FormatError(f'Invalid LZW minimum code size {min_code_size}')

        data = self._read_data_blocks()
        pixel_count = width * height
        indices = lzw_decode(data, min_code_size, pixel_count)
        if len(indices) < pixel_count:
            logger.warning(
                'Image at (%d, %d) is short by %d pixels, leaving them transparent',
                left, top, pixel_count - len(indices),
            )

        if color_table is None:
            logger.warning('No color table for image at (%d, %d), using grayscale', left, top)
            color_table = _grayscale_table(1 << min_code_size)

        pixels = _to_rgba(indices, width, height, color_table, control.transparent_index)
        if interlaced:
            pixels = _deinterlace(pixels)

        logger.debug('Image %dx%d at (%d, %d) interlaced=%s', width, height, left, top, interlaced)
        return SubImage(
            pixels=pixels,
            left=left,
            top=top,
            delay=control.delay,
            disposal=control.disposal,
        )

    def _read_color_table(self, size: int) -> np.ndarray:
        raw = self._read(size * 3, 'color table')
        table = np.full((size, 4), 255, dtype=np.uint8)
        table[:, :3] = np.frombuffer(raw, dtype=np.uint8).reshape(size, 3)
        return table

    def _read_data_blocks(self) -> bytes:
        chunks = []
        while True:
            block_size = self._read(1, 'data sub-block')[0]
            if block_size == 0:
                break
            chunks.append(self._read(block_size, 'data sub-block'))
        return b''.join(chunks)

    def _skip_data_blocks(self) -> None:
        while True:
            block_size = self._read(1, 'data sub-block')[0]
            if block_size == 0:
                break
            self._read(block_size, 'data sub-block')

    def _read(self, size: int, what: str) -> bytes:
        data = self._fp.read(size)
        if len(data) < size:
            raise FormatError(f'Unexpected end of stream in {what}')
        return data


def resolve_logical_size(screen: ScreenDescriptor, first: Optional[SubImage]) -> Tuple[int, int]:
    """
    Logical (width, height) of the animation.

    Uses the header dimensions when present, otherwise the size of the first
    stored frame.
    """
    if screen.has_dimensions:
        return screen.width, screen.height
    if first is not None and first.width > 0 and first.height > 0:
        logger.info(
            'Header has no screen size, using first frame size %dx%d',
            first.width, first.height,
        )
        return first.width, first.height
    raise DimensionError('Logical screen size is neither in the header nor in a frame')


def _grayscale_table(size: int) -> np.ndarray:
    table = np.full((size, 4), 255, dtype=np.uint8)
    levels = np.linspace(0, 255, num=size).astype(np.uint8)
    table[:, 0] = levels
    table[:, 1] = levels
    table[:, 2] = levels
    return table


def _to_rgba(indices: bytes, width: int, height: int, color_table: np.ndarray,
             transparent_index: Optional[int]) -> np.ndarray:
    # Out-of-table indices decode as opaque black
    palette = np.zeros((256, 4), dtype=np.uint8)
    palette[:, 3] = 255
    palette[:len(color_table)] = color_table[:256]
    if transparent_index is not None:
        palette[transparent_index] = (0, 0, 0, 0)

    flat = np.zeros((width * height, 4), dtype=np.uint8)
    decoded = np.frombuffer(indices, dtype=np.uint8)
    flat[:len(decoded)] = palette[decoded]
    return flat.reshape(height, width, 4)


def _deinterlace(pixels: np.ndarray) -> np.ndarray:
    height = pixels.shape[0]
    row_order = (
        list(range(0, height, 8))
        + list(range(4, height, 8))
        + list(range(2, height, 4))
        + list(range(1, height, 2))
    )
    result = np.empty_like(pixels)
    result[row_order] = pixels
    return result
