import io
import logging
from typing import BinaryIO, Optional

from .animation import GifAnimation
from .compositor import CanvasCompositor
from .gif_parser import GifParser, resolve_logical_size

logger = logging.getLogger(__name__)


class GifDecoder(object):
    """
    Entry points for decoding GIF animations into complete frames.

    Decoding is all-or-nothing: any ``GifDecodeError`` aborts the decode and
    no frames are returned.
    """

    @staticmethod
    def decode_file(file_path: str) -> GifAnimation:
        with open(file_path, 'rb') as fp:
            return GifDecoder.decode_stream(fp, file_path=str(file_path))

    @staticmethod
    def decode_bytes(data: bytes) -> GifAnimation:
        return GifDecoder.decode_stream(io.BytesIO(data))

    @staticmethod
    def decode_stream(fp: BinaryIO, file_path: Optional[str] = None) -> GifAnimation:
        """
        Decode a binary stream positioned at the start of a GIF.

        Raises:
            UnsupportedFormatError: The stream is not a GIF
            FormatError: A block is missing, truncated or malformed
            DimensionError: A frame does not fit the logical screen
        """
        parser = GifParser(fp)
        screen = parser.parse_header()

        compositor = None
        frames = []
        for sub_image in parser.iter_sub_images():
            if compositor is None:
                width, height = resolve_logical_size(screen, sub_image)
                compositor = CanvasCompositor(width, height)
            frames.append(compositor.composite(sub_image))

        if compositor is None:
            width, height = resolve_logical_size(screen, None)

        logger.info(
            'Decoded %d frames at %dx%d%s',
            len(frames), width, height, f' from {file_path}' if file_path else '',
        )
        return GifAnimation(
            width,
            height,
            frames,
            version=screen.version,
            file_path=file_path,
        )
