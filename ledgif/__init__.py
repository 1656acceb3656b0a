"""ledgif package entrypoints."""

from .animation import DecodedFrame, GifAnimation
from .decoder import GifDecoder
from .errors import DimensionError, FormatError, GifDecodeError, UnsupportedFormatError
from .gif_parser import Disposal

__all__ = [
    'DecodedFrame',
    'DimensionError',
    'Disposal',
    'FormatError',
    'GifAnimation',
    'GifDecodeError',
    'GifDecoder',
    'UnsupportedFormatError',
]
