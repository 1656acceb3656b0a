"""Exceptions raised while decoding a GIF animation."""


class GifDecodeError(Exception):
    """Base class for every decode failure."""


class UnsupportedFormatError(GifDecodeError):
    """The stream does not start with a GIF signature."""


class FormatError(GifDecodeError):
    """A required block is missing, truncated or malformed."""


class DimensionError(GifDecodeError):
    """A frame does not fit the logical screen, or no size can be resolved."""
