"""Variable-length-code LZW decompression as used by GIF image data."""

import logging

from .errors import FormatError

logger = logging.getLogger(__name__)

MAX_CODE_SIZE = 12
MAX_CODES = 1 << MAX_CODE_SIZE


class LZWTable(object):
    """Code table of one LZW stream, reset on every clear code."""

    def __init__(self, min_code_size: int):
        self.min_code_size = min_code_size
        self.clear_code = 1 << min_code_size
        self.end_code = self.clear_code + 1
        self.clear()

    def clear(self):
        self.entries = [bytes([i]) for i in range(self.clear_code)] + [b'', b'']
        self.code_size = self.min_code_size + 1
        self.previous = None

    def decode(self, code: int) -> bytes:
        entries = self.entries
        if code < len(entries):
            value = entries[code]
            if self.previous is not None:
                self._add(self.previous + value[:1])
        elif code == len(entries) and self.previous is not None:
            # KwKwK: the code being defined right now
            value = self.previous + self.previous[:1]
            self._add(value)
        else:
            raise FormatError(f'Invalid LZW code {code} (table size {len(entries)})')
        self.previous = value
        return value

    def _add(self, entry: bytes):
        entries = self.entries
        if len(entries) >= MAX_CODES:
            # Table full: keep decoding with the current codes until a clear code arrives
            return
        entries.append(entry)
        if len(entries) == 1 << self.code_size and self.code_size < MAX_CODE_SIZE:
            self.code_size += 1


def lzw_decode(data: bytes, min_code_size: int, pixel_count: int) -> bytes:
    """
    Decompress GIF image data into palette indices.

    Args:
        data: Concatenated payload of the image data sub-blocks
        min_code_size: LZW minimum code size from the image block
        pixel_count: Number of pixels the image needs (width * height)

    Returns:
        At most ``pixel_count`` palette indices. The result is shorter when
        the stream ends early; callers decide how to treat missing pixels.
    """
    table = LZWTable(min_code_size)
    output = bytearray()

    bit_buffer = 0
    bit_count = 0
    pos = 0
    length = len(data)

    while len(output) < pixel_count:
        while bit_count < table.code_size and pos < length:
            bit_buffer |= data[pos] << bit_count
            bit_count += 8
            pos += 1
        if pos == length and bit_count < 8 and bit_buffer == 0:
            # Only the zero fill of the final byte is left
            logger.debug('LZW data exhausted without end code')
            break
        if bit_count < table.code_size:
            logger.debug('LZW data exhausted without end code')
            break

        code = bit_buffer & ((1 << table.code_size) - 1)
        bit_buffer >>= table.code_size
        bit_count -= table.code_size

        if code == table.clear_code:
            table.clear()
        elif code == table.end_code:
            break
        else:
            output += table.decode(code)

    return bytes(output[:pixel_count])
