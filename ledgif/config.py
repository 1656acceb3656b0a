"""
Configuration constants for the GIF frame decoder.
"""


class Config:
    """Configuration constants for the GIF frame decoder."""

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'

    # Output directory
    OUTPUT_DIR = 'out'

    # Input files picked up by `ledgif batch`
    GIF_SUFFIX = '.gif'

    # Export settings
    EXPORT_FORMATS = ('webp', 'png')
    DEFAULT_EXPORT_FORMAT = 'webp'
    WEBP_LOSSLESS = True
    WEBP_LOOP = 0  # 0 = loop forever
    FRAME_FILENAME = 'frame_{index:04d}.png'
    CSV_BASENAME = 'frames.csv'

    # Frame table columns (attribute -> column header)
    FIELD_MAPPINGS = {
        "index": "Frame",
        "delay": "Delay (1/100 s)",
        "duration_ms": "Duration (ms)",
        "disposal": "Disposal",
        "opaque_pixels": "Opaque Pixels",
    }
