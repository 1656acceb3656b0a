"""
GIF Frame Decoder
Turns GIF animations into complete RGBA frames for LED matrix displays.

Commands:
- info:   summary and per-frame table
- export: composited frames as animated WebP or PNG sequence
- csv:    per-frame table as CSV
- batch:  every GIF in a folder to WebP
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd
from tqdm import tqdm

from .config import Config
from .decoder import GifDecoder
from .errors import GifDecodeError


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def append_timestamp(filename: str) -> str:
    """``frames.csv`` -> ``frames_2024-01-31_12-00-00.csv``"""
    path = Path(filename)
    stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    return str(path.with_name(f"{path.stem}_{stamp}{path.suffix}"))


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else Config.LOG_LEVEL
    logging.basicConfig(level=level, format=Config.LOG_FORMAT)


# ============================================================================
# DATA EXPORTER
# ============================================================================

class DataExporter:
    """Writes per-frame tables next to the exported frames."""

    @staticmethod
    def export_to_csv(df: pd.DataFrame, base_filename: str, output_dir: str = None) -> str:
        """Write ``df`` as a timestamped CSV in ``output_dir`` and return its path."""
        target = Path(output_dir or Config.OUTPUT_DIR)
        target.mkdir(parents=True, exist_ok=True)

        filepath = str(target / append_timestamp(base_filename))
        df.to_csv(filepath, index=False)
        print(f"[OK] Exported: {filepath}")
        return filepath


# ============================================================================
# DECODING
# ============================================================================

def decode_gif_file(
    gif_path: str,
    output_dir: str = None,
    export_format: str = None,
    scale: Union[int, float] = 1,
    target_width: int = None,
    target_height: int = None,
) -> str:
    """
    Decode a single GIF and write its composited frames.

    Args:
        gif_path: Path to the GIF file
        output_dir: Output directory (default: Config.OUTPUT_DIR)
        export_format: 'webp' for one animated file, 'png' for one file per frame
        scale: Optional scale factor for output images
        target_width: Optional explicit width
        target_height: Optional explicit height

    Returns:
        Path to the WebP file or to the folder of PNG frames
    """
    if output_dir is None:
        output_dir = Config.OUTPUT_DIR
    if export_format is None:
        export_format = Config.DEFAULT_EXPORT_FORMAT
    if export_format not in Config.EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {export_format}")

    os.makedirs(output_dir, exist_ok=True)
    base_name = os.path.splitext(os.path.basename(gif_path))[0]

    animation = GifDecoder.decode_file(gif_path)

    if export_format == 'webp':
        out_path = os.path.join(output_dir, f"{base_name}.webp")
        animation.save_to_webp(
            out_path,
            scale=scale,
            target_width=target_width,
            target_height=target_height,
        )
    else:
        out_path = os.path.join(output_dir, base_name)
        animation.save_frames(
            out_path,
            scale=scale,
            target_width=target_width,
            target_height=target_height,
        )
    return out_path


def decode_gif_files(
    file_paths: List[str],
    output_dir: str = None,
    scale: Union[int, float] = 1,
) -> List[str]:
    """
    Decode several GIFs to WebP, reporting failures without stopping.

    Returns:
        List of generated .webp file paths
    """
    if not file_paths:
        print("No GIF files to decode.")
        return []

    outputs: List[str] = []
    for path in tqdm(file_paths, desc="Decoding GIFs"):
        try:
            outputs.append(decode_gif_file(path, output_dir=output_dir, scale=scale))
        except (GifDecodeError, OSError) as e:
            tqdm.write(f"  [ERROR] {os.path.basename(path)}: {e}")

    print(f"\n[OK] Decoded {len(outputs)}/{len(file_paths)} files")
    return outputs


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_info(args: argparse.Namespace) -> None:
    animation = GifDecoder.decode_file(args.file)

    print("=" * 70)
    print(f"GIF{animation.version}: {args.file}")
    print("=" * 70)
    print(f"  Size: {animation.width}x{animation.height}")
    print(f"  Frames: {animation.total_frames}")
    print(f"  Duration: {animation.total_duration_ms} ms")
    print("\n" + "-" * 70)
    if animation.total_frames:
        print(animation.to_dataframe().to_string(index=False))


def cmd_export(args: argparse.Namespace) -> None:
    out_path = decode_gif_file(
        args.file,
        output_dir=args.output,
        export_format=args.format,
        scale=args.scale,
        target_width=args.width,
        target_height=args.height,
    )
    print(f"[OK] Decoded -> {out_path}")


def cmd_csv(args: argparse.Namespace) -> None:
    animation = GifDecoder.decode_file(args.file)
    base_name = Path(args.file).stem + "_" + Config.CSV_BASENAME
    DataExporter.export_to_csv(animation.to_dataframe(), base_name, output_dir=args.output)


def cmd_batch(args: argparse.Namespace) -> None:
    folder = Path(args.folder)
    file_paths = sorted(
        str(p) for p in folder.iterdir() if p.suffix.lower() == Config.GIF_SUFFIX
    )
    decode_gif_files(file_paths, output_dir=args.output, scale=args.scale)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ledgif',
        description='Decode GIF animations into complete RGBA frames',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    info_parser = subparsers.add_parser('info', help='Show size, timing and disposal of each frame')
    info_parser.add_argument('file', help='Path to GIF file')
    info_parser.set_defaults(func=cmd_info)

    export_parser = subparsers.add_parser('export', help='Write the composited frames')
    export_parser.add_argument('file', help='Path to GIF file')
    export_parser.add_argument('-o', '--output', default=Config.OUTPUT_DIR, help='Output directory')
    export_parser.add_argument(
        '--format', choices=Config.EXPORT_FORMATS, default=Config.DEFAULT_EXPORT_FORMAT,
        help='Animated WebP or one PNG per frame',
    )
    export_parser.add_argument('--scale', type=float, default=1, help='Scale factor')
    export_parser.add_argument('--width', type=int, help='Target width in pixels')
    export_parser.add_argument('--height', type=int, help='Target height in pixels')
    export_parser.set_defaults(func=cmd_export)

    csv_parser = subparsers.add_parser('csv', help='Export the frame table to CSV')
    csv_parser.add_argument('file', help='Path to GIF file')
    csv_parser.add_argument('-o', '--output', default=Config.OUTPUT_DIR, help='Output directory')
    csv_parser.set_defaults(func=cmd_csv)

    batch_parser = subparsers.add_parser('batch', help='Decode every GIF in a folder to WebP')
    batch_parser.add_argument('folder', help='Folder containing GIF files')
    batch_parser.add_argument('-o', '--output', default=Config.OUTPUT_DIR, help='Output directory')
    batch_parser.add_argument('--scale', type=float, default=1, help='Scale factor')
    batch_parser.set_defaults(func=cmd_batch)

    return parser


# ============================================================================
# ENTRY POINT
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        args.func(args)
    except (GifDecodeError, OSError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
