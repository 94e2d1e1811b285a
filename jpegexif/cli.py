# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for jpegexif

Reads EXIF from JPEG files and performs the common edits: rotation through
the Orientation tag, date/time stamping and geotagging.

Copyright 2025 DNAi inc.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from jpegexif import __version__
from jpegexif.accessors import coerce_to_display_string
from jpegexif.exceptions import JpegExifError
from jpegexif.exif_interface import ExifInterface
from jpegexif.exif_tags import TAG_DATE_TIME, TAG_ORIENTATION

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def format_output(metadata: Dict[str, str], format_type: str = "text") -> str:
    """
    Format tag values based on format type.

    Args:
        metadata: Dictionary of 'Group:TagName' to display value
        format_type: Output format ('text', 'json', 'csv')

    Returns:
        Formatted output string
    """
    if format_type == "json":
        return json.dumps(metadata, indent=2, ensure_ascii=False)
    elif format_type == "csv":
        lines = ["Tag,Value"]
        for tag, value in metadata.items():
            value_str = str(value).replace('"', '""')
            lines.append(f'"{tag}","{value_str}"')
        return "\n".join(lines)
    else:
        return "\n".join(f"{tag}: {value}" for tag, value in metadata.items())


def collect_metadata(exif: ExifInterface) -> Dict[str, str]:
    metadata = {}
    for tag in exif.get_all_tags():
        metadata[f"{tag.group.value}:{tag.name}"] = coerce_to_display_string(tag)
    if exif.store.thumbnail:
        metadata["IFD1:ThumbnailImage"] = f"(Binary data {len(exif.store.thumbnail)} bytes)"
    return metadata


def _read_file(path: Path) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def _write_result(exif: ExifInterface, source: Path, output: Optional[Path]) -> int:
    target = output or source
    written = exif.write_exif(_read_file(source), target)
    print(f"Wrote {written} bytes to {target}")
    return written


def cmd_read(args: argparse.Namespace) -> int:
    exif = ExifInterface()
    exif.read_exif(args.file)
    print(format_output(collect_metadata(exif), args.format))
    return 0


def cmd_orientation(args: argparse.Namespace) -> int:
    exif = ExifInterface()
    exif.read_exif(args.file)
    print(exif.orientation_degrees())
    return 0


def cmd_rotate(args: argparse.Namespace) -> int:
    exif = ExifInterface()
    orientation = exif.get_orientation_value_for_rotation(args.degrees)
    exif.set_tag(exif.build_tag(TAG_ORIENTATION, orientation))
    in_place = exif.force_rewrite_exif(args.file)
    logger.info("Orientation of %s set to %d (%s)", args.file, orientation,
                "in place" if in_place else "file rewritten")
    return 0


def cmd_stamp(args: argparse.Namespace) -> int:
    exif = ExifInterface()
    exif.read_exif(args.file)
    exif.add_date_time_stamp(TAG_DATE_TIME, time.time())
    _write_result(exif, args.file, args.output)
    return 0


def cmd_locate(args: argparse.Namespace) -> int:
    exif = ExifInterface()
    exif.read_exif(args.file)
    exif.add_location(args.latitude, args.longitude, args.altitude, time.time())
    _write_result(exif, args.file, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jpegexif",
        description="jpegexif - Read and edit EXIF metadata of JPEG files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show all tags
  jpegexif read photo.jpg

  # Show the rotation stored in the Orientation tag
  jpegexif orientation photo.jpg

  # Mark the image as rotated 90 degrees clockwise
  jpegexif rotate photo.jpg 90

  # Geotag into a new file
  jpegexif locate photo.jpg 48.8584 2.2945 --altitude 35 -o tagged.jpg
""",
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    read_parser = subparsers.add_parser('read', help="Print the EXIF tags of a JPEG file")
    read_parser.add_argument('file', type=Path)
    read_parser.add_argument('--format', choices=['text', 'json', 'csv'], default='text',
                             help="Output format (default: text)")
    read_parser.set_defaults(func=cmd_read)

    orientation_parser = subparsers.add_parser(
        'orientation', help="Print the clockwise rotation stored in the EXIF")
    orientation_parser.add_argument('file', type=Path)
    orientation_parser.set_defaults(func=cmd_orientation)

    rotate_parser = subparsers.add_parser(
        'rotate', help="Set the EXIF orientation (the file must already have EXIF)")
    rotate_parser.add_argument('file', type=Path)
    rotate_parser.add_argument('degrees', type=int, help="Clockwise rotation, a multiple of 90")
    rotate_parser.set_defaults(func=cmd_rotate)

    stamp_parser = subparsers.add_parser('stamp', help="Set DateTime to the current time")
    stamp_parser.add_argument('file', type=Path)
    stamp_parser.add_argument('-o', '--output', type=Path, help="Output file (default: in place)")
    stamp_parser.set_defaults(func=cmd_stamp)

    locate_parser = subparsers.add_parser('locate', help="Write GPS position tags")
    locate_parser.add_argument('file', type=Path)
    locate_parser.add_argument('latitude', type=float)
    locate_parser.add_argument('longitude', type=float)
    locate_parser.add_argument('--altitude', type=float, default=0.0,
                               help="Metres above sea level (0 leaves altitude unset)")
    locate_parser.add_argument('-o', '--output', type=Path, help="Output file (default: in place)")
    locate_parser.set_defaults(func=cmd_locate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except (JpegExifError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
