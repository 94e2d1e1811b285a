# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF utility functions

Convenience helpers for applications. Unlike ExifInterface, these helpers do
not raise on expected failures (unreadable files, malformed JPEG or EXIF):
the failure is logged and a neutral value is returned.

Copyright 2025 DNAi inc.
"""

import logging
import time
from pathlib import Path
from typing import BinaryIO, Optional, Union

from jpegexif.accessors import GpsLocation, orientation_degrees
from jpegexif.exceptions import JpegExifError
from jpegexif.exif_interface import ExifInterface
from jpegexif.exif_tags import TAG_DATE_TIME, TAG_ORIENTATION

logger = logging.getLogger(__name__)


def add_location_to_exif(exif: ExifInterface, location: GpsLocation) -> None:
    """
    Add a location fix to the given EXIF.

    Args:
        exif: EXIF to add the GPS tags to
        location: Position, altitude and time of the fix
    """
    exif.add_location(location.latitude, location.longitude,
                      location.altitude or 0.0, location.time)


def get_exif(jpeg: bytes) -> ExifInterface:
    """Read the EXIF of JPEG data; an empty interface if it cannot be read."""
    exif = ExifInterface()
    try:
        exif.read_exif(jpeg)
    except JpegExifError:
        logger.warning("Failed to read EXIF data", exc_info=True)
    return exif


def get_orientation(exif: Union[ExifInterface, bytes, None]) -> int:
    """
    Clockwise rotation of the image in degrees: 0, 90, 180 or 270.

    Args:
        exif: An ExifInterface, JPEG data, or None
    """
    if exif is None:
        return 0
    if not isinstance(exif, ExifInterface):
        exif = get_exif(exif)
    return orientation_degrees(exif.store)


def get_rotation_from_exif(source: Union[str, Path, BinaryIO]) -> int:
    """
    Clockwise rotation stored in a JPEG file or stream; 0 if it cannot be read.
    """
    exif = ExifInterface()
    try:
        exif.read_exif(source)
    except JpegExifError:
        logger.warning("Getting exif data failed", exc_info=True)
        return 0
    return orientation_degrees(exif.store)


def write_file(path: Union[str, Path], jpeg: bytes, exif: Optional[ExifInterface] = None) -> int:
    """
    Write JPEG data to a file, with the given EXIF if any.

    Args:
        path: Target file
        jpeg: JPEG data
        exif: EXIF to embed; the data is written unchanged when None

    Returns:
        Size of the written file, -1 on failure
    """
    if exif is not None:
        try:
            return exif.write_exif(jpeg, path)
        except JpegExifError:
            logger.error("Failed to write data", exc_info=True)
            return -1

    try:
        with open(path, 'wb') as f:
            f.write(jpeg)
    except OSError:
        logger.error("Failed to write data", exc_info=True)
        return -1
    return len(jpeg)


def rotate_in_jpeg_exif(path: Union[str, Path], rotation_degrees: int) -> bool:
    """
    Rotate an image by updating its EXIF orientation.

    The file must already have EXIF. In the worst case the whole file is
    rewritten.

    Returns:
        True on success, False if the rotation or the file was rejected
    """
    exif = ExifInterface()
    try:
        orientation = exif.get_orientation_value_for_rotation(rotation_degrees)
        exif.set_tag(exif.build_tag(TAG_ORIENTATION, orientation))
    except JpegExifError:
        logger.warning("Cannot build orientation tag for %s degrees", rotation_degrees)
        return False

    try:
        exif.force_rewrite_exif(path)
    except JpegExifError:
        logger.warning("Cannot set exif data: %s", path, exc_info=True)
        return False
    return True


def add_exif(jpeg: bytes, timestamp: Optional[float] = None) -> bytes:
    """
    Add basic EXIF (a DateTime tag) to JPEG data so it can be rewritten later.

    Args:
        jpeg: JPEG data
        timestamp: Seconds since the epoch; now when None

    Returns:
        The JPEG data with EXIF, or b'' if it could not be written
    """
    exif = ExifInterface()
    if timestamp is None:
        timestamp = time.time()
    try:
        exif.add_date_time_stamp(TAG_DATE_TIME, timestamp)
        return exif.write_exif(jpeg)
    except JpegExifError:
        logger.error("Could not write EXIF", exc_info=True)
        return b''
