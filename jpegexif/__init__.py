# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
jpegexif - EXIF metadata for JPEG files

Reads the EXIF (TIFF) structure embedded in a JPEG APP1 segment into a
typed tag store, offers accessors for orientation, GPS, date/time and camera
tags, and writes the JPEG back with an updated EXIF segment while leaving
the image data untouched.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from jpegexif.exceptions import (
    JpegExifError,
    DecodeError,
    TruncatedDataError,
    BadByteOrderError,
    SegmentError,
    NotAJpegError,
    MalformedMarkerError,
    MissingExifError,
    PayloadTooLargeError,
    BuildError,
    UnknownTagError,
    TypeMismatchError,
    UnsupportedRotationError,
    ExifIOError,
)
from jpegexif.exif_tags import ExifTagType, IfdGroup, Orientation
from jpegexif.rational import Rational
from jpegexif.exif_tag import ExifTag
from jpegexif.tag_store import TagStore
from jpegexif.tiff_codec import decode, encode
from jpegexif.jpeg_segments import (
    JpegSegmentEditor,
    SegmentRegion,
    locate_exif_segment,
    insert_new,
    replace_existing,
    read_exif_payload,
)
from jpegexif.accessors import (
    GpsLocation,
    orientation_degrees,
    orientation_value_for_rotation,
    rotation_for_orientation_value,
    add_location,
    coerce_to_display_string,
)
from jpegexif.exif_interface import ExifInterface

__all__ = [
    "JpegExifError",
    "DecodeError",
    "TruncatedDataError",
    "BadByteOrderError",
    "SegmentError",
    "NotAJpegError",
    "MalformedMarkerError",
    "MissingExifError",
    "PayloadTooLargeError",
    "BuildError",
    "UnknownTagError",
    "TypeMismatchError",
    "UnsupportedRotationError",
    "ExifIOError",
    "ExifTagType",
    "IfdGroup",
    "Orientation",
    "Rational",
    "ExifTag",
    "TagStore",
    "decode",
    "encode",
    "JpegSegmentEditor",
    "SegmentRegion",
    "locate_exif_segment",
    "insert_new",
    "replace_existing",
    "read_exif_payload",
    "GpsLocation",
    "orientation_degrees",
    "orientation_value_for_rotation",
    "rotation_for_orientation_value",
    "add_location",
    "coerce_to_display_string",
    "ExifInterface",
]
