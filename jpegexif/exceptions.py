# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for jpegexif

This module defines the error taxonomy used by the tag store, the TIFF
codec and the JPEG segment editor. Every error raised for malformed input
or invalid tag values derives from JpegExifError.

Copyright 2025 DNAi inc.
"""


class JpegExifError(Exception):
    """
    Base exception for all jpegexif errors.

    All jpegexif exceptions inherit from this class, allowing
    catch-all error handling for any EXIF-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class DecodeError(JpegExifError):
    """
    Raised when an EXIF (TIFF) region cannot be decoded.

    This exception is raised when:
    - The TIFF magic number is wrong
    - An IFD chain loops back on itself
    """
    pass


class TruncatedDataError(DecodeError):
    """
    Raised when an offset or component count runs past the end of the buffer.
    """
    pass


class BadByteOrderError(DecodeError):
    """
    Raised when the TIFF byte-order marker is neither "II" nor "MM".
    """
    pass


class SegmentError(JpegExifError):
    """
    Raised when the JPEG container cannot be scanned or spliced.
    """
    pass


class NotAJpegError(SegmentError):
    """
    Raised when the byte stream does not begin with the SOI marker.
    """
    pass


class MalformedMarkerError(SegmentError):
    """
    Raised when a marker segment is malformed.

    This exception is raised when:
    - A marker declares a length that runs past the end of the buffer
    - A declared length is smaller than the length field itself
    - A non-marker byte appears where a marker is expected
    """
    pass


class MissingExifError(SegmentError):
    """
    Raised when an in-place rewrite is requested for a file without EXIF.
    """
    pass


class PayloadTooLargeError(SegmentError):
    """
    Raised when an EXIF payload does not fit in a single APP1 segment.
    """
    pass


class BuildError(JpegExifError):
    """
    Raised when a tag cannot be built from the given value.
    """
    pass


class UnknownTagError(BuildError):
    """
    Raised when a tag id is not defined, or not allowed in the requested IFD.
    """
    pass


class TypeMismatchError(BuildError):
    """
    Raised when a value does not match the tag's defined type or count.

    This exception is raised when:
    - The Python type of the value is not accepted for the tag's data type
    - An integer is out of range for the tag's data type
    - The number of components differs from the defined component count
    """
    pass


class UnsupportedRotationError(JpegExifError, ValueError):
    """
    Raised when a rotation is not a multiple of 90 degrees.
    """
    pass


class ExifIOError(JpegExifError):
    """
    Raised when reading from or writing to a byte source or sink fails.

    The underlying OSError is chained as __cause__.
    """
    pass
