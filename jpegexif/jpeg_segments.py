# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG segment editor

This module locates the EXIF APP1 segment of a JPEG stream and splices a
new EXIF payload in, either as a fresh segment after SOI or in place of the
existing one. Every byte outside the edited segment is copied unchanged.

Copyright 2025 DNAi inc.
"""

import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple

from jpegexif.exceptions import (
    MalformedMarkerError,
    NotAJpegError,
    PayloadTooLargeError,
    SegmentError,
)

# JPEG markers
SOI = 0xFFD8  # Start of Image
EOI = 0xFFD9  # End of Image
SOS = 0xFFDA  # Start of Scan
APP0 = 0xFFE0  # APP0 (JFIF)
APP1 = 0xFFE1  # APP1 (EXIF)
TEM = 0xFF01

EXIF_HEADER = b'Exif\x00\x00'

# Largest payload an APP1 segment can carry (length field minus itself)
MAX_APP1_PAYLOAD = 0xFFFF - 2

SOI_BYTES = struct.pack('>H', SOI)


def _is_standalone(marker: int) -> bool:
    # RST0-RST7 and TEM carry no length field
    return 0xFFD0 <= marker <= 0xFFD7 or marker == TEM


@dataclass(frozen=True)
class SegmentRegion:
    """
    Byte range [start, end) of the EXIF APP1 segment.

    ``start`` is the 0xFF of the marker and ``end`` is one past the last
    payload byte.
    """
    start: int
    end: int

    @property
    def tiff_offset(self) -> int:
        """Offset of the TIFF header (marker, length and 'Exif\\0\\0' skipped)."""
        return self.start + 4 + len(EXIF_HEADER)

    @property
    def length(self) -> int:
        return self.end - self.start


def build_app1_segment(tiff_payload: bytes) -> bytes:
    """
    Wrap a TIFF payload into a complete APP1 segment.

    Args:
        tiff_payload: Encoded TIFF structure

    Returns:
        Segment bytes: FF E1, big-endian length, 'Exif\\0\\0', payload

    Raises:
        PayloadTooLargeError: If the payload does not fit one APP1 segment
    """
    payload = EXIF_HEADER + tiff_payload
    if len(payload) > MAX_APP1_PAYLOAD:
        raise PayloadTooLargeError(
            f"EXIF payload of {len(payload)} bytes exceeds the APP1 limit of "
            f"{MAX_APP1_PAYLOAD} bytes"
        )
    return struct.pack('>HH', APP1, len(payload) + 2) + payload


class JpegSegmentEditor:
    """
    Parses the marker segments of a JPEG stream up to the start of scan.

    The parsed header segments are kept as (marker, offset, length) tuples,
    ``length`` being the value of the segment's length field.
    """

    def __init__(self, data: bytes):
        """
        Initialize the editor.

        Args:
            data: Complete JPEG file data

        Raises:
            NotAJpegError: If data does not start with SOI
            MalformedMarkerError: If the marker structure is inconsistent
        """
        self.data = bytes(data)
        self.segments: List[Tuple[int, int, int]] = []
        self._parse_segments()

    def _parse_segments(self) -> None:
        data = self.data
        if len(data) < 2 or data[0:2] != SOI_BYTES:
            raise NotAJpegError("Invalid JPEG file: missing SOI marker")

        i = 2
        while i < len(data):
            if data[i] != 0xFF:
                raise MalformedMarkerError(
                    f"Expected marker at offset {i}, found 0x{data[i]:02X}"
                )

            # Fill bytes: any number of 0xFF may precede a marker code
            while i < len(data) and data[i] == 0xFF:
                i += 1
            if i >= len(data):
                break

            start = i - 1
            marker = 0xFF00 | data[i]
            i += 1

            if marker == 0xFF00 or marker == SOI:
                raise MalformedMarkerError(
                    f"Invalid marker 0x{marker:04X} at offset {start}"
                )
            if _is_standalone(marker):
                continue
            if marker == EOI:
                break

            if i + 2 > len(data):
                raise MalformedMarkerError(
                    f"Segment 0x{marker:04X} at offset {start} has no length field"
                )
            length = struct.unpack('>H', data[i:i + 2])[0]
            if length < 2:
                raise MalformedMarkerError(
                    f"Segment 0x{marker:04X} at offset {start} has invalid length {length}"
                )
            if i + length > len(data):
                raise MalformedMarkerError(
                    f"Segment 0x{marker:04X} at offset {start} declares {length} bytes, "
                    f"past end of data"
                )

            self.segments.append((marker, start, length))
            i += length

            if marker == SOS:
                # Entropy-coded data follows; no more header segments
                break

    def _is_exif_segment(self, marker: int, offset: int, length: int) -> bool:
        if marker != APP1 or length < 2 + len(EXIF_HEADER):
            return False
        return self.data[offset + 4:offset + 4 + len(EXIF_HEADER)] == EXIF_HEADER

    def locate_exif_segment(self) -> Optional[SegmentRegion]:
        """
        Find the first APP1 segment whose payload starts with 'Exif\\0\\0'.

        Returns:
            Region of the segment, or None if the stream has no EXIF
        """
        for marker, offset, length in self.segments:
            if self._is_exif_segment(marker, offset, length):
                return SegmentRegion(offset, offset + 2 + length)
        return None

    def get_exif_payload(self) -> Optional[bytes]:
        """Return the TIFF bytes of the EXIF segment, or None if absent."""
        region = self.locate_exif_segment()
        if region is None:
            return None
        return self.data[region.tiff_offset:region.end]

    def insert_new(self, tiff_payload: bytes) -> bytes:
        """
        Insert a new EXIF segment directly after SOI.

        Raises:
            SegmentError: If the stream already has an EXIF segment
        """
        if self.locate_exif_segment() is not None:
            raise SegmentError("JPEG already contains an EXIF segment; replace it instead")
        segment = build_app1_segment(tiff_payload)
        return self.data[:2] + segment + self.data[2:]

    def replace_existing(self, region: SegmentRegion, tiff_payload: bytes) -> bytes:
        """
        Replace the bytes of ``region`` with a new EXIF segment.

        The new segment may be smaller, larger or the same size as the old
        one; all bytes outside the region are copied unchanged.
        """
        if region.start < 2 or region.end > len(self.data) or region.start >= region.end:
            raise SegmentError(
                f"Region [{region.start}, {region.end}) is outside the JPEG data"
            )
        segment = build_app1_segment(tiff_payload)
        return self.data[:region.start] + segment + self.data[region.end:]

    def write_exif(self, tiff_payload: bytes) -> bytes:
        """Replace the EXIF segment if present, insert one otherwise."""
        region = self.locate_exif_segment()
        if region is None:
            return self.insert_new(tiff_payload)
        return self.replace_existing(region, tiff_payload)


def locate_exif_segment(data: bytes) -> Optional[SegmentRegion]:
    """
    Locate the EXIF APP1 segment of a JPEG buffer.

    Raises:
        NotAJpegError: If data does not start with SOI
        MalformedMarkerError: If the marker structure is inconsistent
    """
    return JpegSegmentEditor(data).locate_exif_segment()


def insert_new(data: bytes, tiff_payload: bytes) -> bytes:
    """Insert an EXIF segment after SOI of a JPEG that has none."""
    return JpegSegmentEditor(data).insert_new(tiff_payload)


def replace_existing(data: bytes, region: SegmentRegion, tiff_payload: bytes) -> bytes:
    """Replace the EXIF segment at ``region`` with one carrying ``tiff_payload``."""
    return JpegSegmentEditor(data).replace_existing(region, tiff_payload)


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    chunk = stream.read(size)
    if chunk is None or len(chunk) != size:
        raise MalformedMarkerError(f"Unexpected end of stream while reading {what}")
    return chunk


def read_exif_payload(stream: BinaryIO) -> Optional[bytes]:
    """
    Read a JPEG stream forward until the EXIF segment and return its TIFF bytes.

    Only read() is used, so the stream does not need to be seekable. Reading
    stops at the EXIF segment, at SOS or at EOI.

    Args:
        stream: Binary stream positioned at the start of the JPEG

    Returns:
        The TIFF payload, or None if the stream has no EXIF segment

    Raises:
        NotAJpegError: If the stream does not start with SOI
        MalformedMarkerError: If the marker structure is inconsistent
    """
    head = stream.read(2)
    if head != SOI_BYTES:
        raise NotAJpegError("Invalid JPEG file: missing SOI marker")

    offset = 2
    while True:
        byte = stream.read(1)
        if not byte:
            return None
        if byte[0] != 0xFF:
            raise MalformedMarkerError(
                f"Expected marker at offset {offset}, found 0x{byte[0]:02X}"
            )
        offset += 1

        code = 0xFF
        while code == 0xFF:
            byte = stream.read(1)
            if not byte:
                return None
            code = byte[0]
            offset += 1

        marker = 0xFF00 | code
        if marker == 0xFF00 or marker == SOI:
            raise MalformedMarkerError(f"Invalid marker 0x{marker:04X} at offset {offset - 2}")
        if _is_standalone(marker):
            continue
        if marker == EOI:
            return None

        length = struct.unpack('>H', _read_exact(stream, 2, "segment length"))[0]
        if length < 2:
            raise MalformedMarkerError(
                f"Segment 0x{marker:04X} at offset {offset - 2} has invalid length {length}"
            )
        body = _read_exact(stream, length - 2, f"segment 0x{marker:04X}")
        offset += length

        if marker == APP1 and body.startswith(EXIF_HEADER):
            return body[len(EXIF_HEADER):]
        if marker == SOS:
            return None
