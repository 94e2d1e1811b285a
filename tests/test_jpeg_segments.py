"""Unit tests for the JPEG segment editor."""

import io

import pytest

from jpegexif.exceptions import (
    MalformedMarkerError,
    NotAJpegError,
    PayloadTooLargeError,
    SegmentError,
)
from jpegexif.jpeg_segments import (
    EXIF_HEADER,
    JpegSegmentEditor,
    MAX_APP1_PAYLOAD,
    SegmentRegion,
    build_app1_segment,
    insert_new,
    locate_exif_segment,
    read_exif_payload,
    replace_existing,
)
from jpegexif.tiff_codec import encode

SOI = b'\xff\xd8'
EOI = b'\xff\xd9'


class NonSeekableStream:
    """Minimal read-only stream without seek()."""

    def __init__(self, data: bytes):
        self._buffer = io.BytesIO(data)

    def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


class TestLocate:
    """Test cases for locating the EXIF segment."""

    def test_no_exif(self, plain_jpeg):
        """Test a JPEG without APP1 has no EXIF region."""
        assert locate_exif_segment(plain_jpeg) is None

    def test_exif_found(self, exif_jpeg):
        """Test the region covers the whole APP1 segment."""
        region = locate_exif_segment(exif_jpeg)
        assert region.start == 2
        assert exif_jpeg[region.start:region.start + 2] == b'\xff\xe1'
        assert exif_jpeg[region.start + 4:region.tiff_offset] == EXIF_HEADER
        declared = int.from_bytes(exif_jpeg[region.start + 2:region.start + 4], 'big')
        assert region.end == region.start + 2 + declared

    def test_skips_non_exif_app1(self, make_jpeg, make_segment):
        """Test an XMP APP1 before the EXIF APP1 is skipped."""
        xmp = make_segment(0xFFE1, b'http://ns.adobe.com/xap/1.0/\x00<x:xmpmeta/>')
        exif = build_app1_segment(b'II*\x00\x08\x00\x00\x00\x00\x00\x00\x00\x00\x00')
        data = make_jpeg(xmp + exif)
        region = locate_exif_segment(data)
        assert region.start == 2 + len(xmp)

    def test_skips_fill_bytes_and_standalone_markers(self, make_jpeg):
        """Test fill bytes and TEM before a segment are skipped."""
        exif = build_app1_segment(b'II*\x00\x08\x00\x00\x00\x00\x00\x00\x00\x00\x00')
        data = make_jpeg(b'\xff\x01' + b'\xff\xff' + exif)
        region = locate_exif_segment(data)
        assert data[region.start:region.end] == exif

    def test_stops_at_sos(self, make_segment):
        """Test APP1-like bytes after SOS are not taken for EXIF."""
        sos = make_segment(0xFFDA, b'\x01\x01\x00\x00\x3f\x00')
        fake = build_app1_segment(b'II*\x00\x08\x00\x00\x00\x00\x00\x00\x00\x00\x00')
        assert locate_exif_segment(SOI + sos + fake + EOI) is None

    def test_segments_listed(self, plain_jpeg):
        """Test the editor records header segments up to SOS."""
        editor = JpegSegmentEditor(plain_jpeg)
        markers = [marker for marker, _, _ in editor.segments]
        assert markers == [0xFFE0, 0xFFDB, 0xFFC0, 0xFFDA]


class TestErrors:
    """Test cases for malformed JPEG input."""

    def test_not_a_jpeg(self):
        """Test data without SOI."""
        with pytest.raises(NotAJpegError):
            locate_exif_segment(b'\x89PNG\r\n\x1a\n')
        with pytest.raises(NotAJpegError):
            locate_exif_segment(b'')

    def test_length_past_end(self):
        """Test a declared length running past the buffer."""
        with pytest.raises(MalformedMarkerError):
            locate_exif_segment(SOI + b'\xff\xe0\x00\x20abc')

    def test_length_too_small(self):
        """Test a length field below 2."""
        with pytest.raises(MalformedMarkerError):
            locate_exif_segment(SOI + b'\xff\xe0\x00\x01')

    def test_non_marker_byte(self):
        """Test a non-0xFF byte where a marker is expected."""
        with pytest.raises(MalformedMarkerError):
            locate_exif_segment(SOI + b'\x00\x00')

    def test_errors_are_segment_errors(self):
        """Test the segment errors share the SegmentError base."""
        assert issubclass(NotAJpegError, SegmentError)
        assert issubclass(MalformedMarkerError, SegmentError)
        assert issubclass(PayloadTooLargeError, SegmentError)


class TestInsert:
    """Test cases for inserting a new EXIF segment."""

    def test_insert_after_soi(self, plain_jpeg, sample_store):
        """Test the new APP1 directly follows SOI and the rest is unchanged."""
        payload = encode(sample_store)
        segment = build_app1_segment(payload)
        output = insert_new(plain_jpeg, payload)

        assert output[:2] == SOI
        assert output[2:2 + len(segment)] == segment
        assert output[2 + len(segment):] == plain_jpeg[2:]
        assert output.endswith(EOI)
        assert locate_exif_segment(output).start == 2

    def test_insert_refused_when_exif_exists(self, exif_jpeg):
        """Test inserting into a JPEG that already has EXIF."""
        with pytest.raises(SegmentError):
            insert_new(exif_jpeg, b'II*\x00\x08\x00\x00\x00\x00\x00\x00\x00\x00\x00')


class TestReplace:
    """Test cases for replacing the EXIF segment."""

    @pytest.mark.parametrize("delta", [-20, 0, 500])
    def test_replace_preserves_outside_bytes(self, exif_jpeg, delta):
        """Test smaller, equal and larger payloads leave other bytes intact."""
        region = locate_exif_segment(exif_jpeg)
        old_payload = exif_jpeg[region.tiff_offset:region.end]
        new_payload = (b'\xab' * (len(old_payload) + delta))
        segment = build_app1_segment(new_payload)

        output = replace_existing(exif_jpeg, region, new_payload)

        assert output[:region.start] == exif_jpeg[:region.start]
        assert output[region.start:region.start + len(segment)] == segment
        assert output[region.start + len(segment):] == exif_jpeg[region.end:]
        assert len(output) == len(exif_jpeg) + delta

    def test_replace_invalid_region(self, exif_jpeg):
        """Test a region outside the data is rejected."""
        with pytest.raises(SegmentError):
            replace_existing(exif_jpeg, SegmentRegion(2, len(exif_jpeg) + 10), b'')

    def test_write_exif_chooses_path(self, plain_jpeg, exif_jpeg):
        """Test write_exif inserts or replaces as needed."""
        payload = b'MM\x00*\x00\x00\x00\x08\x00\x00\x00\x00\x00\x00'
        inserted = JpegSegmentEditor(plain_jpeg).write_exif(payload)
        replaced = JpegSegmentEditor(exif_jpeg).write_exif(payload)
        assert JpegSegmentEditor(inserted).get_exif_payload() == payload
        assert JpegSegmentEditor(replaced).get_exif_payload() == payload
        assert len(JpegSegmentEditor(replaced).segments) == len(JpegSegmentEditor(exif_jpeg).segments)


class TestBuildSegment:
    """Test cases for APP1 segment construction."""

    def test_length_field(self):
        """Test the length field counts itself, the header and the payload."""
        segment = build_app1_segment(b'1234')
        assert segment == b'\xff\xe1' + (2 + 6 + 4).to_bytes(2, 'big') + EXIF_HEADER + b'1234'

    def test_payload_limit(self):
        """Test the largest payload fits and one more byte does not."""
        limit = MAX_APP1_PAYLOAD - len(EXIF_HEADER)
        assert len(build_app1_segment(b'\x00' * limit)) == 0xFFFF + 2
        with pytest.raises(PayloadTooLargeError):
            build_app1_segment(b'\x00' * (limit + 1))


class TestReadStream:
    """Test cases for forward-only stream reading."""

    def test_read_payload(self, exif_jpeg):
        """Test the stream reader returns the same payload as the editor."""
        expected = JpegSegmentEditor(exif_jpeg).get_exif_payload()
        assert read_exif_payload(NonSeekableStream(exif_jpeg)) == expected

    def test_read_no_exif(self, plain_jpeg):
        """Test a stream without EXIF yields None."""
        assert read_exif_payload(io.BytesIO(plain_jpeg)) is None

    def test_read_not_a_jpeg(self):
        """Test a stream without SOI."""
        with pytest.raises(NotAJpegError):
            read_exif_payload(io.BytesIO(b'GIF89a'))

    def test_read_truncated_segment(self):
        """Test a segment cut short by the end of the stream."""
        with pytest.raises(MalformedMarkerError):
            read_exif_payload(io.BytesIO(SOI + b'\xff\xe1\x00\x40Exif\x00\x00'))
