"""Unit tests for the TIFF/EXIF codec."""

import struct

import pytest

from jpegexif.exceptions import BadByteOrderError, DecodeError, TruncatedDataError
from jpegexif.exif_tags import (
    ExifTagType,
    IfdGroup,
    TAG_DATE_TIME,
    TAG_GPS_ALTITUDE_REF,
    TAG_GPS_LATITUDE,
    TAG_GPS_LATITUDE_REF,
    TAG_GPS_VERSION_ID,
    TAG_IMAGE_WIDTH,
    TAG_INTEROPERABILITY_INDEX,
    TAG_MAKE,
    TAG_ORIENTATION,
    TAG_STRIP_OFFSETS,
)
from jpegexif.rational import Rational
from jpegexif.tag_store import TagStore
from jpegexif.tiff_codec import decode, encode


def _full_store(sample_store):
    store = sample_store
    store.set(store.build(TAG_GPS_VERSION_ID, [2, 3, 0, 0]))
    store.set(store.build(TAG_GPS_LATITUDE_REF, "S"))
    store.set(store.build(TAG_GPS_LATITUDE, [(33, 1), (51, 1), (3540, 100)]))
    store.set(store.build(TAG_GPS_ALTITUDE_REF, 1))
    store.set(store.build(TAG_INTEROPERABILITY_INDEX, "R98", IfdGroup.INTEROPERABILITY))
    store.set(store.build(TAG_IMAGE_WIDTH, 160, IfdGroup.THUMBNAIL))
    return store


class TestRoundTrip:
    """Test cases for encode/decode round trips."""

    @pytest.mark.parametrize("byte_order", ['<', '>'])
    def test_round_trip(self, sample_store, byte_order):
        """Test a store with all IFD groups survives encode then decode."""
        store = _full_store(sample_store)
        decoded = decode(encode(store, byte_order))

        assert decoded == store
        assert decoded.byte_order == byte_order
        assert decoded.thumbnail == store.thumbnail

    def test_marker_matches_byte_order(self, sample_store):
        """Test the header carries the requested byte-order marker."""
        assert encode(sample_store, '<')[:4] == b'II*\x00'
        assert encode(sample_store, '>')[:4] == b'MM\x00*'

    def test_store_byte_order_is_default(self, sample_store):
        """Test the store's own byte order is used when none is given."""
        sample_store.byte_order = '>'
        assert encode(sample_store)[:2] == b'MM'
        sample_store.byte_order = None
        assert encode(sample_store)[:2] == b'II'

    def test_invalid_byte_order(self, sample_store):
        """Test an unknown byte order is rejected."""
        with pytest.raises(ValueError):
            encode(sample_store, 'x')

    def test_deterministic(self, sample_store):
        """Test encoding the same store twice yields identical bytes."""
        assert encode(sample_store) == encode(sample_store)

    def test_decode_with_offset(self, sample_store):
        """Test decoding a TIFF structure that starts inside a buffer."""
        data = b'Exif\x00\x00' + encode(sample_store)
        assert decode(data, 6) == sample_store


class TestLayout:
    """Test cases for the encoded layout."""

    def test_single_tag_layout(self):
        """Test the exact bytes of a one-tag IFD0."""
        store = TagStore()
        store.set(store.build(TAG_ORIENTATION, 6))
        expected = (
            b'II*\x00' + struct.pack('<I', 8)
            + struct.pack('<H', 1)
            + struct.pack('<HHI', TAG_ORIENTATION, ExifTagType.SHORT, 1) + b'\x06\x00\x00\x00'
            + struct.pack('<I', 0)
        )
        assert encode(store) == expected

    def test_entries_sorted_by_id(self):
        """Test entries are written in ascending tag id order."""
        store = TagStore()
        store.set(store.build(TAG_DATE_TIME, "2024:01:02 03:04:05"))
        store.set(store.build(TAG_MAKE, "Canon"))
        decoded = decode(encode(store))
        assert [tag.tag_id for tag in decoded.all_tags()] == [TAG_MAKE, TAG_DATE_TIME]

    def test_large_value_goes_to_data_area(self):
        """Test values over 4 bytes are stored after the directory."""
        store = TagStore()
        store.set(store.build(TAG_MAKE, "Canon EOS"))
        data = encode(store)
        # header + count + one entry + next pointer
        data_start = 8 + 2 + 12 + 4
        offset = struct.unpack_from('<I', data, 8 + 2 + 8)[0]
        assert offset == data_start
        assert data[data_start:data_start + 10] == b'Canon EOS\x00'

    def test_ifd1_strip_tags_dropped(self):
        """Test uncompressed thumbnail strip offsets do not survive decoding."""
        store = TagStore()
        store.set(store.build(TAG_ORIENTATION, 1))
        store.set(store.build(TAG_STRIP_OFFSETS, 100, IfdGroup.THUMBNAIL))
        store.set(store.build(TAG_IMAGE_WIDTH, 160, IfdGroup.THUMBNAIL))
        decoded = decode(encode(store))
        assert decoded.get(TAG_STRIP_OFFSETS, IfdGroup.THUMBNAIL) is None
        assert decoded.get_int_value(TAG_IMAGE_WIDTH, IfdGroup.THUMBNAIL) == 160


class TestDecodeErrors:
    """Test cases for malformed TIFF input."""

    def test_bad_byte_order(self):
        """Test an unknown byte-order marker."""
        with pytest.raises(BadByteOrderError):
            decode(b'XX*\x00\x08\x00\x00\x00\x00\x00\x00\x00\x00\x00')

    def test_bad_magic(self):
        """Test a wrong magic number."""
        with pytest.raises(DecodeError):
            decode(b'II+\x00\x08\x00\x00\x00\x00\x00\x00\x00\x00\x00')

    def test_short_header(self):
        """Test data too short for the header."""
        with pytest.raises(TruncatedDataError):
            decode(b'II*\x00')

    def test_ifd0_offset_outside_buffer(self):
        """Test an IFD0 offset pointing past the data."""
        with pytest.raises(TruncatedDataError):
            decode(b'II*\x00' + struct.pack('<I', 1000))

    def test_truncated_value(self):
        """Test a value that runs past the end of the data."""
        store = TagStore()
        store.set(store.build(TAG_MAKE, "Canon EOS"))
        with pytest.raises(TruncatedDataError):
            decode(encode(store)[:-4])

    def test_ifd_loop(self):
        """Test an IFD chain pointing back at itself."""
        data = b'II*\x00' + struct.pack('<I', 8) + struct.pack('<H', 0) + struct.pack('<I', 8)
        with pytest.raises(DecodeError):
            decode(data)

    def test_unknown_type_skipped(self):
        """Test entries with an unknown type code are skipped."""
        data = (
            b'II*\x00' + struct.pack('<I', 8)
            + struct.pack('<H', 2)
            + struct.pack('<HHI', TAG_ORIENTATION, ExifTagType.SHORT, 1) + b'\x06\x00\x00\x00'
            + struct.pack('<HHII', 0x9999, 99, 1, 0)
            + struct.pack('<I', 0)
        )
        store = decode(data)
        assert len(store) == 1
        assert store.get_int_value(TAG_ORIENTATION) == 6

    def test_decoded_values(self, sample_store):
        """Test decoded rationals keep their exact numerator and denominator."""
        decoded = decode(encode(sample_store, '>'))
        assert decoded.get(TAG_MAKE).get_value_as_string() == "Canon"
        assert decoded.get_rational_value(0x829A) == Rational(1, 125)
