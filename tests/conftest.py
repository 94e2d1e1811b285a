"""Pytest configuration and shared fixtures."""

import struct

import pytest

from jpegexif.exif_tags import (
    TAG_APERTURE_VALUE,
    TAG_DATE_TIME,
    TAG_EXIF_VERSION,
    TAG_EXPOSURE_TIME,
    TAG_F_NUMBER,
    TAG_FLASH,
    TAG_FOCAL_LENGTH,
    TAG_ISO_SPEED_RATINGS,
    TAG_MAKE,
    TAG_MODEL,
    TAG_ORIENTATION,
    TAG_PIXEL_X_DIMENSION,
    TAG_PIXEL_Y_DIMENSION,
    TAG_WHITE_BALANCE,
    TAG_X_RESOLUTION,
)
from jpegexif.jpeg_segments import build_app1_segment
from jpegexif.tag_store import TagStore
from jpegexif.tiff_codec import encode

THUMBNAIL = b'\xff\xd8\xff\xdbthumbnail\xff\xd9'

# Entropy-coded data with a stuffed 0xFF00 and an RST marker
SCAN_DATA = b'\x12\x34\xff\x00\x56\xff\xd0\x78\x9a\xbc'


def segment(marker: int, payload: bytes) -> bytes:
    """Build a marker segment with its length field."""
    return struct.pack('>HH', marker, len(payload) + 2) + payload


def build_jpeg(app_segments: bytes = b'') -> bytes:
    """
    Build a minimal baseline JPEG stream.

    Args:
        app_segments: Segments inserted between SOI and APP0
    """
    app0 = segment(0xFFE0, b'JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00')
    dqt = segment(0xFFDB, b'\x00' + bytes(range(64)))
    sof0 = segment(0xFFC0, b'\x08\x00\x10\x00\x10\x01\x01\x11\x00')
    sos = segment(0xFFDA, b'\x01\x01\x00\x00\x3f\x00')
    return b'\xff\xd8' + app_segments + app0 + dqt + sof0 + sos + SCAN_DATA + b'\xff\xd9'


def build_sample_store() -> TagStore:
    store = TagStore()
    store.set(store.build(TAG_MAKE, "Canon"))
    store.set(store.build(TAG_MODEL, "EOS 5D"))
    store.set(store.build(TAG_ORIENTATION, 6))
    store.set(store.build(TAG_X_RESOLUTION, (72, 1)))
    store.set(store.build(TAG_DATE_TIME, "2024:01:02 03:04:05"))
    store.set(store.build(TAG_EXPOSURE_TIME, (1, 125)))
    store.set(store.build(TAG_F_NUMBER, (28, 10)))
    store.set(store.build(TAG_ISO_SPEED_RATINGS, 200))
    store.set(store.build(TAG_EXIF_VERSION, b'0230'))
    store.set(store.build(TAG_PIXEL_X_DIMENSION, 4000))
    store.set(store.build(TAG_PIXEL_Y_DIMENSION, 3000))
    store.set(store.build(TAG_FOCAL_LENGTH, (50, 1)))
    store.set(store.build(TAG_FLASH, 0))
    store.set(store.build(TAG_WHITE_BALANCE, 0))
    store.set(store.build(TAG_APERTURE_VALUE, (297, 100)))
    store.thumbnail = THUMBNAIL
    return store


@pytest.fixture
def plain_jpeg():
    """A JPEG stream without EXIF."""
    return build_jpeg()


@pytest.fixture
def sample_store():
    """A store with typical camera tags, orientation 6 and a thumbnail."""
    return build_sample_store()


@pytest.fixture
def exif_jpeg():
    """A JPEG stream whose EXIF holds the sample store."""
    return build_jpeg(build_app1_segment(encode(build_sample_store())))


@pytest.fixture
def exif_jpeg_file(tmp_path, exif_jpeg):
    """Path of a JPEG file with EXIF."""
    path = tmp_path / "with_exif.jpg"
    path.write_bytes(exif_jpeg)
    return path


@pytest.fixture
def plain_jpeg_file(tmp_path, plain_jpeg):
    """Path of a JPEG file without EXIF."""
    path = tmp_path / "plain.jpg"
    path.write_bytes(plain_jpeg)
    return path


@pytest.fixture
def make_jpeg():
    """Factory building a minimal JPEG around the given APP segments."""
    return build_jpeg


@pytest.fixture
def make_segment():
    """Factory building a marker segment."""
    return segment
