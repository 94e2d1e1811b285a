"""Tests for the EXIF utility helpers."""

import io
import logging
from datetime import datetime, timezone

from jpegexif import exif_util
from jpegexif.accessors import GpsLocation
from jpegexif.exif_interface import ExifInterface
from jpegexif.exif_tags import (
    IfdGroup,
    TAG_DATE_TIME,
    TAG_GPS_ALTITUDE,
    TAG_GPS_ALTITUDE_REF,
    TAG_GPS_DATE_STAMP,
    TAG_ORIENTATION,
)


class TestReading:
    """Test cases for the reading helpers."""

    def test_get_exif(self, exif_jpeg):
        """Test reading valid EXIF."""
        exif = exif_util.get_exif(exif_jpeg)
        assert exif.get_tag_int_value(TAG_ORIENTATION) == 6

    def test_get_exif_failure_logged(self, caplog):
        """Test bad data yields an empty interface and a warning."""
        with caplog.at_level(logging.WARNING, logger="jpegexif.exif_util"):
            exif = exif_util.get_exif(b'garbage')
        assert exif.get_all_tags() == []
        assert "Failed to read EXIF data" in caplog.text

    def test_get_orientation(self, exif_jpeg, plain_jpeg):
        """Test orientation from None, bytes and an interface."""
        assert exif_util.get_orientation(None) == 0
        assert exif_util.get_orientation(exif_jpeg) == 90
        assert exif_util.get_orientation(plain_jpeg) == 0
        assert exif_util.get_orientation(exif_util.get_exif(exif_jpeg)) == 90

    def test_get_rotation_from_exif(self, exif_jpeg_file, exif_jpeg, tmp_path):
        """Test rotation from a path and a stream, and 0 on failure."""
        assert exif_util.get_rotation_from_exif(exif_jpeg_file) == 90
        assert exif_util.get_rotation_from_exif(io.BytesIO(exif_jpeg)) == 90
        assert exif_util.get_rotation_from_exif(tmp_path / "missing.jpg") == 0


class TestWriting:
    """Test cases for the writing helpers."""

    def test_write_file_with_exif(self, tmp_path, plain_jpeg):
        """Test the returned size matches the written file."""
        exif = ExifInterface()
        exif.set_tag(exif.build_tag(TAG_ORIENTATION, 6))
        path = tmp_path / "out.jpg"
        size = exif_util.write_file(path, plain_jpeg, exif)
        assert size == path.stat().st_size
        assert exif_util.get_rotation_from_exif(path) == 90

    def test_write_file_without_exif(self, tmp_path, plain_jpeg):
        """Test data is written unchanged when no EXIF is given."""
        path = tmp_path / "out.jpg"
        assert exif_util.write_file(path, plain_jpeg) == len(plain_jpeg)
        assert path.read_bytes() == plain_jpeg

    def test_write_file_failures(self, tmp_path, plain_jpeg):
        """Test failures return -1."""
        bad_path = tmp_path / "missing" / "out.jpg"
        assert exif_util.write_file(bad_path, plain_jpeg) == -1
        assert exif_util.write_file(bad_path, plain_jpeg, ExifInterface()) == -1
        assert exif_util.write_file(tmp_path / "x.jpg", b'not a jpeg', ExifInterface()) == -1

    def test_rotate_in_jpeg_exif(self, exif_jpeg_file):
        """Test rotating a file that has EXIF."""
        assert exif_util.rotate_in_jpeg_exif(exif_jpeg_file, 180) is True
        assert exif_util.get_rotation_from_exif(exif_jpeg_file) == 180

    def test_rotate_rejected(self, exif_jpeg_file, plain_jpeg_file, plain_jpeg):
        """Test invalid rotations and files without EXIF."""
        assert exif_util.rotate_in_jpeg_exif(exif_jpeg_file, 45) is False
        assert exif_util.get_rotation_from_exif(exif_jpeg_file) == 90

        assert exif_util.rotate_in_jpeg_exif(plain_jpeg_file, 90) is False
        assert plain_jpeg_file.read_bytes() == plain_jpeg

    def test_add_exif(self, plain_jpeg):
        """Test basic EXIF is added to a JPEG without it."""
        output = exif_util.add_exif(plain_jpeg, 0)
        exif = exif_util.get_exif(output)
        assert [tag.tag_id for tag in exif.get_all_tags()] == [TAG_DATE_TIME]

    def test_add_exif_failure(self):
        """Test invalid JPEG data yields empty bytes."""
        assert exif_util.add_exif(b'not a jpeg') == b''


class TestLocation:
    """Test cases for adding a location."""

    def test_add_location_to_exif(self):
        """Test a fix with altitude writes GPS position, time and altitude."""
        exif = ExifInterface()
        location = GpsLocation(
            latitude=51.5007,
            longitude=-0.1246,
            altitude=-12.0,
            time=datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
        )
        exif_util.add_location_to_exif(exif, location)

        assert exif.get_tag_string_value(TAG_GPS_DATE_STAMP, IfdGroup.GPS) == "2024:05:01"
        assert exif.get_tag_int_value(TAG_GPS_ALTITUDE_REF, IfdGroup.GPS) == 1
        lat, lon = exif.get_lat_long()
        assert round(lat, 4) == 51.5007
        assert round(lon, 4) == -0.1246

    def test_add_location_without_altitude(self):
        """Test a fix at altitude 0 writes no altitude tags."""
        exif = ExifInterface()
        exif_util.add_location_to_exif(exif, GpsLocation(1.0, 2.0, 0.0, 0))
        assert exif.get_tag(TAG_GPS_ALTITUDE, IfdGroup.GPS) is None
        assert exif.get_tag(TAG_GPS_ALTITUDE_REF, IfdGroup.GPS) is None
