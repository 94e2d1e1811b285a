"""Tests for the command-line interface."""

import json

import pytest

from jpegexif import exif_util
from jpegexif.cli import format_output, main
from jpegexif.exif_interface import ExifInterface
from jpegexif.exif_tags import TAG_DATE_TIME


class TestFormatOutput:
    """Test cases for output formatting."""

    def test_text(self):
        """Test the text format."""
        assert format_output({"IFD0:Make": "Canon"}) == "IFD0:Make: Canon"

    def test_csv_escapes_quotes(self):
        """Test CSV output escapes quotes."""
        output = format_output({"IFD0:Model": 'EOS "5D"'}, "csv")
        assert output.splitlines() == ["Tag,Value", '"IFD0:Model","EOS ""5D"""']


class TestCommands:
    """Test cases for the CLI subcommands."""

    def test_read_text(self, exif_jpeg_file, capsys):
        """Test reading tags as text."""
        assert main(['read', str(exif_jpeg_file)]) == 0
        out = capsys.readouterr().out
        assert "IFD0:Make: Canon" in out
        assert "IFD0:Orientation: 6" in out
        assert "ExifIFD:FNumber: 2.8" in out

    def test_read_json(self, exif_jpeg_file, capsys):
        """Test reading tags as JSON."""
        assert main(['read', str(exif_jpeg_file), '--format', 'json']) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["IFD0:Model"] == "EOS 5D"
        assert "IFD1:ThumbnailImage" in data

    def test_orientation(self, exif_jpeg_file, capsys):
        """Test printing the stored rotation."""
        assert main(['orientation', str(exif_jpeg_file)]) == 0
        assert capsys.readouterr().out.strip() == "90"

    def test_rotate(self, exif_jpeg_file):
        """Test rotating a file in place."""
        assert main(['rotate', str(exif_jpeg_file), '180']) == 0
        assert exif_util.get_rotation_from_exif(exif_jpeg_file) == 180

    def test_rotate_invalid(self, exif_jpeg_file, capsys):
        """Test an unsupported rotation exits with status 1."""
        assert main(['rotate', str(exif_jpeg_file), '45']) == 1
        assert "Error" in capsys.readouterr().err

    def test_stamp_to_output(self, plain_jpeg_file, tmp_path):
        """Test stamping DateTime into a new file."""
        output = tmp_path / "stamped.jpg"
        assert main(['stamp', str(plain_jpeg_file), '-o', str(output)]) == 0

        exif = ExifInterface()
        exif.read_exif(output)
        assert exif.get_tag(TAG_DATE_TIME) is not None

    def test_locate(self, plain_jpeg_file):
        """Test geotagging a file in place, with a negative latitude."""
        assert main(['locate', str(plain_jpeg_file), '-33.8568', '151.2153']) == 0

        exif = ExifInterface()
        exif.read_exif(plain_jpeg_file)
        lat, lon = exif.get_lat_long()
        assert lat == pytest.approx(-33.8568, abs=1e-6)
        assert lon == pytest.approx(151.2153, abs=1e-6)

    def test_not_a_jpeg(self, tmp_path, capsys):
        """Test a non-JPEG file exits with status 1."""
        path = tmp_path / "image.png"
        path.write_bytes(b'\x89PNG\r\n\x1a\n')
        assert main(['read', str(path)]) == 1
        assert "Error" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        """Test a missing file exits with status 1."""
        assert main(['orientation', str(tmp_path / "missing.jpg")]) == 1

    def test_no_command(self):
        """Test a missing subcommand is a usage error."""
        with pytest.raises(SystemExit):
            main([])
