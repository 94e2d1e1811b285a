# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Semantic accessors

This module reads and writes the tags that carry meaning beyond their raw
value: orientation, GPS position and time, date/time stamps, image size and
camera parameters. All functions operate on an explicit TagStore.

Copyright 2025 DNAi inc.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, List, Optional, Tuple, Union

from jpegexif.exceptions import BuildError, TypeMismatchError, UnsupportedRotationError
from jpegexif.exif_tag import ExifTag
from jpegexif.exif_tags import (
    ExifTagType,
    GpsAltitudeRef,
    GpsLatitudeRef,
    GpsLongitudeRef,
    GpsTrackRef,
    IfdGroup,
    Orientation,
    RATIONAL_TYPES,
    TAG_APERTURE_VALUE,
    TAG_DATE_TIME,
    TAG_DATE_TIME_DIGITIZED,
    TAG_DATE_TIME_ORIGINAL,
    TAG_EXPOSURE_TIME,
    TAG_F_NUMBER,
    TAG_FLASH,
    TAG_FOCAL_LENGTH,
    TAG_GPS_ALTITUDE,
    TAG_GPS_ALTITUDE_REF,
    TAG_GPS_DATE_STAMP,
    TAG_GPS_IMG_DIRECTION,
    TAG_GPS_IMG_DIRECTION_REF,
    TAG_GPS_LATITUDE,
    TAG_GPS_LATITUDE_REF,
    TAG_GPS_LONGITUDE,
    TAG_GPS_LONGITUDE_REF,
    TAG_GPS_TIME_STAMP,
    TAG_IMAGE_LENGTH,
    TAG_IMAGE_WIDTH,
    TAG_ISO_SPEED_RATINGS,
    TAG_MAKE,
    TAG_MODEL,
    TAG_ORIENTATION,
    TAG_PIXEL_X_DIMENSION,
    TAG_PIXEL_Y_DIMENSION,
    TAG_WHITE_BALANCE,
)
from jpegexif.rational import Rational
from jpegexif.tag_store import TagStore

Timestamp = Union[datetime, int, float]

DATE_TIME_FORMAT = "%Y:%m:%d %H:%M:%S"
GPS_DATE_FORMAT = "%Y:%m:%d"

DATE_TIME_TAGS = (TAG_DATE_TIME, TAG_DATE_TIME_ORIGINAL, TAG_DATE_TIME_DIGITIZED)

# Units of 1/10000 arc second per degree
_SECOND_PRECISION = 10000
_UNITS_PER_MINUTE = 60 * _SECOND_PRECISION
_UNITS_PER_DEGREE = 60 * _UNITS_PER_MINUTE

ORIENTATION_NAMES = {
    Orientation.TOP_LEFT: 'Horizontal (normal)',
    Orientation.TOP_RIGHT: 'Mirror horizontal',
    Orientation.BOTTOM_RIGHT: 'Rotate 180',
    Orientation.BOTTOM_LEFT: 'Mirror vertical',
    Orientation.LEFT_TOP: 'Mirror horizontal and rotate 270 CW',
    Orientation.RIGHT_TOP: 'Rotate 90 CW',
    Orientation.RIGHT_BOTTOM: 'Mirror horizontal and rotate 90 CW',
    Orientation.LEFT_BOTTOM: 'Rotate 270 CW',
}

# Clockwise rotation for each orientation code; mirrored codes share the
# rotation of their unmirrored counterpart
_ROTATION_FOR_ORIENTATION = {
    Orientation.TOP_LEFT: 0,
    Orientation.TOP_RIGHT: 0,
    Orientation.RIGHT_TOP: 90,
    Orientation.RIGHT_BOTTOM: 90,
    Orientation.BOTTOM_RIGHT: 180,
    Orientation.BOTTOM_LEFT: 180,
    Orientation.LEFT_BOTTOM: 270,
    Orientation.LEFT_TOP: 270,
}

_ORIENTATION_FOR_ROTATION = {
    0: Orientation.TOP_LEFT,
    90: Orientation.RIGHT_TOP,
    180: Orientation.BOTTOM_RIGHT,
    270: Orientation.LEFT_BOTTOM,
}


@dataclass
class GpsLocation:
    """
    A position fix to be written as GPS tags.

    Attributes:
        latitude: Degrees, positive north
        longitude: Degrees, positive east
        altitude: Metres above sea level; 0 means unknown
        time: Time of the fix (datetime, or seconds since the epoch)
    """
    latitude: float
    longitude: float
    altitude: float = 0.0
    time: Optional[Timestamp] = None


# ============================================================
# Orientation
# ============================================================

def rotation_for_orientation_value(orientation: Optional[int]) -> int:
    """
    Convert an orientation code to clockwise degrees (0, 90, 180 or 270).

    Unknown codes and None map to 0.
    """
    if orientation is None:
        return 0
    return _ROTATION_FOR_ORIENTATION.get(orientation, 0)


def orientation_value_for_rotation(degrees: int) -> int:
    """
    Convert a clockwise rotation to the orientation code that encodes it.

    Args:
        degrees: Rotation in degrees; any multiple of 90, negative allowed

    Returns:
        Orientation code 1, 6, 3 or 8

    Raises:
        UnsupportedRotationError: If degrees is not a multiple of 90
    """
    if degrees % 90 != 0:
        raise UnsupportedRotationError(
            f"Rotation must be a multiple of 90 degrees, got {degrees}"
        )
    return int(_ORIENTATION_FOR_ROTATION[int(degrees) % 360])


def orientation_degrees(store: TagStore) -> int:
    """Clockwise rotation encoded by the Orientation tag; 0 when absent."""
    return rotation_for_orientation_value(
        store.get_int_value(TAG_ORIENTATION, IfdGroup.PRIMARY)
    )


def set_orientation(store: TagStore, degrees: int) -> ExifTag:
    """Store the Orientation tag encoding a clockwise rotation."""
    tag = store.build(TAG_ORIENTATION, orientation_value_for_rotation(degrees), IfdGroup.PRIMARY)
    store.set(tag)
    return tag


# ============================================================
# GPS
# ============================================================

def _to_dms(value: float) -> Tuple[Rational, Rational, Rational]:
    units = int(round(abs(value) * _UNITS_PER_DEGREE))
    degrees, units = divmod(units, _UNITS_PER_DEGREE)
    minutes, units = divmod(units, _UNITS_PER_MINUTE)
    return (
        Rational(degrees, 1),
        Rational(minutes, 1),
        Rational(units, _SECOND_PRECISION),
    )


def to_exif_latitude(latitude: float) -> Tuple[Rational, Rational, Rational]:
    """Latitude as degree/minute/second rationals (the sign goes to the ref tag)."""
    return _to_dms(latitude)


def to_exif_longitude(longitude: float) -> Tuple[Rational, Rational, Rational]:
    """Longitude as degree/minute/second rationals (the sign goes to the ref tag)."""
    return _to_dms(longitude)


def _from_dms(components: List[Rational]) -> float:
    total = 0.0
    for rational, scale in zip(components, (1.0, 60.0, 3600.0)):
        total += rational.to_float() / scale
    return total


def _to_utc(timestamp: Timestamp) -> datetime:
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=timezone.utc)
        return timestamp.astimezone(timezone.utc)
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _build_position_tags(store: TagStore, latitude: float, longitude: float) -> List[ExifTag]:
    if not -90.0 <= latitude <= 90.0:
        raise TypeMismatchError(f"Latitude out of range: {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise TypeMismatchError(f"Longitude out of range: {longitude}")

    lat_ref = GpsLatitudeRef.NORTH if latitude >= 0 else GpsLatitudeRef.SOUTH
    lon_ref = GpsLongitudeRef.EAST if longitude >= 0 else GpsLongitudeRef.WEST

    return [
        store.build(TAG_GPS_LATITUDE, list(to_exif_latitude(latitude)), IfdGroup.GPS),
        store.build(TAG_GPS_LATITUDE_REF, lat_ref, IfdGroup.GPS),
        store.build(TAG_GPS_LONGITUDE, list(to_exif_longitude(longitude)), IfdGroup.GPS),
        store.build(TAG_GPS_LONGITUDE_REF, lon_ref, IfdGroup.GPS),
    ]


def _build_date_time_tags(store: TagStore, timestamp: Timestamp) -> List[ExifTag]:
    utc = _to_utc(timestamp)
    return [
        store.build(TAG_GPS_DATE_STAMP, utc.strftime(GPS_DATE_FORMAT), IfdGroup.GPS),
        store.build(
            TAG_GPS_TIME_STAMP,
            [Rational(utc.hour, 1), Rational(utc.minute, 1), Rational(utc.second, 1)],
            IfdGroup.GPS,
        ),
    ]


def _build_altitude_tags(store: TagStore, altitude: float) -> List[ExifTag]:
    if not math.isfinite(altitude):
        raise TypeMismatchError(f"Altitude is not a finite number: {altitude}")
    if altitude == 0:
        return []

    altitude_ref = GpsAltitudeRef.SEA_LEVEL_NEGATIVE if altitude < 0 else GpsAltitudeRef.SEA_LEVEL
    return [
        store.build(TAG_GPS_ALTITUDE, Rational.from_float(abs(altitude), 100), IfdGroup.GPS),
        store.build(TAG_GPS_ALTITUDE_REF, int(altitude_ref), IfdGroup.GPS),
    ]


def add_gps_tags(store: TagStore, latitude: float, longitude: float) -> None:
    """
    Write GPSLatitude, GPSLongitude and their reference tags.

    Args:
        store: Store to update
        latitude: Degrees in [-90, 90], positive north
        longitude: Degrees in [-180, 180], positive east

    Raises:
        TypeMismatchError: If a coordinate is out of range
    """
    for tag in _build_position_tags(store, latitude, longitude):
        store.set(tag)


def add_gps_date_time_stamp(store: TagStore, timestamp: Timestamp) -> None:
    """
    Write GPSDateStamp and GPSTimeStamp in UTC.

    A naive datetime is taken to be UTC already.
    """
    for tag in _build_date_time_tags(store, timestamp):
        store.set(tag)


def add_location(
    store: TagStore,
    latitude: float,
    longitude: float,
    altitude: float = 0.0,
    timestamp: Optional[Timestamp] = None,
) -> None:
    """
    Write a GPS fix: position, UTC date/time and, when known, altitude.

    An altitude of exactly 0 is treated as unknown and leaves GPSAltitude and
    GPSAltitudeRef unset.

    Args:
        store: Store to update
        latitude: Degrees, positive north
        longitude: Degrees, positive east
        altitude: Metres relative to sea level
        timestamp: Time of the fix; the GPS time tags are skipped when None

    Raises:
        TypeMismatchError: If a coordinate is out of range or the altitude is
            not finite or too large to store. The store is left unchanged.
    """
    tags = _build_position_tags(store, latitude, longitude)
    if timestamp is not None:
        tags.extend(_build_date_time_tags(store, timestamp))
    tags.extend(_build_altitude_tags(store, altitude))

    for tag in tags:
        store.set(tag)


def add_gps_img_direction(
    store: TagStore,
    direction: Union[float, Rational],
    reference: str = GpsTrackRef.MAGNETIC_DIRECTION,
) -> None:
    """
    Write GPSImgDirection and GPSImgDirectionRef.

    Args:
        store: Store to update
        direction: Degrees clockwise from the reference north, or a Rational
        reference: GpsTrackRef.TRUE_DIRECTION or GpsTrackRef.MAGNETIC_DIRECTION
    """
    if reference not in (GpsTrackRef.TRUE_DIRECTION, GpsTrackRef.MAGNETIC_DIRECTION):
        raise TypeMismatchError(f"Invalid GPS direction reference: {reference!r}")
    if not isinstance(direction, Rational):
        if not math.isfinite(direction):
            raise TypeMismatchError(f"GPS direction is not a finite number: {direction}")
        hundredths = int(round(float(direction) * 100)) % 36000
        direction = Rational(hundredths, 100)
    store.set(store.build(TAG_GPS_IMG_DIRECTION_REF, reference, IfdGroup.GPS))
    store.set(store.build(TAG_GPS_IMG_DIRECTION, direction, IfdGroup.GPS))


def get_lat_long(store: TagStore) -> Optional[Tuple[float, float]]:
    """
    Read the GPS position as signed decimal degrees.

    Returns:
        (latitude, longitude), or None if any of the four tags is missing
    """
    latitude = store.get(TAG_GPS_LATITUDE, IfdGroup.GPS)
    lat_ref = store.get_string_value(TAG_GPS_LATITUDE_REF, IfdGroup.GPS)
    longitude = store.get(TAG_GPS_LONGITUDE, IfdGroup.GPS)
    lon_ref = store.get_string_value(TAG_GPS_LONGITUDE_REF, IfdGroup.GPS)
    if latitude is None or longitude is None or not lat_ref or not lon_ref:
        return None

    lat_values = latitude.get_value_as_rationals()
    lon_values = longitude.get_value_as_rationals()
    if not lat_values or not lon_values:
        return None

    lat = _from_dms(lat_values)
    lon = _from_dms(lon_values)
    if lat_ref.upper().startswith(GpsLatitudeRef.SOUTH):
        lat = -lat
    if lon_ref.upper().startswith(GpsLongitudeRef.WEST):
        lon = -lon
    return lat, lon


def get_altitude(store: TagStore, default: Optional[float] = None) -> Optional[float]:
    """Altitude in metres, negative below sea level; ``default`` when absent."""
    altitude = store.get_rational_value(TAG_GPS_ALTITUDE, IfdGroup.GPS)
    if altitude is None:
        return default
    value = altitude.to_float()
    if store.get_int_value(TAG_GPS_ALTITUDE_REF, IfdGroup.GPS) == GpsAltitudeRef.SEA_LEVEL_NEGATIVE:
        value = -value
    return value


# ============================================================
# Date/time
# ============================================================

def add_date_time_stamp(
    store: TagStore,
    tag_id: int,
    timestamp: Timestamp,
    tz: Optional[tzinfo] = None,
) -> ExifTag:
    """
    Write a DateTime, DateTimeOriginal or DateTimeDigitized tag.

    Args:
        store: Store to update
        tag_id: TAG_DATE_TIME, TAG_DATE_TIME_ORIGINAL or TAG_DATE_TIME_DIGITIZED
        timestamp: datetime or seconds since the epoch
        tz: Time zone to express the time in; local time when None.
            Naive datetimes are already local wall-clock time and are
            written as is.

    Returns:
        The stored tag

    Raises:
        BuildError: If tag_id is not a date/time tag
    """
    if tag_id not in DATE_TIME_TAGS:
        raise BuildError(f"Tag 0x{tag_id:04X} is not a date/time tag")

    if isinstance(timestamp, datetime):
        moment = timestamp
        if moment.tzinfo is not None:
            moment = moment.astimezone(tz)
    else:
        moment = datetime.fromtimestamp(timestamp, tz)

    tag = store.build(tag_id, moment.strftime(DATE_TIME_FORMAT))
    store.set(tag)
    return tag


def get_date_time(store: TagStore, tag_id: int = TAG_DATE_TIME) -> Optional[datetime]:
    """Parse a date/time tag into a naive datetime; None if absent or unparsable."""
    value = store.get_string_value(tag_id)
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), DATE_TIME_FORMAT)
    except ValueError:
        return None


# ============================================================
# Image and camera
# ============================================================

def get_image_size(store: TagStore) -> Optional[Tuple[int, int]]:
    """
    Image (width, height) from PixelX/YDimension, else ImageWidth/ImageLength.

    Returns None if neither pair is complete.
    """
    width = store.get_int_value(TAG_PIXEL_X_DIMENSION, IfdGroup.EXIF)
    height = store.get_int_value(TAG_PIXEL_Y_DIMENSION, IfdGroup.EXIF)
    if width is not None and height is not None:
        return width, height

    width = store.get_int_value(TAG_IMAGE_WIDTH, IfdGroup.PRIMARY)
    height = store.get_int_value(TAG_IMAGE_LENGTH, IfdGroup.PRIMARY)
    if width is not None and height is not None:
        return width, height
    return None


def _rational_float(store: TagStore, tag_id: int) -> Optional[float]:
    rational = store.get_rational_value(tag_id, IfdGroup.EXIF)
    if rational is None:
        return None
    return rational.to_float()


def get_camera_parameters(store: TagStore) -> Dict[str, Any]:
    """
    Collect the common shooting parameters.

    Returns:
        Dictionary with keys make, model, f_number, exposure_time, iso,
        focal_length, flash, white_balance and aperture; missing tags are None
    """
    return {
        'make': store.get_string_value(TAG_MAKE, IfdGroup.PRIMARY),
        'model': store.get_string_value(TAG_MODEL, IfdGroup.PRIMARY),
        'f_number': _rational_float(store, TAG_F_NUMBER),
        'exposure_time': _rational_float(store, TAG_EXPOSURE_TIME),
        'iso': store.get_int_value(TAG_ISO_SPEED_RATINGS, IfdGroup.EXIF),
        'focal_length': _rational_float(store, TAG_FOCAL_LENGTH),
        'flash': store.get_int_value(TAG_FLASH, IfdGroup.EXIF),
        'white_balance': store.get_int_value(TAG_WHITE_BALANCE, IfdGroup.EXIF),
        'aperture': _rational_float(store, TAG_APERTURE_VALUE),
    }


# ============================================================
# Display
# ============================================================

def coerce_to_display_string(tag: ExifTag) -> str:
    """
    Render a tag's first component as a string.

    Rationals render their float quotient, ASCII renders its text and every
    other type renders its first component as an integer. An empty value
    renders as an empty string.
    """
    if tag.component_count == 0:
        return ""
    if tag.data_type in RATIONAL_TYPES:
        return str(tag.get_value_as_rational(0).to_float())
    if tag.data_type == ExifTagType.ASCII:
        return tag.get_value_as_string()
    return str(tag.force_get_value_as_long(0))
