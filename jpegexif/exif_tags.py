# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF tag definitions

This module contains the data types, IFD groups and the static tag
definition table used to validate tags before they are stored or encoded.
Based on the EXIF 2.3 specification.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple


class ExifTagType(IntEnum):
    """EXIF tag data types"""
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    UNDEFINED = 7
    SLONG = 9
    SRATIONAL = 10


# EXIF tag sizes in bytes
TAG_SIZES = {
    ExifTagType.BYTE: 1,
    ExifTagType.ASCII: 1,
    ExifTagType.SHORT: 2,
    ExifTagType.LONG: 4,
    ExifTagType.RATIONAL: 8,
    ExifTagType.UNDEFINED: 1,
    ExifTagType.SLONG: 4,
    ExifTagType.SRATIONAL: 8,
}

# Inclusive value ranges for integer components
INTEGER_RANGES = {
    ExifTagType.BYTE: (0, 0xFF),
    ExifTagType.SHORT: (0, 0xFFFF),
    ExifTagType.LONG: (0, 0xFFFFFFFF),
    ExifTagType.SLONG: (-0x80000000, 0x7FFFFFFF),
    ExifTagType.RATIONAL: (0, 0xFFFFFFFF),
    ExifTagType.SRATIONAL: (-0x80000000, 0x7FFFFFFF),
}

INTEGER_TYPES = (ExifTagType.SHORT, ExifTagType.LONG, ExifTagType.SLONG)
RATIONAL_TYPES = (ExifTagType.RATIONAL, ExifTagType.SRATIONAL)
BINARY_TYPES = (ExifTagType.BYTE, ExifTagType.ASCII, ExifTagType.UNDEFINED)


class IfdGroup(Enum):
    """Image File Directories a tag can live in."""
    PRIMARY = "IFD0"
    EXIF = "ExifIFD"
    GPS = "GPS"
    INTEROPERABILITY = "InteropIFD"
    THUMBNAIL = "IFD1"


@dataclass(frozen=True)
class TagDefinition:
    """
    Static definition of a known tag.

    The first entry of ``groups`` is the default group and the first entry
    of ``types`` is the type used when a value fits several types.
    ``count`` is None for variable-length tags.
    """
    tag_id: int
    name: str
    groups: Tuple[IfdGroup, ...]
    types: Tuple[ExifTagType, ...]
    count: Optional[int]

    @property
    def default_group(self) -> IfdGroup:
        return self.groups[0]


# ============================================================
# Tag ids
# ============================================================

# IFD0 / IFD1
TAG_IMAGE_WIDTH = 0x0100
TAG_IMAGE_LENGTH = 0x0101
TAG_BITS_PER_SAMPLE = 0x0102
TAG_COMPRESSION = 0x0103
TAG_PHOTOMETRIC_INTERPRETATION = 0x0106
TAG_IMAGE_DESCRIPTION = 0x010E
TAG_MAKE = 0x010F
TAG_MODEL = 0x0110
TAG_STRIP_OFFSETS = 0x0111
TAG_ORIENTATION = 0x0112
TAG_SAMPLES_PER_PIXEL = 0x0115
TAG_ROWS_PER_STRIP = 0x0116
TAG_STRIP_BYTE_COUNTS = 0x0117
TAG_X_RESOLUTION = 0x011A
TAG_Y_RESOLUTION = 0x011B
TAG_PLANAR_CONFIGURATION = 0x011C
TAG_RESOLUTION_UNIT = 0x0128
TAG_TRANSFER_FUNCTION = 0x012D
TAG_SOFTWARE = 0x0131
TAG_DATE_TIME = 0x0132
TAG_ARTIST = 0x013B
TAG_WHITE_POINT = 0x013E
TAG_PRIMARY_CHROMATICITIES = 0x013F
TAG_JPEG_INTERCHANGE_FORMAT = 0x0201
TAG_JPEG_INTERCHANGE_FORMAT_LENGTH = 0x0202
TAG_Y_CB_CR_COEFFICIENTS = 0x0211
TAG_Y_CB_CR_SUB_SAMPLING = 0x0212
TAG_Y_CB_CR_POSITIONING = 0x0213
TAG_REFERENCE_BLACK_WHITE = 0x0214
TAG_COPYRIGHT = 0x8298
TAG_EXIF_IFD = 0x8769
TAG_GPS_IFD = 0x8825

# Exif private IFD
TAG_EXPOSURE_TIME = 0x829A
TAG_F_NUMBER = 0x829D
TAG_EXPOSURE_PROGRAM = 0x8822
TAG_SPECTRAL_SENSITIVITY = 0x8824
TAG_ISO_SPEED_RATINGS = 0x8827
TAG_OECF = 0x8828
TAG_EXIF_VERSION = 0x9000
TAG_DATE_TIME_ORIGINAL = 0x9003
TAG_DATE_TIME_DIGITIZED = 0x9004
TAG_COMPONENTS_CONFIGURATION = 0x9101
TAG_COMPRESSED_BITS_PER_PIXEL = 0x9102
TAG_SHUTTER_SPEED_VALUE = 0x9201
TAG_APERTURE_VALUE = 0x9202
TAG_BRIGHTNESS_VALUE = 0x9203
TAG_EXPOSURE_BIAS_VALUE = 0x9204
TAG_MAX_APERTURE_VALUE = 0x9205
TAG_SUBJECT_DISTANCE = 0x9206
TAG_METERING_MODE = 0x9207
TAG_LIGHT_SOURCE = 0x9208
TAG_FLASH = 0x9209
TAG_FOCAL_LENGTH = 0x920A
TAG_SUBJECT_AREA = 0x9214
TAG_MAKER_NOTE = 0x927C
TAG_USER_COMMENT = 0x9286
TAG_SUB_SEC_TIME = 0x9290
TAG_SUB_SEC_TIME_ORIGINAL = 0x9291
TAG_SUB_SEC_TIME_DIGITIZED = 0x9292
TAG_FLASHPIX_VERSION = 0xA000
TAG_COLOR_SPACE = 0xA001
TAG_PIXEL_X_DIMENSION = 0xA002
TAG_PIXEL_Y_DIMENSION = 0xA003
TAG_RELATED_SOUND_FILE = 0xA004
TAG_INTEROPERABILITY_IFD = 0xA005
TAG_FLASH_ENERGY = 0xA20B
TAG_SPATIAL_FREQUENCY_RESPONSE = 0xA20C
TAG_FOCAL_PLANE_X_RESOLUTION = 0xA20E
TAG_FOCAL_PLANE_Y_RESOLUTION = 0xA20F
TAG_FOCAL_PLANE_RESOLUTION_UNIT = 0xA210
TAG_SUBJECT_LOCATION = 0xA214
TAG_EXPOSURE_INDEX = 0xA215
TAG_SENSING_METHOD = 0xA217
TAG_FILE_SOURCE = 0xA300
TAG_SCENE_TYPE = 0xA301
TAG_CFA_PATTERN = 0xA302
TAG_CUSTOM_RENDERED = 0xA401
TAG_EXPOSURE_MODE = 0xA402
TAG_WHITE_BALANCE = 0xA403
TAG_DIGITAL_ZOOM_RATIO = 0xA404
TAG_FOCAL_LENGTH_IN_35MM_FILM = 0xA405
TAG_SCENE_CAPTURE_TYPE = 0xA406
TAG_GAIN_CONTROL = 0xA407
TAG_CONTRAST = 0xA408
TAG_SATURATION = 0xA409
TAG_SHARPNESS = 0xA40A
TAG_DEVICE_SETTING_DESCRIPTION = 0xA40B
TAG_SUBJECT_DISTANCE_RANGE = 0xA40C
TAG_IMAGE_UNIQUE_ID = 0xA420

# GPS IFD
TAG_GPS_VERSION_ID = 0x0000
TAG_GPS_LATITUDE_REF = 0x0001
TAG_GPS_LATITUDE = 0x0002
TAG_GPS_LONGITUDE_REF = 0x0003
TAG_GPS_LONGITUDE = 0x0004
TAG_GPS_ALTITUDE_REF = 0x0005
TAG_GPS_ALTITUDE = 0x0006
TAG_GPS_TIME_STAMP = 0x0007
TAG_GPS_SATELLITES = 0x0008
TAG_GPS_STATUS = 0x0009
TAG_GPS_MEASURE_MODE = 0x000A
TAG_GPS_DOP = 0x000B
TAG_GPS_SPEED_REF = 0x000C
TAG_GPS_SPEED = 0x000D
TAG_GPS_TRACK_REF = 0x000E
TAG_GPS_TRACK = 0x000F
TAG_GPS_IMG_DIRECTION_REF = 0x0010
TAG_GPS_IMG_DIRECTION = 0x0011
TAG_GPS_MAP_DATUM = 0x0012
TAG_GPS_DEST_LATITUDE_REF = 0x0013
TAG_GPS_DEST_LATITUDE = 0x0014
TAG_GPS_DEST_LONGITUDE_REF = 0x0015
TAG_GPS_DEST_LONGITUDE = 0x0016
TAG_GPS_DEST_BEARING_REF = 0x0017
TAG_GPS_DEST_BEARING = 0x0018
TAG_GPS_DEST_DISTANCE_REF = 0x0019
TAG_GPS_DEST_DISTANCE = 0x001A
TAG_GPS_PROCESSING_METHOD = 0x001B
TAG_GPS_AREA_INFORMATION = 0x001C
TAG_GPS_DATE_STAMP = 0x001D
TAG_GPS_DIFFERENTIAL = 0x001E

# Interoperability IFD
TAG_INTEROPERABILITY_INDEX = 0x0001

# Pointer tags are written by the encoder and never stored
POINTER_TAGS = {
    (TAG_EXIF_IFD, IfdGroup.PRIMARY): IfdGroup.EXIF,
    (TAG_GPS_IFD, IfdGroup.PRIMARY): IfdGroup.GPS,
    (TAG_INTEROPERABILITY_IFD, IfdGroup.EXIF): IfdGroup.INTEROPERABILITY,
}


# Enumerated values used by the semantic layer
class Orientation(IntEnum):
    """EXIF orientation codes (0th row / 0th column)."""
    TOP_LEFT = 1
    TOP_RIGHT = 2
    BOTTOM_RIGHT = 3
    BOTTOM_LEFT = 4
    LEFT_TOP = 5
    RIGHT_TOP = 6
    RIGHT_BOTTOM = 7
    LEFT_BOTTOM = 8


class GpsAltitudeRef(IntEnum):
    SEA_LEVEL = 0
    SEA_LEVEL_NEGATIVE = 1


class GpsTrackRef:
    TRUE_DIRECTION = "T"
    MAGNETIC_DIRECTION = "M"


class GpsLatitudeRef:
    NORTH = "N"
    SOUTH = "S"


class GpsLongitudeRef:
    EAST = "E"
    WEST = "W"


# ============================================================
# Definition table
# ============================================================

_P = IfdGroup.PRIMARY
_T = IfdGroup.THUMBNAIL
_E = IfdGroup.EXIF
_G = IfdGroup.GPS
_I = IfdGroup.INTEROPERABILITY

_BYTE = (ExifTagType.BYTE,)
_ASCII = (ExifTagType.ASCII,)
_SHORT = (ExifTagType.SHORT,)
_LONG = (ExifTagType.LONG,)
_SHORT_OR_LONG = (ExifTagType.SHORT, ExifTagType.LONG)
_RATIONAL = (ExifTagType.RATIONAL,)
_SRATIONAL = (ExifTagType.SRATIONAL,)
_UNDEFINED = (ExifTagType.UNDEFINED,)

_DEFINITIONS = [
    # IFD0 (Image) tags, most of which may also appear in IFD1
    TagDefinition(TAG_IMAGE_WIDTH, "ImageWidth", (_P, _T), _SHORT_OR_LONG, 1),
    TagDefinition(TAG_IMAGE_LENGTH, "ImageLength", (_P, _T), _SHORT_OR_LONG, 1),
    TagDefinition(TAG_BITS_PER_SAMPLE, "BitsPerSample", (_P, _T), _SHORT, 3),
    TagDefinition(TAG_COMPRESSION, "Compression", (_P, _T), _SHORT, 1),
    TagDefinition(TAG_PHOTOMETRIC_INTERPRETATION, "PhotometricInterpretation", (_P, _T), _SHORT, 1),
    TagDefinition(TAG_IMAGE_DESCRIPTION, "ImageDescription", (_P, _T), _ASCII, None),
    TagDefinition(TAG_MAKE, "Make", (_P, _T), _ASCII, None),
    TagDefinition(TAG_MODEL, "Model", (_P, _T), _ASCII, None),
    TagDefinition(TAG_STRIP_OFFSETS, "StripOffsets", (_P, _T), _SHORT_OR_LONG, None),
    TagDefinition(TAG_ORIENTATION, "Orientation", (_P, _T), _SHORT, 1),
    TagDefinition(TAG_SAMPLES_PER_PIXEL, "SamplesPerPixel", (_P, _T), _SHORT, 1),
    TagDefinition(TAG_ROWS_PER_STRIP, "RowsPerStrip", (_P, _T), _SHORT_OR_LONG, 1),
    TagDefinition(TAG_STRIP_BYTE_COUNTS, "StripByteCounts", (_P, _T), _SHORT_OR_LONG, None),
    TagDefinition(TAG_X_RESOLUTION, "XResolution", (_P, _T), _RATIONAL, 1),
    TagDefinition(TAG_Y_RESOLUTION, "YResolution", (_P, _T), _RATIONAL, 1),
    TagDefinition(TAG_PLANAR_CONFIGURATION, "PlanarConfiguration", (_P, _T), _SHORT, 1),
    TagDefinition(TAG_RESOLUTION_UNIT, "ResolutionUnit", (_P, _T), _SHORT, 1),
    TagDefinition(TAG_TRANSFER_FUNCTION, "TransferFunction", (_P, _T), _SHORT, 3 * 256),
    TagDefinition(TAG_SOFTWARE, "Software", (_P, _T), _ASCII, None),
    TagDefinition(TAG_DATE_TIME, "DateTime", (_P, _T), _ASCII, 20),
    TagDefinition(TAG_ARTIST, "Artist", (_P, _T), _ASCII, None),
    TagDefinition(TAG_WHITE_POINT, "WhitePoint", (_P, _T), _RATIONAL, 2),
    TagDefinition(TAG_PRIMARY_CHROMATICITIES, "PrimaryChromaticities", (_P, _T), _RATIONAL, 6),
    TagDefinition(TAG_JPEG_INTERCHANGE_FORMAT, "JPEGInterchangeFormat", (_T,), _LONG, 1),
    TagDefinition(TAG_JPEG_INTERCHANGE_FORMAT_LENGTH, "JPEGInterchangeFormatLength", (_T,), _LONG, 1),
    TagDefinition(TAG_Y_CB_CR_COEFFICIENTS, "YCbCrCoefficients", (_P, _T), _RATIONAL, 3),
    TagDefinition(TAG_Y_CB_CR_SUB_SAMPLING, "YCbCrSubSampling", (_P, _T), _SHORT, 2),
    TagDefinition(TAG_Y_CB_CR_POSITIONING, "YCbCrPositioning", (_P, _T), _SHORT, 1),
    TagDefinition(TAG_REFERENCE_BLACK_WHITE, "ReferenceBlackWhite", (_P, _T), _RATIONAL, 6),
    TagDefinition(TAG_COPYRIGHT, "Copyright", (_P, _T), _ASCII, None),
    TagDefinition(TAG_EXIF_IFD, "ExifIFDPointer", (_P,), _LONG, 1),
    TagDefinition(TAG_GPS_IFD, "GPSInfoIFDPointer", (_P,), _LONG, 1),

    # Exif private IFD
    TagDefinition(TAG_EXPOSURE_TIME, "ExposureTime", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_F_NUMBER, "FNumber", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_EXPOSURE_PROGRAM, "ExposureProgram", (_E,), _SHORT, 1),
    TagDefinition(TAG_SPECTRAL_SENSITIVITY, "SpectralSensitivity", (_E,), _ASCII, None),
    TagDefinition(TAG_ISO_SPEED_RATINGS, "ISOSpeedRatings", (_E,), _SHORT, None),
    TagDefinition(TAG_OECF, "OECF", (_E,), _UNDEFINED, None),
    TagDefinition(TAG_EXIF_VERSION, "ExifVersion", (_E,), _UNDEFINED, 4),
    TagDefinition(TAG_DATE_TIME_ORIGINAL, "DateTimeOriginal", (_E,), _ASCII, 20),
    TagDefinition(TAG_DATE_TIME_DIGITIZED, "DateTimeDigitized", (_E,), _ASCII, 20),
    TagDefinition(TAG_COMPONENTS_CONFIGURATION, "ComponentsConfiguration", (_E,), _UNDEFINED, 4),
    TagDefinition(TAG_COMPRESSED_BITS_PER_PIXEL, "CompressedBitsPerPixel", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_SHUTTER_SPEED_VALUE, "ShutterSpeedValue", (_E,), _SRATIONAL, 1),
    TagDefinition(TAG_APERTURE_VALUE, "ApertureValue", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_BRIGHTNESS_VALUE, "BrightnessValue", (_E,), _SRATIONAL, 1),
    TagDefinition(TAG_EXPOSURE_BIAS_VALUE, "ExposureBiasValue", (_E,), _SRATIONAL, 1),
    TagDefinition(TAG_MAX_APERTURE_VALUE, "MaxApertureValue", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_SUBJECT_DISTANCE, "SubjectDistance", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_METERING_MODE, "MeteringMode", (_E,), _SHORT, 1),
    TagDefinition(TAG_LIGHT_SOURCE, "LightSource", (_E,), _SHORT, 1),
    TagDefinition(TAG_FLASH, "Flash", (_E,), _SHORT, 1),
    TagDefinition(TAG_FOCAL_LENGTH, "FocalLength", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_SUBJECT_AREA, "SubjectArea", (_E,), _SHORT, None),
    TagDefinition(TAG_MAKER_NOTE, "MakerNote", (_E,), _UNDEFINED, None),
    TagDefinition(TAG_USER_COMMENT, "UserComment", (_E,), _UNDEFINED, None),
    TagDefinition(TAG_SUB_SEC_TIME, "SubSecTime", (_E,), _ASCII, None),
    TagDefinition(TAG_SUB_SEC_TIME_ORIGINAL, "SubSecTimeOriginal", (_E,), _ASCII, None),
    TagDefinition(TAG_SUB_SEC_TIME_DIGITIZED, "SubSecTimeDigitized", (_E,), _ASCII, None),
    TagDefinition(TAG_FLASHPIX_VERSION, "FlashpixVersion", (_E,), _UNDEFINED, 4),
    TagDefinition(TAG_COLOR_SPACE, "ColorSpace", (_E,), _SHORT, 1),
    TagDefinition(TAG_PIXEL_X_DIMENSION, "PixelXDimension", (_E,), _SHORT_OR_LONG, 1),
    TagDefinition(TAG_PIXEL_Y_DIMENSION, "PixelYDimension", (_E,), _SHORT_OR_LONG, 1),
    TagDefinition(TAG_RELATED_SOUND_FILE, "RelatedSoundFile", (_E,), _ASCII, 13),
    TagDefinition(TAG_INTEROPERABILITY_IFD, "InteroperabilityIFDPointer", (_E,), _LONG, 1),
    TagDefinition(TAG_FLASH_ENERGY, "FlashEnergy", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_SPATIAL_FREQUENCY_RESPONSE, "SpatialFrequencyResponse", (_E,), _UNDEFINED, None),
    TagDefinition(TAG_FOCAL_PLANE_X_RESOLUTION, "FocalPlaneXResolution", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_FOCAL_PLANE_Y_RESOLUTION, "FocalPlaneYResolution", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_FOCAL_PLANE_RESOLUTION_UNIT, "FocalPlaneResolutionUnit", (_E,), _SHORT, 1),
    TagDefinition(TAG_SUBJECT_LOCATION, "SubjectLocation", (_E,), _SHORT, 2),
    TagDefinition(TAG_EXPOSURE_INDEX, "ExposureIndex", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_SENSING_METHOD, "SensingMethod", (_E,), _SHORT, 1),
    TagDefinition(TAG_FILE_SOURCE, "FileSource", (_E,), _UNDEFINED, 1),
    TagDefinition(TAG_SCENE_TYPE, "SceneType", (_E,), _UNDEFINED, 1),
    TagDefinition(TAG_CFA_PATTERN, "CFAPattern", (_E,), _UNDEFINED, None),
    TagDefinition(TAG_CUSTOM_RENDERED, "CustomRendered", (_E,), _SHORT, 1),
    TagDefinition(TAG_EXPOSURE_MODE, "ExposureMode", (_E,), _SHORT, 1),
    TagDefinition(TAG_WHITE_BALANCE, "WhiteBalance", (_E,), _SHORT, 1),
    TagDefinition(TAG_DIGITAL_ZOOM_RATIO, "DigitalZoomRatio", (_E,), _RATIONAL, 1),
    TagDefinition(TAG_FOCAL_LENGTH_IN_35MM_FILM, "FocalLengthIn35mmFilm", (_E,), _SHORT, 1),
    TagDefinition(TAG_SCENE_CAPTURE_TYPE, "SceneCaptureType", (_E,), _SHORT, 1),
    TagDefinition(TAG_GAIN_CONTROL, "GainControl", (_E,), _SHORT, 1),
    TagDefinition(TAG_CONTRAST, "Contrast", (_E,), _SHORT, 1),
    TagDefinition(TAG_SATURATION, "Saturation", (_E,), _SHORT, 1),
    TagDefinition(TAG_SHARPNESS, "Sharpness", (_E,), _SHORT, 1),
    TagDefinition(TAG_DEVICE_SETTING_DESCRIPTION, "DeviceSettingDescription", (_E,), _UNDEFINED, None),
    TagDefinition(TAG_SUBJECT_DISTANCE_RANGE, "SubjectDistanceRange", (_E,), _SHORT, 1),
    TagDefinition(TAG_IMAGE_UNIQUE_ID, "ImageUniqueID", (_E,), _ASCII, 33),

    # GPS IFD
    TagDefinition(TAG_GPS_VERSION_ID, "GPSVersionID", (_G,), _BYTE, 4),
    TagDefinition(TAG_GPS_LATITUDE_REF, "GPSLatitudeRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_LATITUDE, "GPSLatitude", (_G,), _RATIONAL, 3),
    TagDefinition(TAG_GPS_LONGITUDE_REF, "GPSLongitudeRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_LONGITUDE, "GPSLongitude", (_G,), _RATIONAL, 3),
    TagDefinition(TAG_GPS_ALTITUDE_REF, "GPSAltitudeRef", (_G,), _BYTE, 1),
    TagDefinition(TAG_GPS_ALTITUDE, "GPSAltitude", (_G,), _RATIONAL, 1),
    TagDefinition(TAG_GPS_TIME_STAMP, "GPSTimeStamp", (_G,), _RATIONAL, 3),
    TagDefinition(TAG_GPS_SATELLITES, "GPSSatellites", (_G,), _ASCII, None),
    TagDefinition(TAG_GPS_STATUS, "GPSStatus", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_MEASURE_MODE, "GPSMeasureMode", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_DOP, "GPSDOP", (_G,), _RATIONAL, 1),
    TagDefinition(TAG_GPS_SPEED_REF, "GPSSpeedRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_SPEED, "GPSSpeed", (_G,), _RATIONAL, 1),
    TagDefinition(TAG_GPS_TRACK_REF, "GPSTrackRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_TRACK, "GPSTrack", (_G,), _RATIONAL, 1),
    TagDefinition(TAG_GPS_IMG_DIRECTION_REF, "GPSImgDirectionRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_IMG_DIRECTION, "GPSImgDirection", (_G,), _RATIONAL, 1),
    TagDefinition(TAG_GPS_MAP_DATUM, "GPSMapDatum", (_G,), _ASCII, None),
    TagDefinition(TAG_GPS_DEST_LATITUDE_REF, "GPSDestLatitudeRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_DEST_LATITUDE, "GPSDestLatitude", (_G,), _RATIONAL, 3),
    TagDefinition(TAG_GPS_DEST_LONGITUDE_REF, "GPSDestLongitudeRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_DEST_LONGITUDE, "GPSDestLongitude", (_G,), _RATIONAL, 3),
    TagDefinition(TAG_GPS_DEST_BEARING_REF, "GPSDestBearingRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_DEST_BEARING, "GPSDestBearing", (_G,), _RATIONAL, 1),
    TagDefinition(TAG_GPS_DEST_DISTANCE_REF, "GPSDestDistanceRef", (_G,), _ASCII, 2),
    TagDefinition(TAG_GPS_DEST_DISTANCE, "GPSDestDistance", (_G,), _RATIONAL, 1),
    TagDefinition(TAG_GPS_PROCESSING_METHOD, "GPSProcessingMethod", (_G,), _UNDEFINED, None),
    TagDefinition(TAG_GPS_AREA_INFORMATION, "GPSAreaInformation", (_G,), _UNDEFINED, None),
    TagDefinition(TAG_GPS_DATE_STAMP, "GPSDateStamp", (_G,), _ASCII, 11),
    TagDefinition(TAG_GPS_DIFFERENTIAL, "GPSDifferential", (_G,), _SHORT, 1),

    # Interoperability IFD
    TagDefinition(TAG_INTEROPERABILITY_INDEX, "InteroperabilityIndex", (_I,), _ASCII, None),
]

# (tag_id, group) -> definition
TAG_DEFINITIONS: Dict[Tuple[int, IfdGroup], TagDefinition] = {}
# tag_id -> definitions sharing that id, in table order
_DEFINITIONS_BY_ID: Dict[int, List[TagDefinition]] = {}

for _definition in _DEFINITIONS:
    for _group in _definition.groups:
        TAG_DEFINITIONS[(_definition.tag_id, _group)] = _definition
    _DEFINITIONS_BY_ID.setdefault(_definition.tag_id, []).append(_definition)

EXIF_TAG_NAMES = {
    (definition.tag_id, group): definition.name
    for (_, group), definition in TAG_DEFINITIONS.items()
}


def default_group(tag_id: int) -> IfdGroup:
    """
    Return the IFD a tag id belongs to when no group is given.

    Ids shared by several IFDs (0x0001 is both GPSLatitudeRef and
    InteroperabilityIndex) resolve to the first definition in the table.
    Unknown ids resolve to the primary IFD.
    """
    definitions = _DEFINITIONS_BY_ID.get(tag_id)
    if not definitions:
        return IfdGroup.PRIMARY
    return definitions[0].default_group


def get_definition(tag_id: int, group: Optional[IfdGroup] = None) -> Optional[TagDefinition]:
    """
    Look up the definition of a tag.

    Args:
        tag_id: Numeric tag id
        group: IFD group; the tag's default group when omitted

    Returns:
        The TagDefinition, or None if the tag is not defined for that group
    """
    if group is None:
        group = default_group(tag_id)
    return TAG_DEFINITIONS.get((tag_id, group))


def get_tag_name(tag_id: int, group: Optional[IfdGroup] = None) -> str:
    """Return the tag's name, or a hex placeholder for unknown tags."""
    definition = get_definition(tag_id, group)
    if definition is None:
        return f"Tag0x{tag_id:04X}"
    return definition.name


def find_tag_id(name: str) -> Optional[Tuple[int, IfdGroup]]:
    """
    Resolve a tag name (e.g. 'Orientation', 'GPSLatitude') to its id and
    default group. Matching is case-insensitive.
    """
    lowered = name.lower()
    for definition in _DEFINITIONS:
        if definition.name.lower() == lowered:
            return definition.tag_id, definition.default_group
    return None
