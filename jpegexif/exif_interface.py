# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF interface

ExifInterface is the main entry point: it reads the EXIF of a JPEG into a
TagStore, gives access to the tags, and writes the JPEG back with an updated
EXIF segment.

Copyright 2025 DNAi inc.
"""

import logging
from datetime import tzinfo
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union

from jpegexif import accessors
from jpegexif.exceptions import ExifIOError, MissingExifError
from jpegexif.exif_tag import ExifTag
from jpegexif.exif_tags import IfdGroup
from jpegexif.jpeg_segments import JpegSegmentEditor, build_app1_segment, read_exif_payload
from jpegexif.tag_store import TagStore
from jpegexif.tiff_codec import decode, encode

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, str, Path, BinaryIO]
Destination = Union[str, Path, BinaryIO]

_BYTE_ORDERS = {
    'auto': None,
    'II': '<',
    'MM': '>',
}


class ExifInterface:
    """
    Reads, edits and writes the EXIF metadata of JPEG data.

    Example:
        >>> exif = ExifInterface()
        >>> exif.read_exif('photo.jpg')
        >>> exif.orientation_degrees()
        90
        >>> exif.set_tag(exif.build_tag(TAG_ORIENTATION, 1))
        >>> exif.force_rewrite_exif('photo.jpg')
    """

    def __init__(self, store: Optional[TagStore] = None):
        """
        Initialize the interface.

        Args:
            store: Tags to start with; an empty store when None
        """
        self.store = store if store is not None else TagStore()

        self.options: Dict[str, Any] = {}
        self._initialize_default_options()

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @staticmethod
    def available_options() -> Dict[str, Dict[str, Any]]:
        """
        Return a dictionary of available options.

        Returns:
            Dictionary mapping option names to their metadata:
            {
                'OptionName': {
                    'description': 'Description of the option',
                    'type': 'bool|int|choice',
                    'default': default_value,
                    'choices': [...]  # choice options only
                },
                ...
            }
        """
        return {
            'ByteOrder': {
                'description': 'Byte order of written EXIF (auto keeps the byte order read, '
                               'II is little-endian, MM is big-endian)',
                'type': 'choice',
                'choices': list(_BYTE_ORDERS),
                'default': 'auto',
            },
            'InPlaceRewrite': {
                'description': 'Let force_rewrite_exif overwrite the EXIF segment in place '
                               'when its size is unchanged',
                'type': 'bool',
                'default': True,
            },
            'PreserveThumbnail': {
                'description': 'Keep the compressed IFD1 thumbnail when writing',
                'type': 'bool',
                'default': True,
            },
        }

    def _initialize_default_options(self) -> None:
        for option_name, option_info in self.available_options().items():
            self.options[option_name] = option_info['default']

    def set_option(self, option_name: str, value: Any) -> None:
        """
        Set an option value.

        Args:
            option_name: Name of the option (e.g., 'ByteOrder')
            value: Value to set; strings are accepted for bool options

        Raises:
            ValueError: If the option name or value is not valid
        """
        available = self.available_options()
        if option_name not in available:
            raise ValueError(
                f"Unknown option: {option_name}. Use available_options() to see valid options."
            )

        option_info = available[option_name]
        expected_type = option_info['type']
        if expected_type == 'bool' and not isinstance(value, bool):
            if isinstance(value, str):
                value = value.lower() in ('true', '1', 'yes', 'on')
            else:
                value = bool(value)
        elif expected_type == 'int' and not isinstance(value, int):
            try:
                value = int(value)
            except (ValueError, TypeError) as e:
                raise ValueError(
                    f"Option {option_name} requires int value, got {type(value).__name__}"
                ) from e
        elif expected_type == 'choice' and value not in option_info['choices']:
            raise ValueError(
                f"Option {option_name} must be one of {', '.join(option_info['choices'])}, "
                f"got {value!r}"
            )

        self.options[option_name] = value

    def get_option(self, option_name: str, default: Any = None) -> Any:
        return self.options.get(option_name, default)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_exif(self, source: Source) -> TagStore:
        """
        Read the EXIF of a JPEG, replacing the current tags.

        A JPEG without an EXIF segment yields an empty store.

        Args:
            source: JPEG bytes, a file path, or a binary stream

        Returns:
            The new TagStore (also available as ``self.store``)

        Raises:
            NotAJpegError: If the data does not start with SOI
            MalformedMarkerError: If the JPEG marker structure is broken
            DecodeError: If the EXIF payload is malformed
            ExifIOError: If the file or stream cannot be read
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            payload = JpegSegmentEditor(bytes(source)).get_exif_payload()
        elif isinstance(source, (str, Path)):
            try:
                with open(source, 'rb') as f:
                    payload = read_exif_payload(f)
            except OSError as e:
                raise ExifIOError(f"Cannot read EXIF from {source}: {e}") from e
        else:
            try:
                payload = read_exif_payload(source)
            except OSError as e:
                raise ExifIOError(f"Cannot read EXIF from stream: {e}") from e

        if payload is None:
            logger.debug("No EXIF segment found")
            self.store = TagStore()
        else:
            self.store = decode(payload)
            logger.debug("Read %d EXIF tags", len(self.store))
        return self.store

    # ------------------------------------------------------------------
    # Tag access
    # ------------------------------------------------------------------

    def get_tag(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[ExifTag]:
        return self.store.get(tag_id, group)

    def get_tag_int_value(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[int]:
        return self.store.get_int_value(tag_id, group)

    def get_tag_string_value(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[str]:
        return self.store.get_string_value(tag_id, group)

    def build_tag(self, tag_id: int, value: Any, group: Optional[IfdGroup] = None) -> ExifTag:
        """Build a validated tag without storing it (see TagStore.build)."""
        return self.store.build(tag_id, value, group)

    def set_tag(self, tag: ExifTag) -> Optional[ExifTag]:
        return self.store.set(tag)

    def set_tag_value(self, tag_id: int, value: Any, group: Optional[IfdGroup] = None) -> bool:
        return self.store.set_value(tag_id, value, group)

    def delete_tag(self, tag_id: int, group: Optional[IfdGroup] = None) -> None:
        self.store.remove(tag_id, group)

    def get_all_tags(self) -> List[ExifTag]:
        return self.store.all_tags()

    def clear_exif(self) -> None:
        self.store.clear()

    # Semantic helpers

    def orientation_degrees(self) -> int:
        return accessors.orientation_degrees(self.store)

    def add_location(self, latitude: float, longitude: float, altitude: float = 0.0,
                     timestamp: Optional[accessors.Timestamp] = None) -> None:
        accessors.add_location(self.store, latitude, longitude, altitude, timestamp)

    def add_gps_tags(self, latitude: float, longitude: float) -> None:
        accessors.add_gps_tags(self.store, latitude, longitude)

    def add_gps_date_time_stamp(self, timestamp: accessors.Timestamp) -> None:
        accessors.add_gps_date_time_stamp(self.store, timestamp)

    def add_date_time_stamp(self, tag_id: int, timestamp: accessors.Timestamp,
                            tz: Optional[tzinfo] = None) -> ExifTag:
        return accessors.add_date_time_stamp(self.store, tag_id, timestamp, tz)

    def get_lat_long(self) -> Optional[Tuple[float, float]]:
        return accessors.get_lat_long(self.store)

    @staticmethod
    def get_rotation_for_orientation_value(orientation: Optional[int]) -> int:
        return accessors.rotation_for_orientation_value(orientation)

    @staticmethod
    def get_orientation_value_for_rotation(degrees: int) -> int:
        return accessors.orientation_value_for_rotation(degrees)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def _byte_order(self) -> Optional[str]:
        return _BYTE_ORDERS[self.get_option('ByteOrder', 'auto')]

    def _encode_store(self, store: TagStore) -> bytes:
        if self.get_option('PreserveThumbnail', True) or store.thumbnail is None:
            return encode(store, self._byte_order())

        stripped = TagStore()
        for tag in store:
            if tag.group != IfdGroup.THUMBNAIL:
                stripped.set(tag)
        stripped.byte_order = store.byte_order
        return encode(stripped, self._byte_order())

    def get_exif_bytes(self) -> bytes:
        """Encode the current tags as a TIFF payload."""
        return self._encode_store(self.store)

    def write_exif(self, jpeg: bytes, destination: Optional[Destination] = None) -> Union[bytes, int]:
        """
        Write JPEG data with the current tags as its EXIF.

        An existing EXIF segment is replaced; otherwise a new one is inserted
        after SOI. The image data is copied unchanged.

        Args:
            jpeg: Original JPEG data
            destination: File path or binary stream; None to return the bytes

        Returns:
            The new JPEG bytes when destination is None, otherwise the number
            of bytes written

        Raises:
            NotAJpegError: If jpeg does not start with SOI
            PayloadTooLargeError: If the EXIF does not fit one APP1 segment
            ExifIOError: If writing to the destination fails
        """
        editor = JpegSegmentEditor(jpeg)
        output = editor.write_exif(self.get_exif_bytes())

        if destination is None:
            return output

        if isinstance(destination, (str, Path)):
            try:
                with open(destination, 'wb') as f:
                    f.write(output)
            except OSError as e:
                raise ExifIOError(f"Cannot write {destination}: {e}") from e
        else:
            try:
                destination.write(output)
            except OSError as e:
                raise ExifIOError(f"Cannot write to stream: {e}") from e

        return len(output)

    def force_rewrite_exif(self, path: Union[str, Path]) -> bool:
        """
        Merge the current tags into the EXIF of a JPEG file and save it.

        Tags of the file that are not set here are kept. When the new EXIF
        segment has exactly the size of the old one (and InPlaceRewrite is
        on), only the segment bytes are overwritten; otherwise the whole file
        is rewritten.

        This only works if the file already has EXIF.

        Args:
            path: JPEG file to update

        Returns:
            True if the segment was overwritten in place, False if the file
            was rewritten

        Raises:
            MissingExifError: If the file has no EXIF segment
            ExifIOError: If the file cannot be read or written
        """
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise ExifIOError(f"Cannot read {path}: {e}") from e

        editor = JpegSegmentEditor(data)
        region = editor.locate_exif_segment()
        if region is None:
            raise MissingExifError(f"{path} has no EXIF segment to rewrite")

        merged = decode(data[region.tiff_offset:region.end])
        for tag in self.store:
            merged.set(tag)
        if self.store.thumbnail is not None:
            merged.thumbnail = self.store.thumbnail

        payload = self._encode_store(merged)
        segment = build_app1_segment(payload)

        try:
            if len(segment) == region.length and self.get_option('InPlaceRewrite', True):
                with open(path, 'r+b') as f:
                    f.seek(region.start)
                    f.write(segment)
                logger.debug("Rewrote EXIF of %s in place (%d bytes)", path, len(segment))
                return True

            output = editor.replace_existing(region, payload)
            with open(path, 'wb') as f:
                f.write(output)
        except OSError as e:
            raise ExifIOError(f"Cannot write {path}: {e}") from e

        logger.debug("Rewrote %s with a %d byte EXIF segment (was %d)",
                     path, len(segment), region.length)
        return False

    def __repr__(self) -> str:
        return f"ExifInterface({self.store!r})"
