# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF tag entry

An ExifTag is one typed directory entry: its identity (tag id and IFD group),
its data type and its raw components.

Copyright 2025 DNAi inc.
"""

from typing import Any, List, Optional, Tuple, Union

import chardet

from jpegexif.exif_tags import (
    ExifTagType,
    IfdGroup,
    INTEGER_TYPES,
    RATIONAL_TYPES,
    TAG_SIZES,
    get_tag_name,
)
from jpegexif.rational import Rational


def decode_ascii(data: bytes) -> str:
    """
    Decode the bytes of an ASCII tag to a string.

    Decoding stops at the first NUL. UTF-8 (a superset of ASCII, and the
    EXIF 3.0 text encoding) is tried first; legacy encodings written by
    older cameras are detected with chardet, with latin-1 as last resort.

    Args:
        data: Raw tag bytes, terminator included or not

    Returns:
        Decoded string
    """
    null_pos = data.find(b'\x00')
    if null_pos >= 0:
        data = data[:null_pos]

    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        pass

    detected = chardet.detect(data)
    encoding = detected.get('encoding')
    confidence = detected.get('confidence') or 0.0
    if encoding and confidence > 0.5:
        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            pass

    return data.decode('latin-1')


TagValue = Union[bytes, Tuple[int, ...], Tuple[Rational, ...]]


class ExifTag:
    """
    A single EXIF tag.

    ``value`` holds the raw components:
    - BYTE, ASCII, UNDEFINED: bytes (ASCII keeps its NUL terminator)
    - SHORT, LONG, SLONG: tuple of int
    - RATIONAL, SRATIONAL: tuple of Rational

    Tags are normally created by TagStore.build or by the TIFF decoder.
    """

    def __init__(self, tag_id: int, group: IfdGroup, data_type: ExifTagType, value: TagValue):
        self.tag_id = tag_id
        self.group = group
        self.data_type = ExifTagType(data_type)
        self.value = value

    @property
    def key(self) -> Tuple[int, IfdGroup]:
        return (self.tag_id, self.group)

    @property
    def name(self) -> str:
        return get_tag_name(self.tag_id, self.group)

    @property
    def component_count(self) -> int:
        return len(self.value)

    @property
    def data_size(self) -> int:
        """Size of the encoded value in bytes."""
        return TAG_SIZES[self.data_type] * self.component_count

    def get_value_as_string(self) -> Optional[str]:
        """Return the value of an ASCII tag as a string, None for other types."""
        if self.data_type != ExifTagType.ASCII:
            return None
        return decode_ascii(self.value)

    def get_value_as_ints(self) -> Optional[List[int]]:
        """
        Return integer components.

        BYTE and UNDEFINED values are returned byte by byte. Returns None for
        ASCII and rational types.
        """
        if self.data_type in INTEGER_TYPES:
            return list(self.value)
        if self.data_type in (ExifTagType.BYTE, ExifTagType.UNDEFINED):
            return list(self.value)
        return None

    def get_value_as_int(self, index: int = 0) -> Optional[int]:
        values = self.get_value_as_ints()
        if values is None or index >= len(values):
            return None
        return values[index]

    def get_value_as_rationals(self) -> Optional[List[Rational]]:
        if self.data_type not in RATIONAL_TYPES:
            return None
        return list(self.value)

    def get_value_as_rational(self, index: int = 0) -> Optional[Rational]:
        values = self.get_value_as_rationals()
        if values is None or index >= len(values):
            return None
        return values[index]

    def force_get_value_as_long(self, index: int = 0, default: int = 0) -> int:
        """
        Return component ``index`` as an int, whatever the data type.

        Rationals are truncated to their integer quotient and ASCII or
        UNDEFINED data yield the byte value. Returns ``default`` when the
        component does not exist.
        """
        if index >= self.component_count:
            return default
        if self.data_type in RATIONAL_TYPES:
            return int(self.value[index].to_float())
        return int(self.value[index])

    def get_value(self) -> Any:
        """
        Return a plain Python value, for display and serialization.

        ASCII becomes str, single components are unwrapped, rationals become
        (numerator, denominator) pairs and UNDEFINED stays bytes.
        """
        if self.data_type == ExifTagType.ASCII:
            return decode_ascii(self.value)
        if self.data_type == ExifTagType.UNDEFINED:
            return bytes(self.value)
        if self.data_type in RATIONAL_TYPES:
            values = [(r.numerator, r.denominator) for r in self.value]
        else:
            values = list(self.value)
        if len(values) == 1:
            return values[0]
        return values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExifTag):
            return NotImplemented
        return (
            self.tag_id == other.tag_id
            and self.group == other.group
            and self.data_type == other.data_type
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.tag_id, self.group, self.data_type, self.value))

    def __repr__(self) -> str:
        return (
            f"ExifTag({self.name}, id=0x{self.tag_id:04X}, group={self.group.value}, "
            f"type={self.data_type.name}, count={self.component_count}, value={self.value!r})"
        )
