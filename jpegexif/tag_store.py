# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
In-memory EXIF tag store

The TagStore maps (tag id, IFD group) keys to ExifTag entries. It validates
new values against the static definition table and keeps insertion order
so that encoding is deterministic.

Copyright 2025 DNAi inc.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from jpegexif.exceptions import BuildError, TypeMismatchError, UnknownTagError
from jpegexif.exif_tag import ExifTag, decode_ascii
from jpegexif.exif_tags import (
    ExifTagType,
    IfdGroup,
    INTEGER_RANGES,
    INTEGER_TYPES,
    POINTER_TAGS,
    RATIONAL_TYPES,
    TAG_DEFINITIONS,
    TAG_JPEG_INTERCHANGE_FORMAT,
    TAG_JPEG_INTERCHANGE_FORMAT_LENGTH,
    TagDefinition,
    default_group,
)
from jpegexif.rational import Rational

TagKey = Tuple[int, IfdGroup]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _encode_string(value: str) -> bytes:
    # Plain ASCII when possible, UTF-8 (EXIF 3.0) otherwise
    try:
        encoded = value.encode('ascii')
    except UnicodeEncodeError:
        encoded = value.encode('utf-8')
    return encoded + b'\x00'


class TagStore:
    """
    Directory of EXIF tags keyed by (tag id, IFD group).

    At most one tag exists per key. Setting an existing key replaces the
    tag in place, keeping its position in ``all_tags()``.

    Attributes:
        byte_order: '<' or '>' when decoded from a file, None otherwise
        thumbnail: Compressed (JPEG) thumbnail carried in IFD1, if any
    """

    def __init__(self):
        self._tags: Dict[TagKey, ExifTag] = {}
        self.byte_order: Optional[str] = None
        self.thumbnail: Optional[bytes] = None

    @staticmethod
    def _key(tag_id: int, group: Optional[IfdGroup]) -> TagKey:
        if group is None:
            group = default_group(tag_id)
        return (tag_id, group)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[ExifTag]:
        """
        Get a tag.

        Args:
            tag_id: Numeric tag id
            group: IFD group; the tag's default group when omitted

        Returns:
            The ExifTag, or None if absent
        """
        return self._tags.get(self._key(tag_id, group))

    def get_int_value(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[int]:
        """
        Get the first component of an integer tag.

        Returns None when the tag is absent or is not integer-coercible
        (ASCII, UNDEFINED and rational types). None is distinct from 0.
        """
        values = self.get_int_values(tag_id, group)
        if not values:
            return None
        return values[0]

    def get_int_values(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[List[int]]:
        tag = self.get(tag_id, group)
        if tag is None:
            return None
        if tag.data_type not in INTEGER_TYPES and tag.data_type != ExifTagType.BYTE:
            return None
        return list(tag.value)

    def get_rational_value(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[Rational]:
        tag = self.get(tag_id, group)
        if tag is None:
            return None
        return tag.get_value_as_rational(0)

    def get_string_value(self, tag_id: int, group: Optional[IfdGroup] = None) -> Optional[str]:
        tag = self.get(tag_id, group)
        if tag is None or tag.data_type != ExifTagType.ASCII:
            return None
        return decode_ascii(tag.value)

    def all_tags(self) -> List[ExifTag]:
        """Snapshot of all tags in insertion order."""
        return list(self._tags.values())

    def tags_for_group(self, group: IfdGroup) -> List[ExifTag]:
        return [tag for tag in self._tags.values() if tag.group == group]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set(self, tag: ExifTag) -> Optional[ExifTag]:
        """
        Insert or replace a tag by its (tag id, group) key.

        Args:
            tag: Tag to store

        Returns:
            The tag previously stored under the same key, if any
        """
        if not isinstance(tag, ExifTag):
            raise TypeError(f"Expected ExifTag, got {type(tag).__name__}")
        previous = self._tags.get(tag.key)
        self._tags[tag.key] = tag
        return previous

    def set_value(self, tag_id: int, value: Any, group: Optional[IfdGroup] = None) -> bool:
        """
        Replace the value of an existing tag.

        Returns:
            False if the tag is absent, True once the new value is stored

        Raises:
            TypeMismatchError: If the value does not fit the tag definition
        """
        key = self._key(tag_id, group)
        if key not in self._tags:
            return False
        self._tags[key] = self.build(tag_id, value, key[1])
        return True

    def remove(self, tag_id: int, group: Optional[IfdGroup] = None) -> None:
        """Remove a tag. Does nothing if the tag is absent."""
        self._tags.pop(self._key(tag_id, group), None)

    def clear(self) -> None:
        self._tags.clear()
        self.thumbnail = None

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build(self, tag_id: int, value: Any, group: Optional[IfdGroup] = None) -> ExifTag:
        """
        Build a tag from a Python value, validated against the definition table.

        Accepted values per data type:
        - ASCII: str (encoded ASCII, or UTF-8 if needed) or bytes
        - BYTE, UNDEFINED: bytes, an int, or a sequence of ints
        - SHORT, LONG, SLONG: an int or a sequence of ints
        - RATIONAL, SRATIONAL: a Rational, a (numerator, denominator) tuple,
          or a sequence of those

        Nothing is coerced: floats are rejected for rational tags and
        out-of-range integers are rejected. Fixed-length ASCII values shorter
        than the defined count are NUL-padded.

        The tag is not stored; pass it to set().

        Args:
            tag_id: Numeric tag id
            value: Value to build the tag from
            group: IFD group; the tag's default group when omitted

        Returns:
            The new ExifTag

        Raises:
            UnknownTagError: If the tag is not defined for the group
            TypeMismatchError: If the value does not match the definition
            BuildError: If the tag is a structural pointer written by the encoder
        """
        key = self._key(tag_id, group)
        definition = TAG_DEFINITIONS.get(key)
        if definition is None:
            raise UnknownTagError(
                f"Unknown tag 0x{tag_id:04X} for IFD {key[1].value}"
            )
        if key in POINTER_TAGS or tag_id in (TAG_JPEG_INTERCHANGE_FORMAT,
                                             TAG_JPEG_INTERCHANGE_FORMAT_LENGTH):
            raise BuildError(
                f"{definition.name} is an offset tag and is written by the encoder"
            )

        data_type, components = self._convert_value(definition, value)

        if definition.count is not None and len(components) != definition.count:
            raise TypeMismatchError(
                f"{definition.name} expects {definition.count} component(s), got {len(components)}"
            )

        return ExifTag(tag_id, key[1], data_type, components)

    def _convert_value(self, definition: TagDefinition, value: Any):
        """
        Convert a Python value into (data_type, components) for a definition.
        """
        primary = definition.types[0]

        if primary == ExifTagType.ASCII:
            if isinstance(value, str):
                raw = _encode_string(value)
            elif isinstance(value, (bytes, bytearray)):
                raw = bytes(value)
                if not raw.endswith(b'\x00'):
                    raw += b'\x00'
            else:
                raise TypeMismatchError(
                    f"{definition.name} expects a string, got {type(value).__name__}"
                )
            if definition.count is not None:
                if len(raw) > definition.count:
                    raise TypeMismatchError(
                        f"{definition.name} holds at most {definition.count - 1} characters"
                    )
                raw = raw.ljust(definition.count, b'\x00')
            return ExifTagType.ASCII, raw

        if primary in (ExifTagType.BYTE, ExifTagType.UNDEFINED):
            if isinstance(value, (bytes, bytearray)):
                return primary, bytes(value)
            ints = self._to_ints(definition, value)
            low, high = INTEGER_RANGES[ExifTagType.BYTE]
            if not all(low <= v <= high for v in ints):
                raise TypeMismatchError(f"{definition.name} expects byte values (0-255)")
            return primary, bytes(ints)

        if primary in RATIONAL_TYPES:
            rationals = self._to_rationals(definition, value)
            low, high = INTEGER_RANGES[primary]
            for rational in rationals:
                if not (low <= rational.numerator <= high and low <= rational.denominator <= high):
                    raise TypeMismatchError(
                        f"{definition.name}: {rational} is out of range for {primary.name}"
                    )
            return primary, tuple(rationals)

        ints = self._to_ints(definition, value)
        for data_type in definition.types:
            low, high = INTEGER_RANGES[data_type]
            if all(low <= v <= high for v in ints):
                return data_type, tuple(ints)
        raise TypeMismatchError(
            f"{definition.name}: value out of range for "
            f"{'/'.join(t.name for t in definition.types)}"
        )

    @staticmethod
    def _to_ints(definition: TagDefinition, value: Any) -> List[int]:
        if _is_int(value):
            return [value]
        if isinstance(value, (list, tuple)) and value and all(_is_int(v) for v in value):
            return list(value)
        raise TypeMismatchError(
            f"{definition.name} expects an integer or a sequence of integers, "
            f"got {value!r}"
        )

    @staticmethod
    def _to_rationals(definition: TagDefinition, value: Any) -> List[Rational]:
        if isinstance(value, Rational):
            return [value]
        # A bare (numerator, denominator) tuple is a single component
        if isinstance(value, tuple) and len(value) == 2 and all(_is_int(v) for v in value):
            return [Rational(value[0], value[1])]
        if isinstance(value, (list, tuple)) and value:
            rationals = []
            for item in value:
                if isinstance(item, Rational):
                    rationals.append(item)
                elif (isinstance(item, (list, tuple)) and len(item) == 2
                        and all(_is_int(v) for v in item)):
                    rationals.append(Rational(item[0], item[1]))
                else:
                    raise TypeMismatchError(
                        f"{definition.name} expects rational components, got {item!r}"
                    )
            return rationals
        raise TypeMismatchError(
            f"{definition.name} expects a Rational or (numerator, denominator), got {value!r}"
        )

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[ExifTag]:
        return iter(list(self._tags.values()))

    def __contains__(self, key: Union[int, TagKey]) -> bool:
        if isinstance(key, tuple):
            return key in self._tags
        return self._key(key, None) in self._tags

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagStore):
            return NotImplemented
        mine = {key: (tag.data_type, tag.value) for key, tag in self._tags.items()}
        theirs = {key: (tag.data_type, tag.value) for key, tag in other._tags.items()}
        return mine == theirs and self.thumbnail == other.thumbnail

    def __repr__(self) -> str:
        return f"TagStore({len(self._tags)} tags, byte_order={self.byte_order!r})"
