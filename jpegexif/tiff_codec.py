# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
TIFF/EXIF codec

This module decodes the TIFF structure carried in an EXIF APP1 segment into
a TagStore, and encodes a TagStore back into TIFF bytes.

Encoded layout:
    TIFF header (8 bytes)
    IFD0, Exif IFD, Interoperability IFD, GPS IFD, IFD1 (those present)
    Data area for values larger than 4 bytes
    Compressed thumbnail

All offsets are relative to the start of the TIFF header.

Copyright 2025 DNAi inc.
"""

import logging
import struct
from typing import Dict, List, Optional, Set, Tuple

from jpegexif.exceptions import (
    BadByteOrderError,
    DecodeError,
    TruncatedDataError,
    TypeMismatchError,
)
from jpegexif.exif_tag import ExifTag
from jpegexif.exif_tags import (
    ExifTagType,
    IfdGroup,
    POINTER_TAGS,
    RATIONAL_TYPES,
    TAG_EXIF_IFD,
    TAG_GPS_IFD,
    TAG_INTEROPERABILITY_IFD,
    TAG_JPEG_INTERCHANGE_FORMAT,
    TAG_JPEG_INTERCHANGE_FORMAT_LENGTH,
    TAG_SIZES,
    TAG_STRIP_BYTE_COUNTS,
    TAG_STRIP_OFFSETS,
)
from jpegexif.rational import Rational
from jpegexif.tag_store import TagStore

logger = logging.getLogger(__name__)

TIFF_MAGIC = 42
HEADER_SIZE = 8
ENTRY_SIZE = 12

# struct format characters for integer components
_STRUCT_CODES = {
    ExifTagType.BYTE: 'B',
    ExifTagType.SHORT: 'H',
    ExifTagType.LONG: 'I',
    ExifTagType.SLONG: 'i',
    ExifTagType.RATIONAL: 'I',
    ExifTagType.SRATIONAL: 'i',
}

# IFDs in the order they are written
IFD_ORDER = (
    IfdGroup.PRIMARY,
    IfdGroup.EXIF,
    IfdGroup.INTEROPERABILITY,
    IfdGroup.GPS,
    IfdGroup.THUMBNAIL,
)

_THUMBNAIL_TAGS = (TAG_JPEG_INTERCHANGE_FORMAT, TAG_JPEG_INTERCHANGE_FORMAT_LENGTH)
_STRIP_TAGS = (TAG_STRIP_OFFSETS, TAG_STRIP_BYTE_COUNTS)


def decode(data: bytes, tiff_offset: int = 0) -> TagStore:
    """
    Decode a TIFF structure into a TagStore.

    Args:
        data: Buffer containing the TIFF structure
        tiff_offset: Offset of the TIFF header (byte-order marker) in data

    Returns:
        A new TagStore

    Raises:
        BadByteOrderError: If the byte-order marker is neither II nor MM
        TruncatedDataError: If an offset or count runs past the buffer
        DecodeError: If the magic number is wrong or IFDs form a loop
    """
    return TiffDecoder(data, tiff_offset).decode()


def encode(store: TagStore, byte_order: Optional[str] = None) -> bytes:
    """
    Encode a TagStore into TIFF bytes.

    Args:
        store: Tags to encode
        byte_order: '<' (II) or '>' (MM); defaults to the store's byte order,
                    then little-endian

    Returns:
        TIFF bytes starting with the byte-order marker
    """
    endian = byte_order or store.byte_order or '<'
    return TiffEncoder(endian).encode(store)


class TiffDecoder:
    """
    Walks IFD0, the sub-IFDs it points to and IFD1.

    Malformed input is never patched over: any inconsistency raises a
    DecodeError subclass and no TagStore is returned.
    """

    def __init__(self, data: bytes, base_offset: int = 0):
        """
        Initialize the decoder.

        Args:
            data: Buffer containing the TIFF structure
            base_offset: Offset of the TIFF header within data
        """
        self.data = bytes(data)
        self.base = base_offset
        self.endian = '<'
        self._visited: Set[int] = set()

    def decode(self) -> TagStore:
        if self.base < 0 or self.base + HEADER_SIZE > len(self.data):
            raise TruncatedDataError("Data too short for TIFF header")

        byte_order = self.data[self.base:self.base + 2]
        if byte_order == b'II':
            self.endian = '<'
        elif byte_order == b'MM':
            self.endian = '>'
        else:
            raise BadByteOrderError(f"Invalid TIFF byte order marker: {byte_order!r}")

        magic = self._unpack('H', self.base + 2)
        if magic != TIFF_MAGIC:
            raise DecodeError(f"Invalid TIFF magic number: {magic}")

        ifd0_offset = self._unpack('I', self.base + 4)

        store = TagStore()
        store.byte_order = self.endian

        next_ifd = self._read_ifd(store, ifd0_offset, IfdGroup.PRIMARY)
        if next_ifd:
            # IFD1 holds the thumbnail; further IFDs are not part of EXIF
            self._read_ifd(store, next_ifd, IfdGroup.THUMBNAIL)

        return store

    def _require(self, position: int, size: int, what: str) -> None:
        if position < 0 or position + size > len(self.data):
            raise TruncatedDataError(
                f"{what} at offset {position} (+{size} bytes) runs past end of data "
                f"({len(self.data)} bytes)"
            )

    def _unpack(self, fmt: str, position: int):
        size = struct.calcsize(f'{self.endian}{fmt}')
        self._require(position, size, f"Field '{fmt}'")
        return struct.unpack_from(f'{self.endian}{fmt}', self.data, position)[0]

    def _read_ifd(self, store: TagStore, ifd_offset: int, group: IfdGroup) -> int:
        """
        Parse one IFD into the store and follow its sub-IFD pointers.

        Args:
            store: Store receiving the tags
            ifd_offset: Offset of the IFD relative to the TIFF header
            group: IFD group the entries belong to

        Returns:
            Offset of the next IFD in the chain (0 if none)
        """
        if ifd_offset in self._visited:
            raise DecodeError(f"IFD loop detected at offset {ifd_offset}")
        self._visited.add(ifd_offset)

        start = self.base + ifd_offset
        self._require(start, 2, f"{group.value} entry count")
        num_entries = self._unpack('H', start)
        self._require(start + 2, num_entries * ENTRY_SIZE + 4, f"{group.value} directory")

        sub_ifds: List[Tuple[IfdGroup, int]] = []
        thumbnail_offset: Optional[int] = None
        thumbnail_length: Optional[int] = None

        for index in range(num_entries):
            entry = start + 2 + index * ENTRY_SIZE
            tag_id, type_code, count = struct.unpack_from(f'{self.endian}HHI', self.data, entry)

            try:
                data_type = ExifTagType(type_code)
            except ValueError:
                logger.debug("Skipping tag 0x%04X in %s: unknown data type %d",
                             tag_id, group.value, type_code)
                continue

            size = TAG_SIZES[data_type] * count
            if size <= 4:
                value_position = entry + 8
            else:
                value_position = self.base + self._unpack('I', entry + 8)
            self._require(value_position, size, f"Value of tag 0x{tag_id:04X}")
            raw = self.data[value_position:value_position + size]
            components = self._parse_components(data_type, count, raw)

            key = (tag_id, group)
            if key in POINTER_TAGS:
                pointer = self._first_integer(data_type, components)
                if pointer:
                    sub_ifds.append((POINTER_TAGS[key], pointer))
                continue

            if group == IfdGroup.THUMBNAIL:
                if tag_id == TAG_JPEG_INTERCHANGE_FORMAT:
                    thumbnail_offset = self._first_integer(data_type, components)
                    continue
                if tag_id == TAG_JPEG_INTERCHANGE_FORMAT_LENGTH:
                    thumbnail_length = self._first_integer(data_type, components)
                    continue
                if tag_id in _STRIP_TAGS:
                    logger.debug("Dropping uncompressed thumbnail strip tag 0x%04X", tag_id)
                    continue

            store.set(ExifTag(tag_id, group, data_type, components))

        next_ifd = self._unpack('I', start + 2 + num_entries * ENTRY_SIZE)

        if thumbnail_offset and thumbnail_length:
            position = self.base + thumbnail_offset
            self._require(position, thumbnail_length, "Thumbnail")
            store.thumbnail = self.data[position:position + thumbnail_length]

        for sub_group, sub_offset in sub_ifds:
            self._read_ifd(store, sub_offset, sub_group)

        return next_ifd

    def _parse_components(self, data_type: ExifTagType, count: int, raw: bytes):
        if data_type in (ExifTagType.BYTE, ExifTagType.ASCII, ExifTagType.UNDEFINED):
            return bytes(raw)
        code = _STRUCT_CODES[data_type]
        if data_type in RATIONAL_TYPES:
            flat = struct.unpack(f'{self.endian}{count * 2}{code}', raw)
            return tuple(Rational(flat[i], flat[i + 1]) for i in range(0, len(flat), 2))
        return struct.unpack(f'{self.endian}{count}{code}', raw)

    @staticmethod
    def _first_integer(data_type: ExifTagType, components) -> Optional[int]:
        if data_type in RATIONAL_TYPES or data_type == ExifTagType.ASCII or not components:
            return None
        return int(components[0])


class TiffEncoder:
    """
    Lays out a TagStore as a TIFF structure.

    Pointer tags (Exif, GPS and Interoperability IFD offsets, thumbnail
    offset and length) are generated here from the store's content.
    """

    def __init__(self, endian: str = '<'):
        """
        Initialize the encoder.

        Args:
            endian: Byte order ('<' for little-endian, '>' for big-endian)
        """
        if endian not in ('<', '>'):
            raise ValueError(f"Invalid byte order: {endian!r}")
        self.endian = endian

    def encode(self, store: TagStore) -> bytes:
        grouped: Dict[IfdGroup, List[ExifTag]] = {group: [] for group in IFD_ORDER}
        for tag in store.all_tags():
            if tag.key in POINTER_TAGS or (
                    tag.group == IfdGroup.THUMBNAIL and tag.tag_id in _THUMBNAIL_TAGS):
                logger.debug("Ignoring stored offset tag 0x%04X in %s", tag.tag_id, tag.group.value)
                continue
            grouped[tag.group].append(tag)

        thumbnail = store.thumbnail
        has_interop = bool(grouped[IfdGroup.INTEROPERABILITY])
        present = {
            IfdGroup.PRIMARY: True,
            IfdGroup.EXIF: bool(grouped[IfdGroup.EXIF]) or has_interop,
            IfdGroup.INTEROPERABILITY: has_interop,
            IfdGroup.GPS: bool(grouped[IfdGroup.GPS]),
            IfdGroup.THUMBNAIL: bool(grouped[IfdGroup.THUMBNAIL]) or bool(thumbnail),
        }

        # Entries are (tag_id, data_type, count, raw); raw None marks a pointer
        entries: Dict[IfdGroup, List[Tuple[int, ExifTagType, int, Optional[bytes]]]] = {}
        for group in IFD_ORDER:
            if not present[group]:
                continue
            entries[group] = [
                (tag.tag_id, tag.data_type, tag.component_count, self._pack_value(tag))
                for tag in grouped[group]
            ]

        if present[IfdGroup.EXIF]:
            entries[IfdGroup.PRIMARY].append((TAG_EXIF_IFD, ExifTagType.LONG, 1, None))
        if present[IfdGroup.GPS]:
            entries[IfdGroup.PRIMARY].append((TAG_GPS_IFD, ExifTagType.LONG, 1, None))
        if has_interop:
            entries[IfdGroup.EXIF].append((TAG_INTEROPERABILITY_IFD, ExifTagType.LONG, 1, None))
        if thumbnail:
            entries[IfdGroup.THUMBNAIL].append(
                (TAG_JPEG_INTERCHANGE_FORMAT, ExifTagType.LONG, 1, None))
            entries[IfdGroup.THUMBNAIL].append(
                (TAG_JPEG_INTERCHANGE_FORMAT_LENGTH, ExifTagType.LONG, 1,
                 struct.pack(f'{self.endian}I', len(thumbnail))))

        for group_entries in entries.values():
            group_entries.sort(key=lambda entry: entry[0])

        # Directory offsets
        ifd_offsets: Dict[IfdGroup, int] = {}
        position = HEADER_SIZE
        for group, group_entries in entries.items():
            ifd_offsets[group] = position
            position += 2 + len(group_entries) * ENTRY_SIZE + 4
        data_start = position

        # Data area for values over 4 bytes, word aligned
        data_area = bytearray()
        value_offsets: Dict[Tuple[IfdGroup, int], int] = {}
        for group, group_entries in entries.items():
            for index, (_, _, _, raw) in enumerate(group_entries):
                if raw is not None and len(raw) > 4:
                    value_offsets[(group, index)] = data_start + len(data_area)
                    data_area.extend(raw)
                    if len(raw) % 2:
                        data_area.append(0)

        pointer_values = {
            TAG_EXIF_IFD: ifd_offsets.get(IfdGroup.EXIF, 0),
            TAG_GPS_IFD: ifd_offsets.get(IfdGroup.GPS, 0),
            TAG_INTEROPERABILITY_IFD: ifd_offsets.get(IfdGroup.INTEROPERABILITY, 0),
            TAG_JPEG_INTERCHANGE_FORMAT: data_start + len(data_area),
        }

        out = bytearray()
        out.extend(self._build_header())
        for group, group_entries in entries.items():
            out.extend(struct.pack(f'{self.endian}H', len(group_entries)))
            for index, (tag_id, data_type, count, raw) in enumerate(group_entries):
                out.extend(struct.pack(f'{self.endian}HHI', tag_id, data_type, count))
                if raw is None:
                    out.extend(struct.pack(f'{self.endian}I', pointer_values[tag_id]))
                elif len(raw) <= 4:
                    out.extend(raw.ljust(4, b'\x00'))
                else:
                    out.extend(struct.pack(f'{self.endian}I', value_offsets[(group, index)]))

            next_ifd = 0
            if group == IfdGroup.PRIMARY:
                next_ifd = ifd_offsets.get(IfdGroup.THUMBNAIL, 0)
            out.extend(struct.pack(f'{self.endian}I', next_ifd))

        out.extend(data_area)
        if thumbnail:
            out.extend(thumbnail)

        return bytes(out)

    def _build_header(self) -> bytes:
        header = b'II' if self.endian == '<' else b'MM'
        header += struct.pack(f'{self.endian}H', TIFF_MAGIC)
        # IFD0 follows the header directly
        header += struct.pack(f'{self.endian}I', HEADER_SIZE)
        return header

    def _pack_value(self, tag: ExifTag) -> bytes:
        """
        Encode a tag's components to bytes.

        Raises:
            TypeMismatchError: If a component does not fit the tag's data type
        """
        if tag.data_type in (ExifTagType.BYTE, ExifTagType.ASCII, ExifTagType.UNDEFINED):
            return bytes(tag.value)

        code = _STRUCT_CODES[tag.data_type]
        try:
            if tag.data_type in RATIONAL_TYPES:
                flat = []
                for rational in tag.value:
                    flat.extend((rational.numerator, rational.denominator))
                return struct.pack(f'{self.endian}{len(flat)}{code}', *flat)
            return struct.pack(f'{self.endian}{len(tag.value)}{code}', *tag.value)
        except struct.error as e:
            raise TypeMismatchError(
                f"Cannot encode {tag.name} as {tag.data_type.name}: {e}"
            ) from e
