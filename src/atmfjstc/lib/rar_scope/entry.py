import logging

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from atmfjstc.lib.iso_timestamp import ISOTimestamp, iso_from_datetime

from atmfjstc.lib.rar_scope.byte_fields import decode_le
from atmfjstc.lib.rar_scope.dos_time import datetime_from_dos_timestamp
from atmfjstc.lib.rar_scope.errors import RarTruncatedError
from atmfjstc.lib.rar_scope.reader import RarArchiveReader
from atmfjstc.lib.rar_scope.tables import RarBlockType, RarFileHeaderFlags, host_os_name, compression_method_name, \
    version_string


LOG = logging.getLogger(__name__)


FIXED_HEADER_SIZE = 32
LARGE_FILE_EXTENSION_SIZE = 8


@dataclass(frozen=True)
class RarEntry:
    """
    The metadata for an entry in a RAR archive, as recorded in its file header block.

    Objects of this type are inert values. They remain valid after the archive they were read from is closed.

    Attributes:
        name: The entry name, decoded from `raw_name` using the encoding the archive was opened with. Undecodable
            bytes are replaced.
        raw_name: The entry name, exactly as stored.
        timestamp: The modification time of the entry, as a naive `datetime` in local time (2-second resolution).
        size: The uncompressed size, in bytes.
        compressed_size: The size of the stored (compressed) data, in bytes. No relationship with `size` is
            enforced; archivers may legitimately store data larger than the original.
        crc: The CRC-32 of the uncompressed data, as recorded in the header. It is not verified.
        is_directory: Whether the entry is a directory.
        host_os: The name of the OS the entry was archived under, e.g. ``'Win32'``, or ``'Unknown'``.
        method: The name of the compression method, e.g. ``'Normal Compression'``, or ``'Unknown'``.
        version: The RAR version needed to extract the entry, as a ``'major.minor'`` string.
        flags: The raw header flags, as a `RarFileHeaderFlags`.
        host_os_code: The raw host OS byte.
        method_code: The raw compression method byte.
        version_code: The raw version byte.
        header_offset: The position of the file header block within the archive file object.
        header_length: The total length of the file header block, as declared in the header.
    """

    name: str
    raw_name: bytes
    timestamp: datetime
    size: int
    compressed_size: int
    crc: int
    is_directory: bool
    host_os: str
    method: str
    version: str

    flags: RarFileHeaderFlags = RarFileHeaderFlags(0)
    host_os_code: Optional[int] = None
    method_code: Optional[int] = None
    version_code: Optional[int] = None
    header_offset: Optional[int] = None
    header_length: Optional[int] = None

    @property
    def iso_timestamp(self) -> ISOTimestamp:
        return iso_from_datetime(self.timestamp)

    @property
    def is_large(self) -> bool:
        return (self.flags & RarFileHeaderFlags.LARGE) == RarFileHeaderFlags.LARGE


def decode_next_entry(reader: RarArchiveReader, name_encoding: str = 'utf-8') -> Optional[RarEntry]:
    """
    Decodes the header block at the current position of the reader.

    If the block is a file header, all of its fields are decoded, and the reader is advanced past the rest of the
    header and the entry data, which is never read.

    Only the first 32 bytes of the block are read before its type is known. They are read in a single call: if the
    file object returns fewer, the read is not retried and the missing fields decode as zero.

    Args:
        reader: The reader for the archive, positioned at the start of a header block.
        name_encoding: The codec used to decode the entry name.

    Returns:
        The decoded entry, or None if the block is not a file header. In the latter case, the 32 bytes already read
        are not given back, so the reader cannot be used to decode any further blocks.

    Raises:
        RarTruncatedError: If the data ends before the block, or in the middle of the entry name or size extension.
        RarIoError: For any other failure in reading the file object.
    """
    header_offset = reader.tell()

    buf = reader.read_once(FIXED_HEADER_SIZE)
    if len(buf) == 0:
        raise RarTruncatedError(header_offset, FIXED_HEADER_SIZE, 0, 'header block')

    block_type = decode_le(buf, 2, 2)
    if block_type != RarBlockType.FILE_HEADER:
        LOG.debug("Stopping at block of type 0x%02x at position %d", block_type, header_offset)
        return None

    flags = RarFileHeaderFlags(decode_le(buf, 3, 4))

    compressed_size = decode_le(buf, 7, 10)
    size = decode_le(buf, 11, 14)

    high_words = b''
    if (flags & RarFileHeaderFlags.LARGE) == RarFileHeaderFlags.LARGE:
        high_words = reader.read_exact(LARGE_FILE_EXTENSION_SIZE, 'high words of the entry sizes')

        compressed_size = (decode_le(high_words, 0, 3) << 32) | compressed_size
        size = (decode_le(high_words, 4, 7) << 32) | size

    header_length = decode_le(buf, 5, 6)

    host_os_code = decode_le(buf, 15, 15)
    crc = decode_le(buf, 16, 19)
    dos_time = decode_le(buf, 20, 23)
    version_code = decode_le(buf, 24, 24)
    method_code = decode_le(buf, 25, 25)

    name_length = decode_le(buf, 26, 27)
    raw_name = reader.read_exact(name_length, 'entry name')

    header_read = FIXED_HEADER_SIZE + len(raw_name) + len(high_words)

    rest_of_header = header_length - header_read
    if rest_of_header < 0:
        LOG.warning(
            "File header at position %d declares length %d, less than the %d bytes already read",
            header_offset, header_length, header_read
        )

    reader.skip(rest_of_header + compressed_size, 'rest of the file header and entry data')

    entry = RarEntry(
        name=raw_name.decode(name_encoding, errors='replace'),
        raw_name=raw_name,
        timestamp=datetime_from_dos_timestamp(dos_time),
        size=size,
        compressed_size=compressed_size,
        crc=crc,
        is_directory=(flags & RarFileHeaderFlags.DIRECTORY) == RarFileHeaderFlags.DIRECTORY,
        host_os=host_os_name(host_os_code),
        method=compression_method_name(method_code),
        version=version_string(version_code),
        flags=flags,
        host_os_code=host_os_code,
        method_code=method_code,
        version_code=version_code,
        header_offset=header_offset,
        header_length=header_length,
    )

    LOG.debug("Decoded entry %r at position %d", entry.name, header_offset)

    return entry
